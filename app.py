from __future__ import annotations

import sys
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
import streamlit as st

# Insert src into sys.path to import project modules from a source checkout
PROJECT_DIR = Path(__file__).resolve().parent
sys.path.insert(0, str(PROJECT_DIR / "src"))

from potability.app.main import run  # noqa: E402
from potability.configuration import ConfigurationManager  # noqa: E402
from potability.modeling.data import FEATURES, load_water_data  # noqa: E402
from potability.modeling.data.load_data import OUTCOME  # noqa: E402
from potability.modeling.utils.exceptions import PotabilityError  # noqa: E402

CONFIG_PATH = PROJECT_DIR / "configs" / "config.yaml"


def load_dataset() -> pd.DataFrame:
    """Load the water potability dataset with absolute path resolution."""
    config = ConfigurationManager.load(config_path=CONFIG_PATH)
    return load_water_data(PROJECT_DIR / config.data.raw_file)


def overview_tab(df: pd.DataFrame) -> None:
    st.header("Data Overview")
    st.write(f"Number of samples: {len(df)}")
    st.write(f"Number of features: {len(FEATURES)}")
    st.write("First five rows of the dataset:")
    st.dataframe(df.head())

    st.subheader("Class balance")
    st.bar_chart(df[OUTCOME].value_counts())

    st.subheader("Missing values per feature")
    st.bar_chart(df[FEATURES].isna().mean().rename("missing fraction"))

    st.subheader("Feature distributions by outcome")
    for col in FEATURES:
        plt.figure(figsize=(8, 3))

        plt.subplot(1, 2, 1)
        sns.histplot(data=df, x=col, hue=OUTCOME, kde=True, element="step", stat="density", common_norm=False)
        plt.title(f"Histogram of {col}")

        plt.subplot(1, 2, 2)
        sns.boxplot(data=df, x=OUTCOME, y=col)
        plt.title(f"Boxplot of {col}")

        plt.tight_layout()
        st.pyplot(plt.gcf())
        plt.close()

    st.subheader("Correlation matrix")
    plt.figure(figsize=(6, 5))
    sns.heatmap(df[FEATURES].corr(), annot=True, cmap="coolwarm", fmt=".2f", vmin=-1, vmax=1, center=0)
    plt.tight_layout()
    st.pyplot(plt.gcf())
    plt.close()


def compare_tab(df: pd.DataFrame) -> None:
    st.header("Compare Models")
    st.write(
        "Tune logistic regression, a decision tree and gradient boosting with stratified "
        "cross-validation on the training split, then score each selected model once on the test split."
    )
    cv_splits = st.slider("Cross-validation folds", 3, 10, 5)
    n_iter = st.slider("Random configurations for gradient boosting", 1, 30, 5)
    if st.button("Run comparison", key="compare_button"):
        settings = ConfigurationManager.load(
            config_path=CONFIG_PATH,
            overrides={
                "tuning": {"cv_splits": cv_splits, "n_jobs": -1},
                "model": {
                    "search": {
                        "decision_tree": {"strategy": "grid"},
                        "gradient_boosting": {"strategy": "random", "n_iter": n_iter},
                    }
                },
                "report": {"make_plots": False, "artifacts_dir": str(PROJECT_DIR / "artifacts")},
            },
        )
        with st.spinner("Tuning models..."):
            try:
                result = run(settings, data=df[FEATURES + ["Potability"]])
            except PotabilityError as e:
                st.error(str(e))
                result = None
        if result is not None:
            st.session_state["workflow_result"] = result
            st.success(f"Done: {result.n_train} training rows, {result.n_test} test rows.")

    result = st.session_state.get("workflow_result")
    if result is None:
        st.info("No comparison has been run yet.")
        return

    st.subheader("Ranking")
    st.dataframe(result.ranking)

    fig, ax = plt.subplots(figsize=(8, 4))
    sns.barplot(x="label", y="roc_auc", data=result.ranking, hue="label", legend=False, palette="viridis", ax=ax)
    ax.set_ylim(0, 1)
    ax.set_title("Test ROC AUC by model")
    st.pyplot(fig)
    plt.close(fig)

    fig, ax = plt.subplots(figsize=(6, 6))
    for ev in result.evaluations:
        if ev.roc_points:
            ax.plot(ev.roc_points["fpr"], ev.roc_points["tpr"], label=f"{ev.label} ({ev.metric('roc_auc'):.3f})")
    ax.plot([0, 1], [0, 1], linestyle="--", color="grey")
    ax.set_xlabel("False positive rate")
    ax.set_ylabel("True positive rate")
    ax.legend(loc="lower right")
    st.pyplot(fig)
    plt.close(fig)


def predict_tab(df: pd.DataFrame) -> None:
    st.header("Make a Prediction")
    result = st.session_state.get("workflow_result")
    if result is None:
        st.info("Please run the comparison in the *Compare Models* tab before making predictions.")
        return
    best = result.classifier.best_model()
    st.write(f"Using the top-ranked model: **{best.label}** ({best.params})")

    values = {}
    cols = st.columns(3)
    for idx, col in enumerate(FEATURES):
        series = df[col].dropna()
        with cols[idx % 3]:
            values[col] = st.number_input(
                col,
                min_value=float(series.min()),
                max_value=float(series.max()),
                value=float(series.median()),
            )
    if st.button("Predict", key="predict_button"):
        input_df = pd.DataFrame([values], columns=FEATURES)
        try:
            prob = float(best.model.predict_proba(input_df)[0])
        except Exception as e:
            st.error(f"Prediction failed: {e}")
        else:
            st.subheader("Prediction Results")
            st.write(f"Probability that the sample is potable: **{prob:.2%}**")
            if prob >= 0.5:
                st.success("The model predicts the water is potable.")
            else:
                st.warning("The model predicts the water is not potable.")


def visualisations_tab() -> None:
    st.header("Visualisations")
    vis_dir = PROJECT_DIR / "artifacts" / "visualisations"
    images = sorted(vis_dir.glob("*.png")) + sorted((PROJECT_DIR / "artifacts").glob("*.png"))
    if not images:
        st.info("No pre‑computed visualisations found. Run scripts/train.py to generate them.")
        return
    cols = st.columns(3)
    for idx, img_path in enumerate(images):
        with cols[idx % 3]:
            st.image(str(img_path), caption=img_path.name)


################################################################################
# Streamlit UI
################################################################################

def main() -> None:
    st.set_page_config(page_title="Water Potability Dashboard", page_icon="💧", layout="wide")
    st.title("💧 Water Potability Exploration & Model Comparison")

    @st.cache_data
    def get_dataset():
        return load_dataset()

    try:
        df = get_dataset()
    except (FileNotFoundError, PotabilityError) as e:
        st.error(f"Could not load the dataset: {e}. Run scripts/download_data.py first.")
        return

    tabs = st.tabs(["Overview", "Compare Models", "Predict", "Visualisations"])
    with tabs[0]:
        overview_tab(df)
    with tabs[1]:
        compare_tab(df)
    with tabs[2]:
        predict_tab(df)
    with tabs[3]:
        visualisations_tab()


if __name__ == "__main__":
    main()
