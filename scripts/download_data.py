"""Fetch ``water_potability.csv`` from Kaggle into ``data/raw/``.

The `adityakadiwal/water-potability` dataset is loaded through
``kagglehub`` and checked with the same cleaning routine the workflow
uses before it is written to disk, so a truncated or renamed download
is caught here rather than halfway through a comparison run.  A Kaggle
API token must be configured first (see
<https://github.com/Kaggle/kagglehub#authenticate>).

Usage::

    python scripts/download_data.py [--dest PATH] [--force]
"""

import argparse
import sys
from pathlib import Path

try:
    import kagglehub
    from kagglehub import KaggleDatasetAdapter
except ImportError as e:
    raise ImportError(
        "kagglehub is required for this script. Install the project with `pip install -e .[data]`."
    ) from e

PROJECT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_DIR / "src"))

from potability.modeling.data import COLUMNS, clean_water_data  # noqa: E402
from potability.modeling.utils.logging_utils import logger  # noqa: E402

KAGGLE_DATASET = "adityakadiwal/water-potability"
KAGGLE_FILE = "water_potability.csv"


def download_dataset(dest: Path, force: bool = False) -> Path:
    if dest.exists() and not force:
        logger.info(f"{dest} already exists; pass --force to download again")
        return dest

    logger.info(f"Downloading {KAGGLE_FILE} from {KAGGLE_DATASET}")
    df = kagglehub.dataset_load(KaggleDatasetAdapter.PANDAS, KAGGLE_DATASET, KAGGLE_FILE)
    cleaned = clean_water_data(df)
    logger.info(
        f"Downloaded {len(cleaned)} rows; "
        f"{int(cleaned['Potability'].sum())} potable, "
        f"{int(df[COLUMNS[:-1]].isna().any(axis=1).sum())} with missing measurements"
    )

    dest.parent.mkdir(parents=True, exist_ok=True)
    df[COLUMNS].to_csv(dest, index=False)
    logger.info(f"Saved dataset to {dest}")
    return dest


def main() -> None:
    parser = argparse.ArgumentParser(description="Download the water potability dataset.")
    parser.add_argument("--dest", type=Path, default=PROJECT_DIR / "data" / "raw" / KAGGLE_FILE)
    parser.add_argument("--force", action="store_true", help="Overwrite an existing file")
    args = parser.parse_args()
    download_dataset(args.dest, force=args.force)


if __name__ == "__main__":
    main()
