"""Run the water potability model comparison from a source checkout.

This is a thin wrapper around :func:`potability.app.main.main` so the
workflow can be started with ``python scripts/train.py`` without
installing the package.  All command-line flags are forwarded.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the ``src`` directory is on the Python path when running this
# script directly from the project root.
CURRENT_DIR = Path(__file__).resolve().parent
SRC_DIR = CURRENT_DIR.parent / "src"
sys.path.insert(0, str(SRC_DIR))

from potability.app.main import main  # noqa: E402


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
