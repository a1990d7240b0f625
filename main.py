"""Run the helpdesk API from a source checkout: ``uvicorn main:app`` or ``python main.py``."""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from eventinsight.__main__ import main  # noqa: E402
from eventinsight.api.app import app  # noqa: E402

__all__ = ("app",)

if __name__ == "__main__":
    main()
