from __future__ import annotations

import sys
from pathlib import Path


def app_base_dir() -> Path:
    """
    Return the base directory of bundled resources.

    - PyInstaller onefile/onedir: sys._MEIPASS (extraction dir).
    - Development: the project root, where `settings/` lives.
    """
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        return Path(sys._MEIPASS)  # type: ignore[attr-defined]
    # qvq/utils/resource_paths.py -> parents[2] is the project root.
    return Path(__file__).resolve().parents[2]


def settings_dir() -> Path:
    """Directory holding shortcuts.json."""
    return app_base_dir() / "settings"
