"""pyteams test suite."""

from __future__ import annotations

import sys
from pathlib import Path


# Make ``import pyteams`` work from a plain checkout.
_SRC = Path(__file__).resolve().parents[1] / "src"
if _SRC.is_dir() and str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))
