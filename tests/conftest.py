"""Pytest configuration for the ISAAC64 test suite."""
from __future__ import annotations

import sys
from pathlib import Path

# Make the ``isaac64`` package importable when the suite runs from a source
# checkout without an editable install.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
