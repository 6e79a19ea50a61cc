import sys
from pathlib import Path

# Allow `pytest` from the repo root or from backend/ without an install
_BACKEND = Path(__file__).resolve().parent.parent
if str(_BACKEND) not in sys.path:
    sys.path.insert(0, str(_BACKEND))
