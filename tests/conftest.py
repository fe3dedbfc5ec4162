"""Test configuration.

Ensures the project root is on sys.path so `import egv_dp` and the shared
`tests.helpers` fixtures resolve when tests run from any working directory.
"""

from __future__ import annotations

import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
