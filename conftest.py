"""Root conftest.py: makes the local faultline package take precedence over any installed version."""

from __future__ import annotations

import sys
from pathlib import Path

# Insert src/ at the front of sys.path so that `import faultline` always
# resolves to the local source tree, and the project root so that
# `tests.helpers` is importable from every test module.
_project_root = Path(__file__).parent
for _path in (str(_project_root), str(_project_root / "src")):
    if _path not in sys.path:
        sys.path.insert(0, _path)
