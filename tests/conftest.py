import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'fsmkit'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from fsmkit.core.state import TransitionRegistry


@pytest.fixture
def registry() -> TransitionRegistry:
    """Fresh registry with a few handlers shared by most tests."""
    reg: TransitionRegistry = TransitionRegistry()
    reg.register_condition("always", lambda ctx: True)
    reg.register_condition("never", lambda ctx: False)
    reg.register_condition("timer_elapsed", lambda ctx: ctx.get("elapsed", 0) >= ctx.get("limit", 30))
    reg.register_side_effect(
        "log_change",
        lambda ctx, frm, to: ctx.setdefault("log", []).append((frm, to)),
    )
    return reg
