"""Entry-point modules import cleanly in a fresh interpreter."""

import subprocess
import sys
from pathlib import Path

import pytest

BACKEND_DIR = Path(__file__).resolve().parents[1]


@pytest.mark.parametrize("module", [
    "adcanvas.main",
    "adcanvas.registry",
    "adcanvas.agents.compliance_reviewer",
    "adcanvas.validators",
])
def test_module_imports_in_fresh_interpreter(module):
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=BACKEND_DIR,
        capture_output=True,
        text=True,
        timeout=60,
    )
    assert result.returncode == 0, result.stderr
