"""Unit tests for module import order.

Each module is imported first in a fresh interpreter, so an import cycle
cannot be hidden by modules another test already loaded.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


@pytest.mark.parametrize(
    "module",
    [
        "healthagent.main",
        "healthagent.api.deps",
        "healthagent.infrastructure.ai.gemini_client",
        "healthagent.infrastructure.ai.factory",
        "healthagent.mcp.session",
        "healthagent.domain.chat",
        "healthagent.domain.chat.service",
    ],
)
def test_module_imports_first_in_fresh_interpreter(module):
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    env.setdefault("APP_ENV", "development")

    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        capture_output=True,
        text=True,
        env=env,
        timeout=120,
    )

    assert result.returncode == 0, result.stderr
