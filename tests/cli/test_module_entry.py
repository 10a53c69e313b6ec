from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

from turnledger.cassette.store import CassetteStore
from turnledger.models import ProviderResult


def _run_cli(args: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env.setdefault("PYTHONPATH", str(cwd / "src"))
    return subprocess.run(
        [sys.executable, "-m", "turnledger", *args],
        cwd=cwd,
        text=True,
        capture_output=True,
        env=env,
    )


def test_python_dash_m_verifies_cassettes(tmp_path: Path) -> None:
    root = Path(__file__).resolve().parents[2]
    CassetteStore(tmp_path).save("a" * 64, {}, ProviderResult(content="ok"))

    result = _run_cli(["cassettes", "verify", "--dir", str(tmp_path)], cwd=root)

    assert result.returncode == 0
    assert "1 cassette(s) verified" in result.stdout
