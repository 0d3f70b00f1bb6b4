"""End-to-end tests running the harness as a separate process."""

import os
import subprocess
import sys
import time
from pathlib import Path


def test_exits_promptly_when_file_read_hangs(tmp_path: Path) -> None:
    """A check stuck reading a FIFO times out without delaying process exit."""
    fifo = tmp_path / "update-payload-key.pub.pem"
    os.mkfifo(fifo)
    definition = tmp_path / "checks.yaml"
    definition.write_text(
        f"""
version: "1.0"
checks:
  - name: update-engine-rsa-key
    timeout: 0.5s
    probe:
      kind: content-hash
      path: {fifo}
      digest: d410d94dc56a1cba8df71c94ea6925811e44b09416f66958ab7a453f0731d80e
"""
    )

    started = time.monotonic()
    result = subprocess.run(
        [sys.executable, "-m", "host_validation", "--config", str(definition)],
        capture_output=True,
        text=True,
        timeout=60,
        check=False,
    )
    elapsed = time.monotonic() - started

    assert result.returncode == 1
    assert "update-engine-rsa-key: timed out" in result.stdout
    assert elapsed < 30
