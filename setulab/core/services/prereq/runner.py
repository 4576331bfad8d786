"""
Install step runner.

The single place where installer commands are executed.  Steps that
need root get a ``sudo`` prefix unless the process is already root;
sudo prompts on the terminal itself, so no password ever passes
through here.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from typing import Any

logger = logging.getLogger(__name__)

# Keep the tail of long installer output
_OUTPUT_TAIL = 2000


def run_step(
    cmd: list[str],
    *,
    needs_sudo: bool = False,
    timeout: int = 600,
    cwd: str | None = None,
) -> dict[str, Any]:
    """Run one install step.

    Args:
        cmd: Command list for ``subprocess.run()``.
        needs_sudo: Whether the command requires root.
        timeout: Seconds before the step is abandoned.
        cwd: Working directory for the command.

    Returns:
        ``{"ok": True, "stdout": "...", "elapsed_ms": N}`` on success,
        ``{"ok": False, "error": "...", ...}`` on failure.
    """
    if needs_sudo and os.geteuid() != 0:
        cmd = ["sudo"] + cmd

    logger.info("Running: %s", " ".join(cmd))
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            timeout=timeout,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        return {"ok": False, "error": f"Command timed out ({timeout}s)"}
    except OSError as e:
        logger.debug("Step could not start: %s", cmd, exc_info=True)
        return {"ok": False, "error": str(e)}

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = result.stdout[-_OUTPUT_TAIL:] if result.stdout else ""

    if result.returncode == 0:
        return {"ok": True, "stdout": stdout, "elapsed_ms": elapsed_ms}

    return {
        "ok": False,
        "error": f"Command failed (exit {result.returncode})",
        "stderr": result.stderr[-_OUTPUT_TAIL:] if result.stderr else "",
        "stdout": stdout,
        "elapsed_ms": elapsed_ms,
    }
