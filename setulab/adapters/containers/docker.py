"""
Docker runtime — compose, network and container operations.

Uses the docker CLI — never the Docker API directly.  Compose commands go
through the ``docker compose`` plugin when it answers, otherwise through a
standalone ``docker-compose`` binary.
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import time
from pathlib import Path

from setulab.adapters.base import RuntimeClient
from setulab.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

_PLUGIN_COMPOSE = ["docker", "compose"]
_STANDALONE_COMPOSE = ["docker-compose"]


class DockerRuntime(RuntimeClient):
    """Docker and Docker Compose through their CLIs.

    Args:
        compose_command: Explicit compose invocation, e.g. ``["docker-compose"]``.
            Auto-detected when None.
        timeout: Default per-command timeout in seconds.
    """

    def __init__(
        self,
        compose_command: list[str] | None = None,
        timeout: int = 300,
    ):
        self._compose_override = list(compose_command) if compose_command else None
        self._compose_cmd: list[str] | None = None
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "docker"

    # ── Availability ────────────────────────────────────────────

    def is_available(self) -> bool:
        return shutil.which("docker") is not None

    def compose_available(self) -> bool:
        return self.compose_command() is not None

    def daemon_running(self) -> bool:
        if not self.is_available():
            return False
        try:
            r = self._run(["docker", "info"], timeout=15)
        except (OSError, subprocess.TimeoutExpired):
            return False
        return r.returncode == 0

    def compose_command(self) -> list[str] | None:
        """Resolve the compose invocation once per instance."""
        if self._compose_cmd is not None:
            return self._compose_cmd

        if self._compose_override:
            if shutil.which(self._compose_override[0]):
                self._compose_cmd = self._compose_override
            return self._compose_cmd

        if self.is_available():
            try:
                r = self._run([*_PLUGIN_COMPOSE, "version"], timeout=15)
                if r.returncode == 0:
                    self._compose_cmd = _PLUGIN_COMPOSE
                    return self._compose_cmd
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.debug("docker compose version check failed: %s", e)

        if shutil.which(_STANDALONE_COMPOSE[0]):
            logger.debug("docker compose plugin not found, using docker-compose")
            self._compose_cmd = _STANDALONE_COMPOSE

        return self._compose_cmd

    # ── Compose operations ──────────────────────────────────────

    def up(self, compose_file: Path) -> Receipt:
        return self._compose("up", compose_file, ["up", "-d"])

    def down(self, compose_file: Path) -> Receipt:
        if not compose_file.is_file():
            return Receipt.skip(
                adapter=self.name,
                operation="down",
                reason=f"No {compose_file.name} in {compose_file.parent}",
                target=str(compose_file),
            )
        return self._compose("down", compose_file, ["down"])

    def ps(self, compose_file: Path) -> Receipt:
        receipt = self._compose(
            "ps", compose_file, ["ps", "--all", "--format", "json"], timeout=30,
        )
        if receipt.ok:
            receipt.metadata["services"] = parse_compose_ps(receipt.output)
        return receipt

    def logs(self, compose_file: Path, *, tail: int = 100) -> Receipt:
        return self._compose(
            "logs", compose_file, ["logs", "--no-color", f"--tail={tail}"], timeout=30,
        )

    # ── Networks and containers ─────────────────────────────────

    def network_exists(self, network: str) -> bool:
        try:
            r = self._run(["docker", "network", "inspect", network], timeout=15)
        except (OSError, subprocess.TimeoutExpired):
            return False
        return r.returncode == 0

    def create_network(self, network: str) -> Receipt:
        return self._receipt(
            "network-create", network, ["docker", "network", "create", network], timeout=30,
        )

    def run_container(self, image: str) -> Receipt:
        return self._receipt(
            "run", image, ["docker", "run", "--rm", image], timeout=self._timeout,
        )

    # ── Helpers ─────────────────────────────────────────────────

    def _compose(
        self,
        operation: str,
        compose_file: Path,
        args: list[str],
        timeout: int | None = None,
    ) -> Receipt:
        """Run a compose command in the instance directory."""
        cmd = self.compose_command()
        if cmd is None:
            return Receipt.failure(
                adapter=self.name,
                operation=operation,
                target=str(compose_file),
                error="Docker Compose is not installed",
            )
        return self._receipt(
            operation,
            str(compose_file),
            [*cmd, "-f", compose_file.name, *args],
            cwd=compose_file.parent,
            timeout=timeout,
        )

    def _receipt(
        self,
        operation: str,
        target: str,
        cmd: list[str],
        *,
        cwd: Path | None = None,
        timeout: int | None = None,
    ) -> Receipt:
        """Run ``cmd`` and fold the outcome into a Receipt."""
        timeout = timeout or self._timeout
        logger.debug("Executing: %s (cwd=%s)", " ".join(cmd), cwd)
        start = time.monotonic()
        try:
            result = self._run(cmd, cwd=cwd, timeout=timeout)
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                operation=operation,
                target=target,
                error=f"Command timed out after {timeout}s",
                metadata={"command": cmd},
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                operation=operation,
                target=target,
                error=f"Command execution error: {e}",
                metadata={"command": cmd},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = result.stdout.strip()
        stderr = result.stderr.strip()

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                operation=operation,
                target=target,
                output=stdout,
                duration_ms=elapsed_ms,
                metadata={"command": cmd, "return_code": 0, "stderr": stderr},
            )
        return Receipt.failure(
            adapter=self.name,
            operation=operation,
            target=target,
            error=stderr or f"Command exited with code {result.returncode}",
            duration_ms=elapsed_ms,
            metadata={"command": cmd, "return_code": result.returncode, "stdout": stdout},
        )

    @staticmethod
    def _run(
        cmd: list[str],
        *,
        cwd: Path | None = None,
        timeout: int = 60,
    ) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout,
        )


def parse_compose_ps(output: str) -> list[dict]:
    """Parse ``compose ps --format json`` output.

    Depending on the compose version the output is either a JSON array
    or one JSON object per line.
    """
    output = output.strip()
    if not output:
        return []

    try:
        parsed = json.loads(output)
        raw_list = parsed if isinstance(parsed, list) else [parsed]
    except json.JSONDecodeError:
        raw_list = []
        for line in output.splitlines():
            try:
                raw_list.append(json.loads(line))
            except json.JSONDecodeError:
                continue

    services = []
    for svc in raw_list:
        if not isinstance(svc, dict):
            continue
        services.append({
            "name": svc.get("Name", svc.get("Service", "")),
            "service": svc.get("Service", ""),
            "state": svc.get("State", ""),
            "status": svc.get("Status", ""),
            "ports": svc.get("Ports", ""),
            "image": svc.get("Image", ""),
        })
    return services
