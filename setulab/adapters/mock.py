"""
Mock runtime — in-memory test double for every runtime operation.

Used by ``--mock`` and by the test suite to exercise the lifecycle
without touching docker.  Configurable per operation (and optionally
per target) to fail.
"""

from __future__ import annotations

from pathlib import Path

from setulab.adapters.base import RuntimeClient
from setulab.core.models.receipt import Receipt


class MockRuntime(RuntimeClient):
    """In-memory runtime.

    By default everything is installed, the daemon answers, and every
    operation succeeds.  ``up``/``down`` track which compose projects are
    running so ``ps`` reflects them.
    """

    def __init__(
        self,
        available: bool = True,
        compose: bool = True,
        daemon: bool = True,
        networks: set[str] | None = None,
    ):
        self._available = available
        self._compose = compose
        self._daemon = daemon
        self.networks: set[str] = set(networks or ())
        self.running: set[str] = set()
        self._failures: dict[tuple[str, str | None], str] = {}
        self._call_log: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[tuple[str, str]]:
        """``(operation, target)`` for every call received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def calls(self, operation: str) -> list[str]:
        """Targets of every call to ``operation``."""
        return [t for op, t in self._call_log if op == operation]

    def set_failure(
        self,
        operation: str,
        target: str | None = None,
        error: str = "Mock failure",
    ) -> None:
        """Configure ``operation`` to fail, for one target or for all."""
        self._failures[(operation, target)] = error

    def reset(self) -> None:
        """Clear call log, failures and running projects."""
        self._call_log.clear()
        self._failures.clear()
        self.running.clear()

    # ── Availability ────────────────────────────────────────────

    def is_available(self) -> bool:
        return self._available

    def compose_available(self) -> bool:
        return self._available and self._compose

    def daemon_running(self) -> bool:
        return self._available and self._daemon

    # ── Operations ──────────────────────────────────────────────

    def up(self, compose_file: Path) -> Receipt:
        receipt = self._record("up", str(compose_file))
        if receipt.ok:
            self.running.add(str(compose_file))
        return receipt

    def down(self, compose_file: Path) -> Receipt:
        receipt = self._record("down", str(compose_file))
        if receipt.ok:
            self.running.discard(str(compose_file))
        return receipt

    def ps(self, compose_file: Path) -> Receipt:
        target = str(compose_file)
        receipt = self._record("ps", target)
        if receipt.ok:
            services = []
            if target in self.running:
                services.append({
                    "name": compose_file.parent.name,
                    "service": compose_file.parent.name,
                    "state": "running",
                    "status": "Up",
                    "ports": "",
                    "image": "",
                })
            receipt.metadata["services"] = services
        return receipt

    def logs(self, compose_file: Path, *, tail: int = 100) -> Receipt:
        return self._record("logs", str(compose_file), output=f"[mock] last {tail} lines")

    def network_exists(self, network: str) -> bool:
        self._call_log.append(("network-inspect", network))
        return network in self.networks

    def create_network(self, network: str) -> Receipt:
        receipt = self._record("network-create", network)
        if receipt.ok:
            self.networks.add(network)
        return receipt

    def run_container(self, image: str) -> Receipt:
        return self._record("run", image, output="Hello from Docker!")

    def _record(self, operation: str, target: str, output: str = "[mock] executed") -> Receipt:
        self._call_log.append((operation, target))

        error = self._failures.get((operation, target), self._failures.get((operation, None)))
        if error is not None:
            return Receipt.failure(
                adapter=self.name,
                operation=operation,
                target=target,
                error=error,
            )

        return Receipt.success(
            adapter=self.name,
            operation=operation,
            target=target,
            output=output,
            metadata={"mock": True},
        )
