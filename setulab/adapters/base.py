"""
Runtime client base — the contract between setulab and the container runtime.

The catalog lifecycle only talks to the runtime through this interface,
never to the docker CLI directly.  That keeps the lifecycle testable
against an in-memory fake.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from setulab.core.models.receipt import Receipt


class RuntimeClient(ABC):
    """Abstract base class for container runtimes.

    Operations return receipts.  They NEVER raise for a failed external
    command; failures are captured in the Receipt with status='failed'.

    To add a runtime:
        1. Subclass RuntimeClient
        2. Implement every abstract method
        3. Return it from ``setulab.adapters.create_runtime``
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The runtime identifier (e.g., 'docker', 'mock')."""

    # ── Availability ────────────────────────────────────────────

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the runtime CLI exists on PATH.

        Should be fast and never raise.
        """

    @abstractmethod
    def compose_available(self) -> bool:
        """Whether a compose implementation (plugin or standalone) exists."""

    @abstractmethod
    def daemon_running(self) -> bool:
        """Whether the runtime daemon answers."""

    # ── Compose operations ──────────────────────────────────────

    @abstractmethod
    def up(self, compose_file: Path) -> Receipt:
        """Bring the compose project up in the background."""

    @abstractmethod
    def down(self, compose_file: Path) -> Receipt:
        """Tear the compose project down."""

    @abstractmethod
    def ps(self, compose_file: Path) -> Receipt:
        """Process-table view of the compose project.

        ``metadata["services"]`` holds a list of
        ``{name, state, status, ports, image}`` dicts.
        """

    @abstractmethod
    def logs(self, compose_file: Path, *, tail: int = 100) -> Receipt:
        """Recent log lines of the compose project."""

    # ── Networks and containers ─────────────────────────────────

    @abstractmethod
    def network_exists(self, network: str) -> bool:
        """Whether the named network exists."""

    @abstractmethod
    def create_network(self, network: str) -> Receipt:
        """Create the named network."""

    @abstractmethod
    def run_container(self, image: str) -> Receipt:
        """Run a throwaway container (``--rm``) to completion."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
