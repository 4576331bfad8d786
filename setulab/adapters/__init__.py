"""Adapters — container runtime bindings.

Public re-exports for convenient access.
"""

from __future__ import annotations

from setulab.adapters.base import RuntimeClient
from setulab.adapters.containers.docker import DockerRuntime
from setulab.adapters.mock import MockRuntime
from setulab.core.config.loader import Settings

__all__ = [
    "DockerRuntime",
    "MockRuntime",
    "RuntimeClient",
    "create_runtime",
]


def create_runtime(settings: Settings | None = None, *, mock: bool = False) -> RuntimeClient:
    """Build the runtime client for this process.

    Args:
        settings: Loaded settings (compose command override, timeout).
        mock: Return an in-memory MockRuntime instead of docker.
    """
    if mock:
        return MockRuntime()
    settings = settings or Settings()
    return DockerRuntime(
        compose_command=settings.compose_command,
        timeout=settings.command_timeout,
    )
