"""
Process-wide preconditions — the gate in front of every catalog verb.

``check_runtime`` raises when the container runtime cannot be used at
all; there is nothing per-resource about it, so the dispatcher checks it
once before fanning out.  ``ensure_base_structure`` and ``ensure_network``
are idempotent and run before ``setup``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from setulab.adapters.base import RuntimeClient
from setulab.core.models.resource import CATALOG_TYPES

logger = logging.getLogger(__name__)

_PREREQ_HINT = "Run 'setulab prereq' to check and install prerequisites"


class PreconditionError(Exception):
    """The runtime is absent or unusable.

    Attributes:
        remediation: What the operator should do about it.
    """

    def __init__(self, message: str, remediation: str = ""):
        self.remediation = remediation
        super().__init__(message)


def check_runtime(runtime: RuntimeClient) -> None:
    """Verify docker, compose and the daemon, in that order.

    Raises:
        PreconditionError: on the first missing piece.
    """
    logger.info("Checking dependencies...")

    if not runtime.is_available():
        raise PreconditionError("Docker is not installed.", _PREREQ_HINT)

    if not runtime.compose_available():
        raise PreconditionError("Docker Compose is not installed.", _PREREQ_HINT)

    if not runtime.daemon_running():
        raise PreconditionError(
            "Docker daemon is not running.",
            "Start Docker with: sudo systemctl start docker",
        )

    logger.info("Dependencies check passed")


def ensure_base_structure(base_dir: Path) -> list[Path]:
    """Create ``<base>/<catalog>`` for every catalog type.

    Returns:
        The catalog directories, existing or new.
    """
    dirs = []
    for catalog in CATALOG_TYPES:
        path = base_dir / catalog
        path.mkdir(parents=True, exist_ok=True)
        dirs.append(path)
    logger.debug("Base structure ready under %s", base_dir)
    return dirs


def ensure_network(runtime: RuntimeClient, network: str) -> bool:
    """Create the shared external network if it does not exist.

    Returns:
        True if the network was created by this call, False if it was
        already there.

    Raises:
        PreconditionError: the network is missing and could not be created.
    """
    if runtime.network_exists(network):
        logger.debug("Docker network '%s' already exists", network)
        return False

    logger.info("Creating Docker network '%s'...", network)
    receipt = runtime.create_network(network)
    if not receipt.ok:
        raise PreconditionError(
            f"Could not create Docker network '{network}': {receipt.error}",
            f"Create it manually with: docker network create {network}",
        )
    return True
