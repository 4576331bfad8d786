"""Prerequisite resolver — host detection, version gates, installers.

Public re-exports for convenient access.
"""

from setulab.core.services.prereq.detection import (
    ARCH_MAP,
    VERSION_COMMANDS,
    check_tool,
    detect_os,
    get_tool_version,
    normalize_arch,
    system_info,
)
from setulab.core.services.prereq.installers import (
    INSTALL_RECIPES,
    TASK_VERSION,
    install_tool,
    plan_install,
)
from setulab.core.services.prereq.resolver import (
    COMPOSE_MIN_VERSION,
    DEFAULT_REQUIREMENTS,
    DOCKER_MIN_VERSION,
    evaluate,
    resolve,
    verify_runtime,
)
from setulab.core.services.prereq.version import (
    extract_version,
    normalize_major_minor,
    version_at_least,
)

__all__ = [
    "ARCH_MAP",
    "COMPOSE_MIN_VERSION",
    "DEFAULT_REQUIREMENTS",
    "DOCKER_MIN_VERSION",
    "INSTALL_RECIPES",
    "TASK_VERSION",
    "VERSION_COMMANDS",
    "check_tool",
    "detect_os",
    "evaluate",
    "extract_version",
    "get_tool_version",
    "install_tool",
    "normalize_arch",
    "normalize_major_minor",
    "plan_install",
    "resolve",
    "system_info",
    "verify_runtime",
]
