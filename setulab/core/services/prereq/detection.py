"""
Host and tool detection — read-only checks.

Reads ``/etc/os-release`` (or its fallbacks) and runs ``--version``
commands.  Nothing here installs or modifies anything.
"""

from __future__ import annotations

import getpass
import logging
import os
import platform
import re
import shutil
import subprocess
from pathlib import Path

from setulab.core.models.prereq import OSProfile, ToolCheck
from setulab.core.services.prereq.version import extract_version

logger = logging.getLogger(__name__)

OS_RELEASE = Path("/etc/os-release")
REDHAT_RELEASE = Path("/etc/redhat-release")
MEMINFO = Path("/proc/meminfo")

# uname -m → package architecture name; anything else passes through
ARCH_MAP: dict[str, str] = {
    "x86_64": "amd64",
    "aarch64": "arm64",
    "armv7l": "armv7",
}

# tool → (version command, pattern).  A None pattern means extract_version.
VERSION_COMMANDS: dict[str, tuple[list[str], str | None]] = {
    "docker":  (["docker", "--version"],            r"Docker version\s+v?(\d+\.\d+(?:\.\d+)?)"),
    "task":    (["task", "--version"],              None),
    "curl":    (["curl", "--version"],              r"curl\s+(\d+\.\d+\.\d+)"),
    "git":     (["git", "--version"],               r"git version\s+(\d+\.\d+\.\d+)"),
    "jq":      (["jq", "--version"],                r"(\d+\.\d+)"),
}

_COMPOSE_PLUGIN = ["docker", "compose", "version", "--short"]
_COMPOSE_STANDALONE = ["docker-compose", "--version"]


def normalize_arch(machine: str) -> str:
    """``x86_64`` → ``amd64``, ``aarch64`` → ``arm64``, ``armv7l`` → ``armv7``."""
    return ARCH_MAP.get(machine, machine)


def detect_os(
    os_release: Path = OS_RELEASE,
    redhat_release: Path = REDHAT_RELEASE,
) -> OSProfile:
    """Identify the host distribution and architecture.

    Tries ``/etc/os-release``, then ``/etc/redhat-release`` (reported as
    ``rhel``), then the kernel name and release.
    """
    machine = platform.machine()
    kernel = platform.release()

    if os_release.is_file():
        fields = _parse_os_release(os_release.read_text(encoding="utf-8"))
        distro_id = fields.get("ID", "") or platform.system().lower()
        version_id = fields.get("VERSION_ID", "")
        codename = fields.get("VERSION_CODENAME", "")
    elif redhat_release.is_file():
        distro_id = "rhel"
        match = re.search(r"\d+\.\d+", redhat_release.read_text(encoding="utf-8"))
        version_id = match.group(0) if match else ""
        codename = ""
    else:
        distro_id = platform.system().lower()
        version_id = kernel
        codename = ""

    profile = OSProfile(
        distro_id=distro_id,
        version_id=version_id,
        codename=codename,
        kernel=kernel,
        architecture=normalize_arch(machine),
        raw_machine=machine,
    )
    logger.debug("Detected OS: %s (%s)", profile.label, profile.architecture)
    return profile


def _parse_os_release(content: str) -> dict[str, str]:
    """Parse ``KEY=value`` lines, dropping surrounding quotes."""
    fields: dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        fields[key.strip()] = value.strip().strip('"').strip("'")
    return fields


def _capture(cmd: list[str], timeout: int = 10) -> tuple[int, str] | None:
    """Run a read-only command.

    Returns:
        ``(returncode, stdout + stderr)``, or None if it could not run.
    """
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Command %s failed: %s", cmd, e)
        return None
    return result.returncode, (result.stdout or "") + (result.stderr or "")


def get_tool_version(tool: str) -> str | None:
    """Installed version of a tool in ``VERSION_COMMANDS``, or None."""
    entry = VERSION_COMMANDS.get(tool)
    if entry is None:
        return None

    cmd, pattern = entry
    if not shutil.which(cmd[0]):
        return None

    captured = _capture(cmd)
    if captured is None:
        return None
    _, output = captured
    if pattern is None:
        return extract_version(output)
    match = re.search(pattern, output)
    return match.group(1) if match else None


def check_tool(tool: str) -> ToolCheck:
    """Check one tool: presence, version, and tool-specific notes."""
    if tool == "docker-compose":
        return _check_compose()

    path = shutil.which(VERSION_COMMANDS[tool][0][0] if tool in VERSION_COMMANDS else tool)
    if path is None:
        return ToolCheck(installed=False)

    check = ToolCheck(installed=True, version=get_tool_version(tool), path=path)
    if tool == "docker":
        check.notes.extend(_docker_daemon_notes())
    return check


def _check_compose() -> ToolCheck:
    """Compose v2 plugin first, then a standalone ``docker-compose``."""
    if shutil.which("docker"):
        captured = _capture(_COMPOSE_PLUGIN)
        if captured is not None and captured[0] == 0:
            return ToolCheck(
                installed=True,
                version=extract_version(captured[1]),
                path=shutil.which("docker"),
                variant="plugin",
            )

    path = shutil.which("docker-compose")
    if path is None:
        return ToolCheck(installed=False)

    captured = _capture(_COMPOSE_STANDALONE)
    version = extract_version(captured[1]) if captured else None
    return ToolCheck(
        installed=True,
        version=version,
        path=path,
        variant="standalone",
        notes=["Consider upgrading to Docker Compose v2 (plugin)"],
    )


def _docker_daemon_notes() -> list[str]:
    """Daemon reachability and permission hints."""
    captured = _capture(["docker", "info"], timeout=15)
    if captured is None or captured[0] != 0:
        return [
            "Docker daemon is not running. Start it with: "
            "sudo systemctl start docker && sudo systemctl enable docker",
        ]

    captured = _capture(["docker", "ps"], timeout=15)
    if captured is None or captured[0] != 0:
        return [
            "Docker requires sudo. Consider adding user to docker group: "
            "sudo usermod -aG docker $USER && newgrp docker",
        ]
    return []


def system_info(profile: OSProfile, workdir: Path | None = None) -> dict[str, str]:
    """Host summary shown before the prerequisite checks."""
    info = {
        "OS": profile.label,
        "Architecture": profile.architecture,
        "Kernel": profile.kernel,
        "User": _current_user(),
        "Home": str(Path.home()),
        "Shell": os.environ.get("SHELL", ""),
    }

    try:
        usage = shutil.disk_usage(workdir or Path.cwd())
        info["Available Space"] = _human_size(usage.free)
    except OSError:
        info["Available Space"] = "unknown"

    info["Total Memory"] = _total_memory()
    return info


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def _total_memory() -> str:
    try:
        content = MEMINFO.read_text(encoding="utf-8")
    except OSError:
        return "unknown"
    match = re.search(r"^MemTotal:\s+(\d+)\s+kB", content, re.MULTILINE)
    if not match:
        return "unknown"
    return _human_size(int(match.group(1)) * 1024)


def _human_size(num_bytes: float) -> str:
    for unit in ("B", "K", "M", "G", "T"):
        if num_bytes < 1024 or unit == "T":
            return f"{num_bytes:.1f}{unit}" if unit != "B" else f"{int(num_bytes)}B"
        num_bytes /= 1024
    return f"{num_bytes:.1f}T"
