"""
Installer recipes — per tool, per distro family.

Pure data plus a small executor.  Every recipe maps a package manager
(or ``_default`` for a distro-independent binary install) to an ordered
list of steps.  Steps run one after another through ``run_step``; the
first failing step stops that tool's install.

Placeholders substituted in every command argument:

    {os}          distro id (ubuntu, debian, …)
    {arch}        normalized architecture (amd64, arm64, armv7)
    {raw_arch}    what uname -m reported (x86_64, aarch64, …)
    {codename}    release codename, or ``$(lsb_release -cs)`` if unknown
    {user}        the invoking user
    {task_version}
"""

from __future__ import annotations

import getpass
import logging
from collections.abc import Callable
from typing import Any

from setulab.core.models.prereq import OSProfile
from setulab.core.services.prereq.runner import run_step

logger = logging.getLogger(__name__)

TASK_VERSION = "3.37.2"

# distro id → package manager family
DISTRO_FAMILIES: dict[str, str] = {
    "ubuntu": "apt",
    "debian": "apt",
    "centos": "yum",
    "rhel": "yum",
    "fedora": "yum",
    "arch": "pacman",
}

_DOCKER_PACKAGES = [
    "docker-ce", "docker-ce-cli", "containerd.io",
    "docker-buildx-plugin", "docker-compose-plugin",
]
_DOCKER_KEYRING = "/usr/share/keyrings/docker-archive-keyring.gpg"
_TASK_RELEASES = "https://github.com/go-task/task/releases/download/v{task_version}"


def _step(label: str, command: list[str], needs_sudo: bool = True) -> dict:
    return {"label": label, "command": command, "needs_sudo": needs_sudo}


INSTALL_RECIPES: dict[str, dict[str, Any]] = {
    "docker": {
        "label": "Docker",
        "docs_url": "https://docs.docker.com/engine/install/",
        "install": {
            "apt": [
                _step("Update package index", ["apt-get", "update"]),
                _step("Install prerequisites", [
                    "apt-get", "install", "-y",
                    "apt-transport-https", "ca-certificates", "curl", "gnupg", "lsb-release",
                ]),
                _step("Add Docker's GPG key", [
                    "bash", "-c",
                    "curl -fsSL https://download.docker.com/linux/{os}/gpg "
                    f"| gpg --dearmor --yes -o {_DOCKER_KEYRING}",
                ]),
                _step("Set up stable repository", [
                    "bash", "-c",
                    f"echo \"deb [arch={{arch}} signed-by={_DOCKER_KEYRING}] "
                    "https://download.docker.com/linux/{os} {codename} stable\" "
                    "> /etc/apt/sources.list.d/docker.list",
                ]),
                _step("Update package index", ["apt-get", "update"]),
                _step("Install Docker Engine", ["apt-get", "install", "-y", *_DOCKER_PACKAGES]),
            ],
            "yum": [
                _step("Install yum-utils", ["yum", "install", "-y", "yum-utils"]),
                _step("Add Docker repository", [
                    "yum-config-manager", "--add-repo",
                    "https://download.docker.com/linux/centos/docker-ce.repo",
                ]),
                _step("Install Docker Engine", ["yum", "install", "-y", *_DOCKER_PACKAGES]),
            ],
            "pacman": [
                _step("Install Docker", [
                    "pacman", "-S", "--noconfirm", "docker", "docker-compose",
                ]),
            ],
        },
        "post_install": [
            _step("Start Docker service", ["systemctl", "start", "docker"]),
            _step("Enable Docker service", ["systemctl", "enable", "docker"]),
            _step("Add user to docker group", ["usermod", "-aG", "docker", "{user}"]),
        ],
        "post_notes": [
            "Please log out and log back in for group changes to take effect",
            "Or run: newgrp docker",
        ],
    },
    "docker-compose": {
        "label": "Docker Compose",
        "docs_url": "https://docs.docker.com/compose/install/",
        "install": {
            "_default": [
                _step("Download Docker Compose", [
                    "curl", "-fsSL",
                    "https://github.com/docker/compose/releases/latest/download/"
                    "docker-compose-linux-{raw_arch}",
                    "-o", "/usr/local/bin/docker-compose",
                ]),
                _step("Make it executable", ["chmod", "+x", "/usr/local/bin/docker-compose"]),
                _step("Link into /usr/bin", [
                    "ln", "-sf", "/usr/local/bin/docker-compose", "/usr/bin/docker-compose",
                ]),
            ],
        },
    },
    "task": {
        "label": "Task",
        "docs_url": "https://taskfile.dev",
        "install": {
            "apt": [
                _step("Download Task package", [
                    "curl", "-fsSL", _TASK_RELEASES + "/task_linux_{arch}.deb",
                    "-o", "/tmp/task.deb",
                ], needs_sudo=False),
                _step("Install Task package", ["dpkg", "-i", "/tmp/task.deb"]),
                _step("Clean up", ["rm", "-f", "/tmp/task.deb"], needs_sudo=False),
            ],
            "yum": [
                _step("Download Task package", [
                    "curl", "-fsSL", _TASK_RELEASES + "/task_linux_{arch}.rpm",
                    "-o", "/tmp/task.rpm",
                ], needs_sudo=False),
                _step("Install Task package", ["rpm", "-i", "/tmp/task.rpm"]),
                _step("Clean up", ["rm", "-f", "/tmp/task.rpm"], needs_sudo=False),
            ],
            "pacman": [
                _step("Install Task", ["pacman", "-S", "--noconfirm", "go-task"]),
            ],
            "_default": [
                _step("Download Task binary", [
                    "curl", "-fsSL", _TASK_RELEASES + "/task_linux_{arch}.tar.gz",
                    "-o", "/tmp/task.tar.gz",
                ], needs_sudo=False),
                _step("Extract", [
                    "bash", "-c",
                    "mkdir -p /tmp/task_install && tar -xzf /tmp/task.tar.gz -C /tmp/task_install",
                ], needs_sudo=False),
                _step("Install binary", [
                    "install", "-m", "0755", "/tmp/task_install/task", "/usr/local/bin/task",
                ]),
                _step("Clean up", [
                    "rm", "-rf", "/tmp/task.tar.gz", "/tmp/task_install",
                ], needs_sudo=False),
            ],
        },
    },
}


def package_manager_for(profile: OSProfile) -> str | None:
    """Package manager family of the host, or None if unsupported."""
    return DISTRO_FAMILIES.get(profile.distro_id)


def install_variables(profile: OSProfile) -> dict[str, str]:
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "$USER"
    return {
        "os": profile.distro_id,
        "arch": profile.architecture,
        "raw_arch": profile.raw_machine or profile.architecture,
        "codename": profile.codename or "$(lsb_release -cs)",
        "user": user,
        "task_version": TASK_VERSION,
    }


def _substitute(command: list[str], variables: dict[str, str]) -> list[str]:
    out = []
    for part in command:
        for key, value in variables.items():
            part = part.replace("{" + key + "}", value)
        out.append(part)
    return out


def plan_install(recipe_name: str, profile: OSProfile) -> list[dict] | None:
    """Concrete steps for ``recipe_name`` on this host.

    Returns:
        Steps with placeholders substituted, or None when no recipe
        covers the host's distro.

    Raises:
        KeyError: unknown recipe.
    """
    recipe = INSTALL_RECIPES[recipe_name]
    install = recipe["install"]

    pm = package_manager_for(profile)
    steps = install.get(pm) if pm else None
    if steps is None:
        steps = install.get("_default")
    if steps is None:
        return None

    variables = install_variables(profile)
    planned = [*steps, *recipe.get("post_install", [])]
    return [
        {**step, "command": _substitute(step["command"], variables)}
        for step in planned
    ]


def install_tool(
    recipe_name: str,
    profile: OSProfile,
    *,
    runner: Callable[..., dict[str, Any]] = run_step,
) -> dict[str, Any]:
    """Run a recipe's steps in order, stopping at the first failure.

    Returns:
        ``{"ok", "tool", "steps", "error", "guidance", "notes"}``.
        Never raises for a failed step.
    """
    recipe = INSTALL_RECIPES[recipe_name]
    label = recipe["label"]
    result: dict[str, Any] = {
        "ok": False,
        "tool": recipe_name,
        "steps": [],
        "error": None,
        "guidance": None,
        "notes": [],
    }

    steps = plan_install(recipe_name, profile)
    if steps is None:
        result["error"] = f"Unsupported OS: {profile.distro_id}"
        result["guidance"] = f"Please install {label} manually from: {recipe['docs_url']}"
        logger.warning("No %s installer for %s", label, profile.distro_id)
        return result

    logger.info("Installing %s on %s (%d steps)", label, profile.label, len(steps))
    for step in steps:
        outcome = runner(step["command"], needs_sudo=step["needs_sudo"])
        result["steps"].append({
            "label": step["label"],
            "ok": outcome["ok"],
            "error": outcome.get("error"),
        })
        if not outcome["ok"]:
            detail = outcome.get("stderr") or ""
            result["error"] = f"{step['label']}: {outcome.get('error')}"
            if detail:
                result["error"] += f"\n{detail.strip()}"
            result["guidance"] = f"See {recipe['docs_url']} to install {label} manually"
            return result

    result["ok"] = True
    result["notes"] = list(recipe.get("post_notes", []))
    return result
