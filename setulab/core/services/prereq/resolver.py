"""
Prerequisite resolver — check every requirement, optionally install.

Each requirement moves through

    unchecked → satisfied | below_minimum | missing
              → (install accepted) → satisfied | install_failed

Check-only mode stops after the first arrow: it never prompts and never
installs.  A missing or failed optional tool is reported and does not
affect ``PrereqReport.required_ok``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from setulab.adapters.base import RuntimeClient
from setulab.core.models.prereq import (
    OSProfile,
    PrereqReport,
    RequirementResult,
    RequirementStatus,
    ToolCheck,
    ToolRequirement,
)
from setulab.core.models.receipt import Receipt
from setulab.core.services.prereq.detection import check_tool, detect_os
from setulab.core.services.prereq.installers import install_tool
from setulab.core.services.prereq.version import version_at_least

logger = logging.getLogger(__name__)

DOCKER_MIN_VERSION = "20.10"
COMPOSE_MIN_VERSION = "2.0"

DEFAULT_REQUIREMENTS: tuple[ToolRequirement, ...] = (
    ToolRequirement(
        tool="docker",
        label="Docker",
        min_version=DOCKER_MIN_VERSION,
        install_recipe="docker",
        docs_url="https://docs.docker.com/engine/install/",
    ),
    ToolRequirement(
        tool="docker-compose",
        label="Docker Compose",
        min_version=COMPOSE_MIN_VERSION,
        install_recipe="docker-compose",
        docs_url="https://docs.docker.com/compose/install/",
    ),
    ToolRequirement(
        tool="task",
        label="Task",
        required=False,
        install_recipe="task",
        docs_url="https://taskfile.dev",
        purpose="optional task runner",
    ),
    ToolRequirement(tool="curl", label="curl", required=False, purpose="recommended for downloading"),
    ToolRequirement(tool="git", label="git", required=False, purpose="recommended for version control"),
    ToolRequirement(tool="jq", label="jq", required=False, purpose="useful for JSON processing"),
)

Checker = Callable[[str], ToolCheck]
Installer = Callable[[str, OSProfile], dict[str, Any]]
Confirm = Callable[[str, bool], bool]


def evaluate(
    requirement: ToolRequirement,
    *,
    checker: Checker = check_tool,
) -> RequirementResult:
    """Check one requirement against what is installed."""
    check = checker(requirement.tool)
    result = RequirementResult(requirement=requirement, notes=list(check.notes))

    if not check.installed:
        result.status = RequirementStatus.MISSING
        return result

    result.version = check.version
    if check.variant:
        result.notes.insert(0, f"{check.variant} variant")

    if requirement.min_version is None:
        result.status = RequirementStatus.SATISFIED
    elif check.version is None:
        result.status = RequirementStatus.BELOW_MINIMUM
        result.notes.append("installed version could not be determined")
    elif version_at_least(check.version, requirement.min_version):
        result.status = RequirementStatus.SATISFIED
    else:
        result.status = RequirementStatus.BELOW_MINIMUM

    return result


def resolve(
    requirements: Iterable[ToolRequirement] | None = None,
    *,
    interactive: bool = False,
    os_profile: OSProfile | None = None,
    confirm: Confirm | None = None,
    default_answer: bool = False,
    force: bool = False,
    installer: Installer = install_tool,
    checker: Checker = check_tool,
) -> PrereqReport:
    """Evaluate every requirement and, when interactive, offer installs.

    Args:
        interactive: False is check-only: no prompts, no installs.
        confirm: ``confirm(question, default) -> bool``.  None answers
            every question with ``default_answer``.
        force: Offer to reinstall tools that are already satisfied.
        installer: ``installer(recipe, os_profile) -> dict`` with at
            least ``ok`` / ``error`` / ``guidance``.
    """
    reqs = list(DEFAULT_REQUIREMENTS if requirements is None else requirements)
    profile = os_profile or detect_os()
    report = PrereqReport(os_profile=profile, interactive=interactive)

    for req in reqs:
        result = evaluate(req, checker=checker)
        logger.info("%s: %s (%s)", req.display_name, result.status.value, result.version)

        if result.unresolved:
            result.guidance = _guidance(req, result)

        if interactive and req.install_recipe and (result.unresolved or force):
            result = _offer_install(
                req, result,
                profile=profile,
                confirm=confirm,
                default_answer=default_answer,
                installer=installer,
                checker=checker,
            )

        report.results.append(result)

    return report


def _offer_install(
    req: ToolRequirement,
    result: RequirementResult,
    *,
    profile: OSProfile,
    confirm: Confirm | None,
    default_answer: bool,
    installer: Installer,
    checker: Checker,
) -> RequirementResult:
    question = _install_question(req, result)
    answer = confirm(question, default_answer) if confirm else default_answer
    if not answer:
        result.install_declined = True
        logger.info("%s installation declined", req.display_name)
        return result

    outcome = installer(req.install_recipe, profile)
    if not outcome.get("ok"):
        result.guidance = outcome.get("guidance") or _guidance(req, result)
        result.status = RequirementStatus.INSTALL_FAILED
        result.install_attempted = True
        result.install_error = outcome.get("error") or "installation failed"
        return result

    after = evaluate(req, checker=checker)
    after.install_attempted = True
    after.notes.extend(outcome.get("notes", []))
    if not after.satisfied:
        after.install_error = (
            f"installer finished but {req.display_name} is still {after.status.value}"
        )
        after.guidance = _guidance(req, after)
        after.status = RequirementStatus.INSTALL_FAILED
    return after


def _install_question(req: ToolRequirement, result: RequirementResult) -> str:
    name = req.display_name
    if result.satisfied:
        return f"{name} is already installed. Reinstall it?"
    if req.required:
        return f"{name} is required. Do you want to install it?"
    return f"{name} is optional but recommended. Do you want to install it?"


def _guidance(req: ToolRequirement, result: RequirementResult) -> str:
    """Next step for an unresolved requirement, from its evaluated status."""
    name = req.display_name
    if req.min_version and req.required:
        text = f"{name} >= {req.min_version} is required"
    elif result.status == RequirementStatus.BELOW_MINIMUM:
        found = result.version or "unknown version"
        text = f"{name} {req.min_version} or newer is recommended (found {found})"
    elif req.purpose:
        text = f"{name} is not installed ({req.purpose})"
    else:
        text = f"{name} is not installed"
    if req.docs_url:
        text += f". Install it from: {req.docs_url}"
    return text


def verify_runtime(runtime: RuntimeClient, image: str = "hello-world") -> Receipt:
    """Run a throwaway container to prove the runtime works end to end."""
    logger.info("Testing Docker installation with %s", image)
    return runtime.run_container(image)
