"""
Prerequisite models — host profile, tool requirements, and the report
the resolver produces.

Nothing here is persisted: requirements are evaluated fresh on every
invocation.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OSProfile(BaseModel):
    """Host identity, derived once per process by ``detect_os``."""

    model_config = ConfigDict(frozen=True)

    distro_id: str                    # ubuntu, debian, fedora, rhel, arch, darwin, …
    version_id: str = ""
    codename: str = ""
    kernel: str = ""
    architecture: str = ""            # normalized: amd64 / arm64 / armv7 / passthrough
    raw_machine: str = ""             # what uname -m reported

    @property
    def label(self) -> str:
        return f"{self.distro_id} {self.version_id}".strip()


class ToolRequirement(BaseModel):
    """A tool the rest of the system depends on.

    ``min_version`` is a ``MAJOR.MINOR`` floor, or None when any
    installed version is acceptable. ``install_recipe`` names an entry in
    the installer recipes; None means guidance only.
    """

    model_config = ConfigDict(frozen=True)

    tool: str
    label: str = ""
    min_version: str | None = None
    required: bool = True
    install_recipe: str | None = None
    docs_url: str = ""
    purpose: str = ""                 # why an optional tool is worth having

    @property
    def display_name(self) -> str:
        return self.label or self.tool


class RequirementStatus(str, Enum):
    """Per-requirement state.

    Unchecked → {Satisfied | BelowMinimum | Missing}
              → (on install attempt) → {Satisfied | InstallFailed}
    """

    UNCHECKED = "unchecked"
    SATISFIED = "satisfied"
    BELOW_MINIMUM = "below_minimum"
    MISSING = "missing"
    INSTALL_FAILED = "install_failed"


class ToolCheck(BaseModel):
    """Raw detection result for one tool."""

    installed: bool
    version: str | None = None
    path: str | None = None
    variant: str = ""                 # e.g. "plugin" / "standalone" for compose
    notes: list[str] = Field(default_factory=list)


class RequirementResult(BaseModel):
    """Where one requirement ended up after checking (and maybe installing)."""

    requirement: ToolRequirement
    status: RequirementStatus = RequirementStatus.UNCHECKED
    version: str | None = None
    notes: list[str] = Field(default_factory=list)
    install_attempted: bool = False
    install_declined: bool = False
    install_error: str | None = None
    guidance: str | None = None

    @property
    def satisfied(self) -> bool:
        return self.status == RequirementStatus.SATISFIED

    @property
    def unresolved(self) -> bool:
        return self.status in (
            RequirementStatus.MISSING,
            RequirementStatus.BELOW_MINIMUM,
            RequirementStatus.INSTALL_FAILED,
        )

    def to_dict(self) -> dict:
        return {
            "tool": self.requirement.tool,
            "label": self.requirement.display_name,
            "required": self.requirement.required,
            "min_version": self.requirement.min_version,
            "status": self.status.value,
            "version": self.version,
            "notes": list(self.notes),
            "install_attempted": self.install_attempted,
            "install_declined": self.install_declined,
            "install_error": self.install_error,
            "guidance": self.guidance,
        }


class PrereqReport(BaseModel):
    """Everything ``resolve`` found out, in requirement order."""

    os_profile: OSProfile | None = None
    interactive: bool = False
    results: list[RequirementResult] = Field(default_factory=list)

    def get(self, tool: str) -> RequirementResult | None:
        for result in self.results:
            if result.requirement.tool == tool:
                return result
        return None

    @property
    def required_ok(self) -> bool:
        """Every required tool is satisfied — the catalog gate can open."""
        return all(r.satisfied for r in self.results if r.requirement.required)

    @property
    def ok(self) -> bool:
        return all(r.satisfied for r in self.results)

    @property
    def installed_any(self) -> bool:
        return any(r.install_attempted and r.satisfied for r in self.results)

    def to_dict(self) -> dict:
        return {
            "os": self.os_profile.model_dump() if self.os_profile else None,
            "interactive": self.interactive,
            "required_ok": self.required_ok,
            "ok": self.ok,
            "requirements": [r.to_dict() for r in self.results],
        }
