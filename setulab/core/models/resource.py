"""
Resource models — catalog entries, their rendered artifacts, and their
on-disk instances.

A ResourceDescriptor is a declaration: "this service exists in this
catalog and is generated from these templates." A ResourceInstance is
what ``setup`` leaves on disk for it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from setulab.core.models.receipt import Receipt

CatalogType = Literal["infra", "monitoring"]

CATALOG_TYPES: tuple[str, ...] = ("infra", "monitoring")

# Layout of every instance directory
COMPOSE_FILENAME = "docker-compose.yml"
ENV_FILENAME = ".env"
INSTANCE_SUBDIRS: tuple[str, ...] = ("config", "volumes", "data")


class GeneratedFile(BaseModel):
    """A file produced by rendering a resource template.

    Attributes:
        path:    Path relative to the instance directory.
        content: Full file content.
    """

    path: str
    content: str


class PortMapping(BaseModel):
    """A published port, as documented in the resource's ``.env``."""

    variable: str
    default: int
    container: int

    @property
    def compose_spec(self) -> str:
        """The entry as written under the compose service's ``ports``."""
        return f"${{{self.variable}:-{self.default}}}:{self.container}"


class ResourceDescriptor(BaseModel):
    """A catalog entry — immutable, loaded once from the packaged catalog."""

    model_config = ConfigDict(frozen=True)

    name: str
    catalog: CatalogType
    service: str                       # compose service / container name
    label: str = ""
    image: str = ""
    ports: list[PortMapping] = Field(default_factory=list)
    config_files: list[str] = Field(default_factory=list)
    directories: list[str] = Field(default_factory=list)   # extra dirs under the instance
    url: str | None = None             # web UI, when the service has one

    @property
    def key(self) -> str:
        """``catalog/name`` — unique across catalogs."""
        return f"{self.catalog}/{self.name}"

    def render(self, network: str) -> RenderedResource:
        """Render compose, env and config payloads for this resource.

        Pure: reads packaged templates only. Same inputs, same bytes.
        """
        from setulab.core.services.catalog import render_resource

        return render_resource(self, network=network)


class RenderedResource(BaseModel):
    """All artifacts of one resource, rendered in memory before writing."""

    descriptor: ResourceDescriptor
    compose: GeneratedFile
    env: GeneratedFile
    config: list[GeneratedFile] = Field(default_factory=list)

    @property
    def files(self) -> list[GeneratedFile]:
        """Every artifact, compose first."""
        return [self.compose, self.env, *self.config]


class ResourceInstance(BaseModel):
    """On-disk realization of a descriptor at ``<base>/<catalog>/<name>/``."""

    base_dir: Path
    catalog: CatalogType
    name: str

    @property
    def path(self) -> Path:
        return self.base_dir / self.catalog / self.name

    @property
    def compose_file(self) -> Path:
        return self.path / COMPOSE_FILENAME

    @property
    def env_file(self) -> Path:
        return self.path / ENV_FILENAME

    @property
    def exists(self) -> bool:
        """Whether ``setup`` has created this instance directory."""
        return self.path.is_dir()


# ── Batch results ───────────────────────────────────────────────


class ResourceOutcome(BaseModel):
    """What happened to one resource during a batch verb.

    ``warning`` is used for a resource with no instance directory on
    stop/status — reported, not fatal.
    """

    name: str
    status: Literal["ok", "warning", "failed"] = "ok"
    message: str = ""
    path: str | None = None
    receipt: Receipt | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"


class BatchReport(BaseModel):
    """Aggregate result of setup/start/stop/status over a list of resources."""

    verb: str
    catalog: CatalogType
    outcomes: list[ResourceOutcome] = Field(default_factory=list)

    def add(self, outcome: ResourceOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def warnings(self) -> int:
        return sum(1 for o in self.outcomes if o.status == "warning")

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.failed)

    @property
    def ok(self) -> bool:
        """True unless at least one resource failed."""
        return self.failed == 0

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "verb": self.verb,
            "catalog": self.catalog,
            "ok": self.ok,
            "total": self.total,
            "succeeded": self.succeeded,
            "warnings": self.warnings,
            "failed": self.failed,
            "resources": [
                o.model_dump(mode="json", exclude_none=True) for o in self.outcomes
            ],
        }
