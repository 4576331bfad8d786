"""
Resource catalog — the fixed table of services setulab knows how to build.

The catalog is a static table, not a database: there is no dynamic
registration.  Correctness reduces to two things:

    - every declared name has a complete set of templates
      (compose, env, and each declared config file)
    - unknown names are rejected before any filesystem mutation

Adding a service is a data-only change: one record in
``core/data/catalogs/resources.json`` plus its template directory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from setulab.core.data import ENV_TEMPLATE_NAME, DataRegistry
from setulab.core.models.resource import (
    CATALOG_TYPES,
    COMPOSE_FILENAME,
    ENV_FILENAME,
    GeneratedFile,
    RenderedResource,
    ResourceDescriptor,
)

logger = logging.getLogger(__name__)

# Placeholders substituted in every template body
NETWORK_PLACEHOLDER = "__NETWORK__"


class ValidationError(Exception):
    """A catalog type or resource name is not known."""


class UnknownCatalogError(ValidationError):
    def __init__(self, catalog: str):
        self.catalog = catalog
        super().__init__(
            f"Invalid type: {catalog}. Use one of: {', '.join(CATALOG_TYPES)}"
        )


class UnknownResourceError(ValidationError):
    def __init__(self, catalog: str, name: str, available: list[str]):
        self.catalog = catalog
        self.name = name
        self.available = available
        super().__init__(f"Invalid {catalog} resource: {name}")


class Catalog:
    """Read-only view over the packaged resource table."""

    def __init__(self, registry: DataRegistry | None = None):
        self._registry = registry or DataRegistry()
        self._descriptors: dict[str, dict[str, ResourceDescriptor]] | None = None

    @property
    def registry(self) -> DataRegistry:
        return self._registry

    def _load(self) -> dict[str, dict[str, ResourceDescriptor]]:
        if self._descriptors is None:
            table: dict[str, dict[str, ResourceDescriptor]] = {}
            for catalog in CATALOG_TYPES:
                entries = self._registry.resources.get(catalog, [])
                # dicts keep insertion order → declared order
                table[catalog] = {
                    e["name"]: ResourceDescriptor(catalog=catalog, **e)
                    for e in entries
                }
            self._descriptors = table
        return self._descriptors

    def check_type(self, catalog: str) -> None:
        if catalog not in CATALOG_TYPES:
            raise UnknownCatalogError(catalog)

    def names(self, catalog: str) -> list[str]:
        """Resource names in declared order."""
        self.check_type(catalog)
        return list(self._load()[catalog])

    def descriptors(self, catalog: str) -> list[ResourceDescriptor]:
        self.check_type(catalog)
        return list(self._load()[catalog].values())

    def get(self, catalog: str, name: str) -> ResourceDescriptor:
        """Look up one descriptor.

        Raises:
            UnknownCatalogError / UnknownResourceError
        """
        self.check_type(catalog)
        entry = self._load()[catalog].get(name)
        if entry is None:
            raise UnknownResourceError(catalog, name, self.names(catalog))
        return entry

    def validate(self, catalog: str, names: Iterable[str]) -> list[ResourceDescriptor]:
        """Check every name against the catalog's allow-list.

        The first unknown name fails the whole batch.  Nothing is
        returned for a partial pass.

        Returns:
            Descriptors for ``names``, in the order given.
        """
        self.check_type(catalog)
        resolved = [self.get(catalog, name) for name in names]
        logger.debug("Validated %s resources: %s", catalog, [d.name for d in resolved])
        return resolved

    def render(self, descriptor: ResourceDescriptor, *, network: str) -> RenderedResource:
        """Render every artifact of ``descriptor`` in memory.

        Deterministic: the output depends only on the packaged templates
        and ``network``.
        """
        placeholders = {NETWORK_PLACEHOLDER: network}
        catalog, name = descriptor.catalog, descriptor.name

        def _file(template: str, target: str) -> GeneratedFile:
            body = self._registry.template(catalog, name, template)
            return GeneratedFile(path=target, content=process_template(body, placeholders))

        compose = _file(COMPOSE_FILENAME, COMPOSE_FILENAME)
        env = _file(ENV_TEMPLATE_NAME, ENV_FILENAME)
        config = [_file(rel, rel) for rel in descriptor.config_files]

        return RenderedResource(descriptor=descriptor, compose=compose, env=env, config=config)

    def missing_templates(self) -> list[str]:
        """Every declared template asset that is not packaged.

        Empty means the catalog is complete.
        """
        missing: list[str] = []
        for catalog in CATALOG_TYPES:
            for d in self.descriptors(catalog):
                needed = [COMPOSE_FILENAME, ENV_TEMPLATE_NAME, *d.config_files]
                for rel in needed:
                    if not self._registry.has_template(catalog, d.name, rel):
                        missing.append(f"{catalog}/{d.name}/{rel}")
        return missing


def process_template(content: str, placeholders: dict[str, str]) -> str:
    """Substitute ``__PLACEHOLDER__`` tokens with their values.

    Plain string replacement: no conditionals, no escaping.  Compose's
    own ``${VAR:-default}`` syntax passes through untouched.
    """
    for key, value in placeholders.items():
        content = content.replace(key, value)
    return content


# ── Module-level default ────────────────────────────────────────

_default_catalog: Catalog | None = None


def get_catalog() -> Catalog:
    """Process-wide catalog over the packaged data."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = Catalog()
    return _default_catalog


def list_resources(catalog: str) -> list[str]:
    """Resource names of ``catalog`` in declared order."""
    return get_catalog().names(catalog)


def validate(catalog: str, names: Iterable[str]) -> list[ResourceDescriptor]:
    """Validate ``names`` against the packaged catalog (fail-fast)."""
    return get_catalog().validate(catalog, names)


def render_resource(descriptor: ResourceDescriptor, *, network: str) -> RenderedResource:
    """Render ``descriptor`` using the packaged templates."""
    return get_catalog().render(descriptor, network=network)
