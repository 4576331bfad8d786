"""
Central data registry for the packaged resource catalog and templates.

Loads ``catalogs/resources.json`` once at first access and caches it
for the process lifetime.  Template bodies live as real files under
``templates/<catalog>/<name>/`` so they can be diffed and validated
independently of the code that renders them.

Usage::

    from setulab.core.data import DataRegistry

    registry = DataRegistry()
    entries = registry.resources["infra"]          # list[dict], declared order
    body = registry.template("infra", "redis", "config/redis.conf")
"""

from __future__ import annotations

import json
import logging
from functools import cached_property
from pathlib import Path

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent
TEMPLATES_DIR = _DATA_DIR / "templates"

# The ``.env`` template is stored without the leading dot
ENV_TEMPLATE_NAME = "env"


class TemplateNotFound(LookupError):
    """Raised when a declared template asset is missing from the package."""


def _load_json(relative_path: str) -> dict:
    """Load a JSON file relative to the data directory."""
    path = _DATA_DIR / relative_path
    if not path.exists():
        logger.warning("Data file not found: %s", path)
        return {}
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class DataRegistry:
    """Registry for the static resource catalog and its template assets.

    Each property lazily loads on first access and caches the result for
    the lifetime of the instance.  The CLI uses one module-level instance
    (see ``setulab.core.services.catalog``).
    """

    def __init__(self, templates_dir: Path | None = None):
        self._templates_dir = templates_dir or TEMPLATES_DIR

    @cached_property
    def resources(self) -> dict[str, list[dict]]:
        """Catalog type → resource records, in declared order."""
        data = _load_json("catalogs/resources.json")
        logger.debug(
            "Loaded resource catalog: %s",
            {k: len(v) for k, v in data.items()},
        )
        return data

    def template_path(self, catalog: str, name: str, relative: str) -> Path:
        """Location of one template asset."""
        return self._templates_dir / catalog / name / relative

    def template(self, catalog: str, name: str, relative: str) -> str:
        """Read a template asset.

        Raises:
            TemplateNotFound: the asset is not packaged.
        """
        path = self.template_path(catalog, name, relative)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise TemplateNotFound(f"Missing template: {catalog}/{name}/{relative}") from e

    def has_template(self, catalog: str, name: str, relative: str) -> bool:
        return self.template_path(catalog, name, relative).is_file()
