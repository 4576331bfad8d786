"""
Catalog lifecycle — setup, start, stop, status and logs over a batch of
resources.

Every verb validates the whole batch against the catalog first; an
unknown name raises before anything touches disk or the runtime.  After
that, processing continues past per-resource problems: each resource
gets a ResourceOutcome and the BatchReport carries them all.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from setulab.adapters.base import RuntimeClient
from setulab.core.data import TemplateNotFound
from setulab.core.models.receipt import Receipt
from setulab.core.models.resource import (
    INSTANCE_SUBDIRS,
    BatchReport,
    RenderedResource,
    ResourceInstance,
    ResourceOutcome,
)
from setulab.core.services.catalog import Catalog, get_catalog
from setulab.core.services.preconditions import ensure_base_structure, ensure_network

logger = logging.getLogger(__name__)


def instance_for(catalog: str, name: str, base_dir: Path) -> ResourceInstance:
    return ResourceInstance(base_dir=base_dir, catalog=catalog, name=name)


def write_rendered(instance: ResourceInstance, rendered: RenderedResource) -> list[Path]:
    """Materialize a rendered resource under its instance directory.

    Creates the standard subdirectories plus any extra directories the
    descriptor declares, then writes every file.  Existing files are
    overwritten, so a re-run produces the same bytes.

    Returns:
        Paths of the files written.
    """
    for sub in (*INSTANCE_SUBDIRS, *rendered.descriptor.directories):
        (instance.path / sub).mkdir(parents=True, exist_ok=True)

    written = []
    for f in rendered.files:
        target = instance.path / f.path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(f.content, encoding="utf-8")
        written.append(target)
    return written


# ── Setup ───────────────────────────────────────────────────────


def setup_resources(
    catalog: str,
    names: Iterable[str],
    *,
    base_dir: Path,
    network: str,
    runtime: RuntimeClient | None = None,
    catalog_obj: Catalog | None = None,
) -> BatchReport:
    """Generate instance directories for ``names``.

    Args:
        runtime: Used to create the shared network. None skips that step.

    Raises:
        ValidationError: unknown catalog type or resource name.
        PreconditionError: the shared network could not be created.
    """
    cat = catalog_obj or get_catalog()
    descriptors = cat.validate(catalog, names)

    ensure_base_structure(base_dir)
    if runtime is not None:
        ensure_network(runtime, network)

    report = BatchReport(verb="setup", catalog=catalog)
    for descriptor in descriptors:
        instance = instance_for(catalog, descriptor.name, base_dir)
        logger.info("Setting up %s resource: %s", catalog, descriptor.name)

        try:
            rendered = cat.render(descriptor, network=network)
        except TemplateNotFound as e:
            report.add(ResourceOutcome(
                name=descriptor.name, status="failed", message=str(e),
                path=str(instance.path),
            ))
            continue

        try:
            written = write_rendered(instance, rendered)
        except OSError as e:
            report.add(ResourceOutcome(
                name=descriptor.name,
                status="failed",
                message=f"Write failed, re-run setup: {e}",
                path=str(instance.path),
            ))
            continue

        report.add(ResourceOutcome(
            name=descriptor.name,
            message=f"Generated {len(written)} files",
            path=str(instance.path),
        ))

    return report


# ── Start / stop ────────────────────────────────────────────────


def start_resources(
    catalog: str,
    names: Iterable[str],
    *,
    base_dir: Path,
    runtime: RuntimeClient,
    catalog_obj: Catalog | None = None,
) -> BatchReport:
    """Bring each set-up resource up.  Not set up → failed outcome."""
    cat = catalog_obj or get_catalog()
    descriptors = cat.validate(catalog, names)

    report = BatchReport(verb="start", catalog=catalog)
    for descriptor in descriptors:
        instance = instance_for(catalog, descriptor.name, base_dir)
        if not instance.exists:
            report.add(ResourceOutcome(
                name=descriptor.name,
                status="failed",
                message=f"Resource {descriptor.name} is not set up. Run setup first.",
            ))
            continue

        logger.info("Starting %s...", descriptor.name)
        receipt = runtime.up(instance.compose_file)
        report.add(_from_receipt(descriptor.name, instance, receipt, f"Started {descriptor.name}"))

    return report


def stop_resources(
    catalog: str,
    names: Iterable[str],
    *,
    base_dir: Path,
    runtime: RuntimeClient,
    catalog_obj: Catalog | None = None,
) -> BatchReport:
    """Tear each set-up resource down.  Not set up → warning outcome."""
    cat = catalog_obj or get_catalog()
    descriptors = cat.validate(catalog, names)

    report = BatchReport(verb="stop", catalog=catalog)
    for descriptor in descriptors:
        instance = instance_for(catalog, descriptor.name, base_dir)
        if not instance.exists:
            report.add(ResourceOutcome(
                name=descriptor.name,
                status="warning",
                message=f"Resource {descriptor.name} is not set up.",
            ))
            continue

        logger.info("Stopping %s...", descriptor.name)
        receipt = runtime.down(instance.compose_file)
        report.add(_from_receipt(descriptor.name, instance, receipt, f"Stopped {descriptor.name}"))

    return report


# ── Observe ─────────────────────────────────────────────────────


def resource_status(
    catalog: str,
    name: str | None = None,
    *,
    base_dir: Path,
    runtime: RuntimeClient,
    catalog_obj: Catalog | None = None,
) -> BatchReport:
    """Process-table view of one instance, or of every instance directory.

    Without a name, instance directories under ``<base>/<catalog>`` are
    reported in name order.
    """
    cat = catalog_obj or get_catalog()
    cat.check_type(catalog)
    report = BatchReport(verb="status", catalog=catalog)

    if name is not None:
        cat.validate(catalog, [name])
        names = [name]
    else:
        catalog_dir = base_dir / catalog
        if not catalog_dir.is_dir():
            logger.debug("No %s directory under %s", catalog, base_dir)
            return report
        names = sorted(p.name for p in catalog_dir.iterdir() if p.is_dir())

    for resource in names:
        instance = instance_for(catalog, resource, base_dir)
        if not instance.exists:
            report.add(ResourceOutcome(
                name=resource,
                status="warning",
                message=f"Resource {resource} is not set up.",
            ))
            continue

        receipt = runtime.ps(instance.compose_file)
        if not receipt.ok:
            report.add(_from_receipt(resource, instance, receipt, ""))
            continue

        services = receipt.metadata.get("services", [])
        if services:
            running = sum(1 for s in services if s.get("state") == "running")
            message = f"{running}/{len(services)} container(s) running"
        else:
            message = "No containers (not started)"
        report.add(ResourceOutcome(
            name=resource, message=message, path=str(instance.path), receipt=receipt,
        ))

    return report


def resource_logs(
    catalog: str,
    name: str,
    *,
    base_dir: Path,
    runtime: RuntimeClient,
    tail: int = 100,
    catalog_obj: Catalog | None = None,
) -> BatchReport:
    """Recent compose log lines of one instance."""
    cat = catalog_obj or get_catalog()
    cat.validate(catalog, [name])

    report = BatchReport(verb="logs", catalog=catalog)
    instance = instance_for(catalog, name, base_dir)
    if not instance.exists:
        report.add(ResourceOutcome(
            name=name,
            status="failed",
            message=f"Resource {name} is not set up. Run setup first.",
        ))
        return report

    receipt = runtime.logs(instance.compose_file, tail=tail)
    report.add(_from_receipt(name, instance, receipt, f"Last {tail} log lines"))
    return report


def resource_urls(catalog: str, *, catalog_obj: Catalog | None = None) -> list[dict]:
    """Web UI endpoints of the catalog's resources, in declared order.

    Resources without a UI are omitted.
    """
    cat = catalog_obj or get_catalog()
    return [
        {"name": d.name, "label": d.label or d.name, "url": d.url}
        for d in cat.descriptors(catalog)
        if d.url
    ]


def _from_receipt(
    name: str,
    instance: ResourceInstance,
    receipt: Receipt,
    success_message: str,
) -> ResourceOutcome:
    if receipt.ok:
        return ResourceOutcome(
            name=name,
            message=success_message,
            path=str(instance.path),
            receipt=receipt,
        )
    if receipt.skipped:
        return ResourceOutcome(
            name=name,
            status="warning",
            message=receipt.output,
            path=str(instance.path),
            receipt=receipt,
        )

    logger.warning("%s: %s failed: %s", name, receipt.command or receipt.operation, receipt.error)
    return ResourceOutcome(
        name=name,
        status="failed",
        message=receipt.error or "runtime command failed",
        path=str(instance.path),
        receipt=receipt,
    )
