"""
Domain models — Pydantic types for setulab.

All models are re-exported here for convenient access:

    from setulab.core.models import ResourceDescriptor, Receipt, PrereqReport
"""

from setulab.core.models.prereq import (
    OSProfile,
    PrereqReport,
    RequirementResult,
    RequirementStatus,
    ToolCheck,
    ToolRequirement,
)
from setulab.core.models.receipt import Receipt
from setulab.core.models.resource import (
    CATALOG_TYPES,
    BatchReport,
    CatalogType,
    GeneratedFile,
    PortMapping,
    RenderedResource,
    ResourceDescriptor,
    ResourceInstance,
    ResourceOutcome,
)

__all__ = [
    # resource.py
    "BatchReport",
    "CATALOG_TYPES",
    "CatalogType",
    "GeneratedFile",
    # prereq.py
    "OSProfile",
    "PortMapping",
    "PrereqReport",
    # receipt.py
    "Receipt",
    "RenderedResource",
    "RequirementResult",
    "RequirementStatus",
    "ResourceDescriptor",
    "ResourceInstance",
    "ResourceOutcome",
    "ToolCheck",
    "ToolRequirement",
]
