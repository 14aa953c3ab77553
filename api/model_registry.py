"""
Model Version Registry
======================
Maps each facade operation to versioned descriptions of the model behind it.
The coefficient set and insight rule table are fixed for a given version, so
the version string recorded with every audit entry is enough to reproduce a
historical result.

Each descriptor carries:
  - a semantic version string (e.g. ``"1.0.0"``),
  - a short description of what the version computes,
  - effective / deprecation timestamps.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ModelVersionDescriptor:
    version: str
    description: str
    effective_from: datetime = field(default_factory=datetime.utcnow)
    deprecated_at: Optional[datetime] = None


_REGISTRY: Dict[str, List[ModelVersionDescriptor]] = {
    "simulate": [
        ModelVersionDescriptor(
            version="1.0.0",
            description=(
                "Single-pass linear propagation over ten nodes with fixed "
                "normalisation factors, plus six ordered insight rules "
                "truncated to four."
            ),
        ),
    ],
    "simulate_scenario": [
        ModelVersionDescriptor(
            version="1.0.0",
            description="Preset catalog lookup followed by the 1.0.0 propagation model.",
        ),
    ],
    "list_scenarios": [
        ModelVersionDescriptor(version="1.0.0", description="Static five-entry preset catalog."),
    ],
    "list_variables": [
        ModelVersionDescriptor(version="1.0.0", description="Eight input domains with range and step."),
    ],
    "describe_graph": [
        ModelVersionDescriptor(
            version="1.0.0",
            description="Static layout with cosmetic price->interest loop excluded from evaluation order.",
        ),
    ],
    "request_advisory": [
        ModelVersionDescriptor(
            version="1.0.0",
            description="Gemini narrative report from an eight-value snapshot; failures mapped to a placeholder.",
        ),
    ],
}


def get_current_version(operation: str) -> ModelVersionDescriptor:
    """
    Latest descriptor for *operation* that is already effective and not
    deprecated.
    """
    versions = _REGISTRY.get(operation)
    if not versions:
        raise KeyError(f"Unknown operation: {operation}")

    now = datetime.utcnow()
    candidates = [v for v in versions if v.effective_from <= now and v.deprecated_at is None]
    if not candidates:
        raise RuntimeError(f"No active model version for operation '{operation}'")
    return max(candidates, key=lambda v: v.effective_from)


def register_version(
    operation: str,
    version: str,
    description: str,
    effective_from: Optional[datetime] = None,
) -> ModelVersionDescriptor:
    desc = ModelVersionDescriptor(
        version=version,
        description=description,
        effective_from=effective_from or datetime.utcnow(),
    )
    _REGISTRY.setdefault(operation, []).append(desc)
    return desc


def deprecate_version(operation: str, version: str) -> None:
    versions = _REGISTRY.get(operation, [])
    for i, v in enumerate(versions):
        if v.version == version and v.deprecated_at is None:
            versions[i] = ModelVersionDescriptor(
                version=v.version,
                description=v.description,
                effective_from=v.effective_from,
                deprecated_at=datetime.utcnow(),
            )
            return
    raise KeyError(f"Active version '{version}' not found for operation '{operation}'")


def list_versions(operation: str) -> List[ModelVersionDescriptor]:
    return list(_REGISTRY.get(operation, []))
