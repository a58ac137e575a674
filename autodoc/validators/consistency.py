"""Validator checking the internal consistency of a closed aggregate."""

from __future__ import annotations

from typing import List, Set

from ..models import FactKind
from .base import Severity, ValidationIssue, Validator

_BASE_TYPES = {"java.lang.Object"}


class ConsistencyValidator(Validator):
    """Flags dangling cross-references, orphan peers and unresolved supertypes."""

    name = "consistency"

    def validate(self, aggregate) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []

        if aggregate.total_facts == 0:
            issues.append(
                ValidationIssue(
                    message="No configuration or type facts were extracted",
                    severity=Severity.WARNING,
                    source=self.name,
                    details={"source_path": aggregate.source_path},
                )
            )

        keys = {kind: set(aggregate.facts(kind)) for kind in FactKind}
        for reference in sorted(aggregate.cross_references().values(), key=lambda ref: ref.id):
            for role, kind, key in (
                ("source", reference.source_kind, reference.source_key),
                ("target", reference.target_kind, reference.target_key),
            ):
                if key not in keys[kind]:
                    issues.append(
                        ValidationIssue(
                            message=f"Cross-reference {reference.id} points at missing {kind.value} '{key}'",
                            severity=Severity.ERROR,
                            source=self.name,
                            details={"reference": reference.id, "role": role},
                        )
                    )

        model_names = _model_names(aggregate)
        for name, peer in sorted(aggregate.native_peers().items()):
            if peer.model_name not in model_names:
                issues.append(
                    ValidationIssue(
                        message=f"Native peer {name} has no model class {peer.model_name}",
                        severity=Severity.WARNING,
                        source=self.name,
                        details={"peer": name, "model": peer.model_name},
                    )
                )

        types = aggregate.types()
        for name, info in sorted(types.items()):
            if info.super_name in _BASE_TYPES or info.super_name in types:
                continue
            issues.append(
                ValidationIssue(
                    message=f"Supertype {info.super_name} of {name} is outside the analyzed units",
                    severity=Severity.INFO,
                    source=self.name,
                    details={"type": name, "super_name": info.super_name},
                )
            )

        return issues


def _model_names(aggregate) -> Set[str]:
    names: Set[str] = set()
    for name in aggregate.model_classes():
        names.add(name)
        names.add(name.rsplit(".", 1)[-1])
    return names


__all__ = ["ConsistencyValidator"]
