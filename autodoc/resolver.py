"""Cross-reference derivation over a closed aggregate."""

from __future__ import annotations

import uuid
from typing import Callable, List, Tuple

from .aggregate import ResultAggregate
from .logging import get_logger
from .models import CrossReference, FactKind, Relationship, simple_name


def _new_id() -> str:
    return uuid.uuid4().hex


class CrossReferenceResolver:
    """Derives relationships between facts once every unit has been merged.

    Each pass reads sorted snapshots of the aggregate, so the set of derived
    relationships does not depend on the order units were analyzed in. A pass
    that fails is logged and the remaining passes still run.
    """

    def __init__(self, id_factory: Callable[[], str] = _new_id) -> None:
        self.logger = get_logger("resolver")
        self._id_factory = id_factory

    def resolve(self, aggregate: ResultAggregate) -> int:
        """Add cross-references to ``aggregate`` and return how many were added."""
        passes: List[Tuple[str, Callable[[ResultAggregate], List[CrossReference]]]] = [
            ("config-type", self._config_type),
            ("listener-config", self._listener_config),
            ("model-peer", self._model_peer),
            ("inheritance", self._inheritance),
        ]
        added = 0
        for name, run_pass in passes:
            try:
                references = run_pass(aggregate)
            except Exception as exc:
                self.logger.warning("Cross-reference pass '%s' failed: %s", name, exc)
                continue
            for reference in references:
                aggregate.add_cross_reference(reference)
            added += len(references)
            self.logger.debug("Cross-reference pass '%s' added %d references", name, len(references))
        return added

    def _reference(
        self,
        source_kind: FactKind,
        target_kind: FactKind,
        source_key: str,
        target_key: str,
        relationship: Relationship,
    ) -> CrossReference:
        return CrossReference(
            id=self._id_factory(),
            source_kind=source_kind,
            target_kind=target_kind,
            source_key=source_key,
            target_key=target_key,
            relationship=relationship,
        )

    def _config_type(self, aggregate: ResultAggregate) -> List[CrossReference]:
        types = aggregate.types()
        references: List[CrossReference] = []
        for key, option in sorted(aggregate.config_options().items()):
            if option.class_name in types:
                references.append(
                    self._reference(
                        FactKind.CONFIG_OPTION,
                        FactKind.TYPE_INFO,
                        key,
                        option.class_name,
                        Relationship.IMPLEMENTATION,
                    )
                )
        return references

    def _listener_config(self, aggregate: ResultAggregate) -> List[CrossReference]:
        options = sorted(aggregate.config_options().items())
        references: List[CrossReference] = []
        for listener_key, listener in sorted(aggregate.listeners().items()):
            for option_key, option in options:
                if "Listener" in option.class_name or option.name in listener.name:
                    references.append(
                        self._reference(
                            FactKind.LISTENER,
                            FactKind.CONFIG_OPTION,
                            listener_key,
                            option_key,
                            Relationship.CONFIGURATION,
                        )
                    )
        return references

    def _model_peer(self, aggregate: ResultAggregate) -> List[CrossReference]:
        peers = sorted(aggregate.native_peers().items())
        references: List[CrossReference] = []
        for model_key, model in sorted(aggregate.model_classes().items()):
            model_names = {model.name, simple_name(model.name)}
            for peer_key, peer in peers:
                if peer.model_name in model_names or simple_name(peer.name) in model.std_name:
                    references.append(
                        self._reference(
                            FactKind.MODEL_CLASS,
                            FactKind.NATIVE_PEER,
                            model_key,
                            peer_key,
                            Relationship.IMPLEMENTATION,
                        )
                    )
        return references

    def _inheritance(self, aggregate: ResultAggregate) -> List[CrossReference]:
        types = aggregate.types()
        references: List[CrossReference] = []
        for key, info in sorted(types.items()):
            if info.super_name != key and info.super_name in types:
                references.append(
                    self._reference(
                        FactKind.TYPE_INFO,
                        FactKind.TYPE_INFO,
                        key,
                        info.super_name,
                        Relationship.INHERITANCE,
                    )
                )
        return references


__all__ = ["CrossReferenceResolver"]
