from collections.abc import Iterable

from docrouter.processor.models import AnnotatedDocument, ClassificationDecision, Label, TypeBucket
from docrouter.routing.registry import ProcessorRegistry


class TypeRouter:
    """Turns classifier labels into types and groups documents by type."""

    def __init__(self, registry: ProcessorRegistry) -> None:
        self._registry = registry

    def classify_decision(
        self,
        annotated: AnnotatedDocument,
        threshold: float,
    ) -> tuple[str, float] | None:
        """Return the top label's (type, confidence) if it meets ``threshold``."""
        return self.top_label(annotated.labels, threshold)

    @staticmethod
    def top_label(labels: Iterable[Label], threshold: float) -> tuple[str, float] | None:
        """Highest-confidence typed label; earliest wins ties.

        A confidence equal to ``threshold`` is accepted.
        """
        best: Label | None = None
        for label in labels:
            if not label.type:
                continue
            if best is None or label.confidence > best.confidence:
                best = label
        if best is None or best.confidence < threshold:
            return None
        return best.type, best.confidence

    def resolve_processor(self, type_name: str | None) -> str | None:
        return self._registry.resolve(type_name)

    def canonical_type(self, type_name: str) -> str:
        return self._registry.canonical_type(type_name)

    def bucketize(self, decisions: Iterable[ClassificationDecision]) -> TypeBucket:
        """Group decided documents by canonical type, preserving input order.

        Documents without a resolved type belong to no bucket.
        """
        buckets: TypeBucket = {}
        for decision in decisions:
            if decision.resolved_type is None:
                continue
            type_name = self.canonical_type(decision.resolved_type)
            buckets.setdefault(type_name, []).append(decision.input)
        return buckets
