from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from docrouter.config.settings import Settings

IDENTITY_CARD_TYPE = "adharCard"
TAX_ID_CARD_TYPE = "Pancard"
INVOICE_TYPE = "invoice"


@dataclass(frozen=True)
class ProcessorRegistry:
    """Read-only lookup of document type to extraction processor id.

    Aliases are explicit ``(alias, canonical_type)`` pairs; no case folding or
    other string coercion is applied.
    """

    processors: Mapping[str, str] = field(default_factory=dict)
    aliases: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "processors", MappingProxyType(dict(self.processors)))
        object.__setattr__(self, "_alias_map", MappingProxyType(dict(self.aliases)))

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProcessorRegistry":
        processors = {
            IDENTITY_CARD_TYPE: settings.aadhar_processor_id,
            TAX_ID_CARD_TYPE: settings.pan_processor_id,
            INVOICE_TYPE: settings.invoice_processor_id,
            **settings.extra_type_processors,
        }
        return cls(
            processors={t: p for t, p in processors.items() if p},
            aliases=tuple(settings.type_aliases.items()),
        )

    def canonical_type(self, type_name: str) -> str:
        return self._alias_map.get(type_name, type_name)  # type: ignore[attr-defined]

    def resolve(self, type_name: str | None) -> str | None:
        """Return the processor id for ``type_name`` or None if unknown or empty."""
        if not type_name:
            return None
        return self.processors.get(self.canonical_type(type_name)) or None
