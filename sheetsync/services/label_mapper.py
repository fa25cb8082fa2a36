from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from sheetsync.core.mapping import (
    AMBIGUOUS_CF_KEYS,
    CF_LABELS,
    CF_PARENT_HEADINGS,
    CF_PARENT_RESET,
    PL_LABELS,
)
from sheetsync.models.schema import FieldMapping
from sheetsync.services.coercion import normalize_label


AUTO_SECTION = "other"


def _clean(label) -> str:
    return " ".join(str(label or "").lower().split())


class LabelMapper:
    """
    Maps free-text row labels to stable line-item keys.

    Order of attempts: exact (case / whitespace insensitive), then substring
    containment either way in table order, then a slug of the label itself.
    """

    def __init__(self, entries: Iterable[Tuple[str, FieldMapping]]):

        self.entries: List[Tuple[str, FieldMapping]] = [
            (_clean(pattern), mapping) for pattern, mapping in entries
        ]

        self._exact = {}

        for pattern, mapping in self.entries:
            self._exact.setdefault(pattern, mapping)


    def match(self, label) -> Optional[FieldMapping]:

        clean = _clean(label)

        if not clean:
            return None

        if clean in self._exact:
            return self._exact[clean]

        for pattern, mapping in self.entries:

            if pattern in clean or clean in pattern:
                return mapping

        return None


    def resolve(self, label) -> Optional[FieldMapping]:

        mapping = self.match(label)

        if mapping is not None:
            return mapping

        auto_key = normalize_label(label)

        if not auto_key:
            return None

        return FieldMapping(key=auto_key, section=AUTO_SECTION)


PL_MAPPER = LabelMapper(
    (label, FieldMapping(key=key, section=section))
    for label, key, section in PL_LABELS
)

CF_MAPPER = LabelMapper(
    (label, FieldMapping(key=key, section=section, sub_section=sub))
    for label, key, section, sub in CF_LABELS
)


# ---------------- Cash flow parent context ----------------

class CashFlowContext(BaseModel):
    """Current parent heading while scanning one CF sheet top to bottom."""

    model_config = ConfigDict(frozen=True)

    parent: str = ""

    def advance(self, label: str) -> "CashFlowContext":

        text = str(label or "").strip()

        if text.startswith(CF_PARENT_RESET):
            return CashFlowContext()

        for prefix, slug in CF_PARENT_HEADINGS:

            if text.startswith(prefix):
                return CashFlowContext(parent=slug)

        return self


def resolve_cash_flow(label, context: CashFlowContext,
                      mapper: LabelMapper = CF_MAPPER) -> Optional[FieldMapping]:
    """
    Resolve a CF label under the current parent. Generic labels that repeat
    under several parents ("Inventory", "Lainnya", ...) are prefixed with the
    parent slug so they never share a key.
    """

    mapping = mapper.match(label)
    parent = context.parent

    if mapping is not None:

        if parent and mapping.key in AMBIGUOUS_CF_KEYS:
            return mapping.model_copy(update={"key": f"{parent}_{mapping.key}"})

        return mapping


    slug = normalize_label(label)

    if not slug:
        return None

    return FieldMapping(
        key=f"{parent}_{slug}" if parent else slug,
        section="operasi",
        sub_section=parent or AUTO_SECTION,
    )
