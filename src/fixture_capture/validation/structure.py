"""Structural diff between raw and sanitized ledgers.

Joins two ledgers by node path and checks that redaction kept every element
and attribute, and only changed attribute value classes along approved
transitions. New nodes in the sanitized ledger are reported as warnings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from fixture_capture.sanitization.classify import ValueClass
from fixture_capture.sanitization.ledger import StructureLedger

_LOGGER = logging.getLogger(__name__)

# Class changes allowed besides identity
ALLOWED_TRANSITIONS: frozenset[tuple[ValueClass, ValueClass]] = frozenset(
    {
        (ValueClass.LONG_NUMERIC_ID, ValueClass.PLAIN_TEXT),
        (ValueClass.TOKEN_LIKE, ValueClass.PLAIN_TEXT),
        (ValueClass.URL, ValueClass.URL),
    }
)


@dataclass
class LedgerDiffResult:
    """Outcome of a ledger diff.

    Attributes:
        ok: True if there are no violations
        violations: Structural changes that must block the fixture
        warnings: Informational findings (never block)
    """

    ok: bool = True
    violations: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the ledger debug file."""
        return {"ok": self.ok, "violations": list(self.violations), "warnings": list(self.warnings)}


def is_transition_allowed(from_class: ValueClass | None, to_class: ValueClass | None) -> bool:
    """Check if an attribute value class change is approved.

    Args:
        from_class: Class in the raw ledger
        to_class: Class in the sanitized ledger

    Returns:
        True if the classes are equal or the pair is allow-listed

    Example:
        >>> is_transition_allowed(ValueClass.LONG_NUMERIC_ID, ValueClass.PLAIN_TEXT)
        True
        >>> is_transition_allowed(ValueClass.URL, ValueClass.PLAIN_TEXT)
        False
    """
    if from_class == to_class:
        return True
    if from_class is None or to_class is None:
        return False
    return (from_class, to_class) in ALLOWED_TRANSITIONS


def diff_structure_ledger(raw: StructureLedger, sanitized: StructureLedger) -> LedgerDiffResult:
    """Compare a raw ledger with the ledger of its sanitized document.

    Args:
        raw: Ledger of the input document
        sanitized: Ledger of the sanitized document

    Returns:
        LedgerDiffResult listing every violation and warning found
    """
    raw_nodes = raw.by_path()
    sanitized_nodes = sanitized.by_path()
    violations: list[str] = []
    warnings: list[str] = []

    for node_path, raw_node in raw_nodes.items():
        sanitized_node = sanitized_nodes.get(node_path)
        if sanitized_node is None:
            violations.append(f"missing node in sanitized ledger: {node_path}")
            continue

        if raw_node.tag_name != sanitized_node.tag_name:
            violations.append(f"tag mismatch at {node_path}: {raw_node.tag_name} -> {sanitized_node.tag_name}")

        present = set(sanitized_node.attributes_present)
        for attr in raw_node.attributes_present:
            if attr not in present:
                violations.append(f"missing attribute at {node_path}: {attr}")
                continue
            from_class = raw_node.attribute_value_class.get(attr)
            to_class = sanitized_node.attribute_value_class.get(attr)
            if not is_transition_allowed(from_class, to_class):
                from_name = from_class.value if from_class else None
                to_name = to_class.value if to_class else None
                violations.append(
                    f"value class change not allowed at {node_path}.{attr}: {from_name} -> {to_name}"
                )

    for node_path in sanitized_nodes:
        if node_path not in raw_nodes:
            warnings.append(f"new node introduced during sanitization: {node_path}")

    for warning in warnings:
        _LOGGER.warning("Ledger diff: %s", warning)

    return LedgerDiffResult(ok=not violations, violations=violations, warnings=warnings)
