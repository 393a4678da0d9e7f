"""Tests for the structural ledger diff."""

from __future__ import annotations

import logging

import pytest

from fixture_capture.sanitization import LedgerNode, StructureLedger, ValueClass, analyze_structure
from fixture_capture.validation import LedgerDiffResult, diff_structure_ledger, is_transition_allowed


def _ledger(*nodes: LedgerNode) -> StructureLedger:
    return StructureLedger(nodes=sorted(nodes, key=lambda n: n.node_path))


def _node(path: str, tag: str = "a", **attrs: ValueClass) -> LedgerNode:
    return LedgerNode(
        node_path=path,
        tag_name=tag,
        attributes_present=sorted(attrs),
        attribute_value_class=dict(attrs),
    )


# =============================================================================
# is_transition_allowed() test cases
# =============================================================================
#
# ┌──────────────────┬──────────────────┬─────────┐
# │ from             │ to               │ allowed │
# ├──────────────────┼──────────────────┼─────────┤
# │ X                │ X                │ yes     │
# │ long_numeric_id  │ plain_text       │ yes     │
# │ token_like       │ plain_text       │ yes     │
# │ anything else    │                  │ no      │
# └──────────────────┴──────────────────┴─────────┘
#
# fmt: off
TRANSITION_CASES = [
    (ValueClass.URL,             ValueClass.URL,             True),
    (ValueClass.PATH_LIKE,       ValueClass.PATH_LIKE,       True),
    (ValueClass.EMPTY,           ValueClass.EMPTY,           True),
    (ValueClass.LONG_NUMERIC_ID, ValueClass.PLAIN_TEXT,      True),
    (ValueClass.TOKEN_LIKE,      ValueClass.PLAIN_TEXT,      True),
    (ValueClass.URL,             ValueClass.PLAIN_TEXT,      False),
    (ValueClass.PLAIN_TEXT,      ValueClass.LONG_NUMERIC_ID, False),
    (ValueClass.PLAIN_TEXT,      ValueClass.TOKEN_LIKE,      False),
    (ValueClass.EMAIL_LIKE,      ValueClass.PLAIN_TEXT,      False),
    (ValueClass.PATH_LIKE,       ValueClass.URL,             False),
    (ValueClass.URL,             None,                       False),
]
# fmt: on


@pytest.mark.parametrize(("from_class", "to_class", "allowed"), TRANSITION_CASES)
def test_is_transition_allowed(from_class: ValueClass, to_class: ValueClass | None, allowed: bool) -> None:
    """Test the value class transition allow-list."""
    assert is_transition_allowed(from_class, to_class) is allowed


class TestDiffStructureLedger:
    """Tests for diff_structure_ledger()."""

    def test_identical_ledgers(self) -> None:
        """Test a ledger diffed against itself is clean."""
        ledger = analyze_structure('<div><a href="https://example.com">x</a></div>')
        result = diff_structure_ledger(ledger, ledger)
        assert result == LedgerDiffResult(ok=True, violations=[], warnings=[])

    def test_missing_node(self) -> None:
        """Test a dropped element is a violation."""
        raw = _ledger(_node("/div[1]", "div"), _node("/div[1]/a[1]"))
        sanitized = _ledger(_node("/div[1]", "div"))

        result = diff_structure_ledger(raw, sanitized)
        assert not result.ok
        assert result.violations == ["missing node in sanitized ledger: /div[1]/a[1]"]

    def test_tag_mismatch(self) -> None:
        """Test a renamed element is a violation."""
        result = diff_structure_ledger(_ledger(_node("/a[1]", "a")), _ledger(_node("/a[1]", "span")))
        assert result.violations == ["tag mismatch at /a[1]: a -> span"]

    def test_missing_attribute(self) -> None:
        """Test a dropped attribute is a violation."""
        raw = _ledger(_node("/a[1]", href=ValueClass.URL, title=ValueClass.PLAIN_TEXT))
        sanitized = _ledger(_node("/a[1]", href=ValueClass.URL))

        result = diff_structure_ledger(raw, sanitized)
        assert result.violations == ["missing attribute at /a[1]: title"]

    def test_disallowed_class_change(self) -> None:
        """Test an unapproved class transition is a violation."""
        raw = _ledger(_node("/a[1]", href=ValueClass.URL))
        sanitized = _ledger(_node("/a[1]", href=ValueClass.PLAIN_TEXT))

        result = diff_structure_ledger(raw, sanitized)
        assert result.violations == ["value class change not allowed at /a[1].href: url -> plain_text"]

    def test_allowed_class_change(self) -> None:
        """Test an approved class transition is clean."""
        raw = _ledger(_node("/p[1]", "p", **{"data-id": ValueClass.LONG_NUMERIC_ID}))
        sanitized = _ledger(_node("/p[1]", "p", **{"data-id": ValueClass.PLAIN_TEXT}))
        assert diff_structure_ledger(raw, sanitized).ok

    def test_added_attribute_ignored(self) -> None:
        """Test attributes only present after sanitizing are not checked."""
        raw = _ledger(_node("/a[1]"))
        sanitized = _ledger(_node("/a[1]", rel=ValueClass.PLAIN_TEXT))
        assert diff_structure_ledger(raw, sanitized).ok

    def test_all_violations_collected(self) -> None:
        """Test every violation is reported, not just the first."""
        raw = _ledger(
            _node("/a[1]", href=ValueClass.URL),
            _node("/b[1]", "b"),
            _node("/i[1]", "i", title=ValueClass.PLAIN_TEXT),
        )
        sanitized = _ledger(_node("/a[1]", href=ValueClass.EMPTY), _node("/i[1]", "i"))

        result = diff_structure_ledger(raw, sanitized)
        assert result.violations == [
            "value class change not allowed at /a[1].href: url -> empty",
            "missing node in sanitized ledger: /b[1]",
            "missing attribute at /i[1]: title",
        ]

    def test_new_node_is_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test extra nodes are reported as warnings only."""
        raw = _ledger(_node("/a[1]"))
        sanitized = _ledger(_node("/a[1]"), _node("/a[2]"))

        with caplog.at_level(logging.WARNING):
            result = diff_structure_ledger(raw, sanitized)

        assert result.ok
        assert result.warnings == ["new node introduced during sanitization: /a[2]"]
        assert "new node introduced during sanitization: /a[2]" in caplog.text

    def test_real_documents(self) -> None:
        """Test a changed document structure is caught."""
        raw = analyze_structure('<div><a href="https://example.com/p/123456789">x</a></div>')
        sanitized = analyze_structure("<div><span>x</span></div>")

        result = diff_structure_ledger(raw, sanitized)
        assert result.violations == ["missing node in sanitized ledger: /div[1]/a[1]"]
        assert result.warnings == ["new node introduced during sanitization: /div[1]/span[1]"]

    def test_to_dict(self) -> None:
        """Test diff serialization for the ledger debug file."""
        result = LedgerDiffResult(ok=False, violations=["v"], warnings=["w"])
        assert result.to_dict() == {"ok": False, "violations": ["v"], "warnings": ["w"]}
