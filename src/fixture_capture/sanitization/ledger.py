"""Structure ledgers for HTML documents.

A structure ledger records, for every element of a parsed document, its
position (node path), tag name, attribute keys and the value class of each
attribute and of its visible text. Two ledgers built from structurally
identical documents share node paths, which makes them joinable.

Node paths are root-relative chains of ``tag[n]`` segments, where ``n`` is the
1-based position among same-tag siblings. The ``html`` element itself is not
a segment: it maps to ``/`` and its children start a fresh chain.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup, Tag

from fixture_capture.sanitization.classify import ValueClass, classify_value

_LOGGER = logging.getLogger(__name__)

DEFAULT_POLICY_VERSION = "v1"

# Tree builder used for every parse so node paths stay comparable
HTML_PARSER = "html.parser"


def parse_document(html: str) -> BeautifulSoup:
    """Parse HTML into a mutable tree.

    Attribute values are kept as plain strings (``class`` is not split into
    a list) so they round-trip unchanged through serialization.

    Args:
        html: Raw HTML text

    Returns:
        Parsed document
    """
    return BeautifulSoup(html, HTML_PARSER, multi_valued_attributes=None)


@dataclass
class LedgerNode:
    """Ledger entry for one element.

    Attributes:
        node_path: Position key, unique within a ledger
        tag_name: Element tag name
        attributes_present: Attribute keys, sorted
        attribute_value_class: Value class per attribute key
        text_class: Value class of the element's trimmed text, None if empty
    """

    node_path: str
    tag_name: str
    attributes_present: list[str] = field(default_factory=list)
    attribute_value_class: dict[str, ValueClass] = field(default_factory=dict)
    text_class: ValueClass | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the ledger JSON keys."""
        data: dict[str, Any] = {
            "nodePath": self.node_path,
            "tagName": self.tag_name,
            "attributesPresent": list(self.attributes_present),
            "attributeValueClass": {k: v.value for k, v in self.attribute_value_class.items()},
        }
        if self.text_class is not None:
            data["textClass"] = self.text_class.value
        return data


@dataclass
class StructureLedger:
    """Ordered ledger of a document's elements.

    Attributes:
        policy_version: Redaction policy version the ledger was built under
        nodes: Ledger nodes sorted by node path
    """

    policy_version: str = DEFAULT_POLICY_VERSION
    nodes: list[LedgerNode] = field(default_factory=list)

    def by_path(self) -> dict[str, LedgerNode]:
        """Index nodes by node path."""
        return {node.node_path: node for node in self.nodes}

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the ledger JSON keys."""
        return {
            "policyVersion": self.policy_version,
            "nodes": [node.to_dict() for node in self.nodes],
        }


def get_node_path(element: Tag) -> str:
    """Compute the node path of a single element.

    Args:
        element: Element inside a parsed document

    Returns:
        Node path like "/body[1]/div[2]/p[1]"

    Example:
        >>> soup = parse_document("<html><body><p>a</p><p>b</p></body></html>")
        >>> get_node_path(soup.find_all("p")[1])
        '/body[1]/p[2]'
    """
    segments: list[str] = []
    current: Tag | None = element
    while isinstance(current, Tag) and not isinstance(current, BeautifulSoup):
        if current.name == "html":
            break
        parent = current.parent
        if parent is None:
            index = 1
        else:
            siblings = [child for child in parent.children if isinstance(child, Tag) and child.name == current.name]
            index = next(i for i, sibling in enumerate(siblings, start=1) if sibling is current)
        segments.append(f"{current.name}[{index}]")
        current = parent
    return "/" + "/".join(reversed(segments))


def index_node_paths(soup: BeautifulSoup) -> list[tuple[Tag, str]]:
    """Compute node paths for every element in document order.

    Equivalent to calling get_node_path() on each element, but done in a
    single pass: parents are always visited before their children.

    Args:
        soup: Parsed document

    Returns:
        (element, node path) pairs in document order
    """
    chains: dict[int, str] = {id(soup): ""}
    sibling_counts: dict[int, Counter[str]] = {}
    indexed: list[tuple[Tag, str]] = []

    for element in soup.find_all(True):
        parent = element.parent
        parent_key = id(parent)
        counts = sibling_counts.setdefault(parent_key, Counter())
        counts[element.name] += 1

        if element.name == "html":
            chain = ""
        else:
            chain = f"{chains.get(parent_key, '')}/{element.name}[{counts[element.name]}]"
        chains[id(element)] = chain
        indexed.append((element, chain or "/"))

    return indexed


def _ledger_node(element: Tag, node_path: str) -> LedgerNode:
    attrs = element.attrs or {}
    attributes_present = sorted(attrs)
    attribute_value_class = {key: classify_value(str(attrs[key] or "")) for key in attributes_present}
    text = element.get_text().strip()
    return LedgerNode(
        node_path=node_path,
        tag_name=element.name,
        attributes_present=attributes_present,
        attribute_value_class=attribute_value_class,
        text_class=classify_value(text) if text else None,
    )


def build_ledger(soup: BeautifulSoup, policy_version: str = DEFAULT_POLICY_VERSION) -> StructureLedger:
    """Build a structure ledger from an already parsed document.

    Args:
        soup: Parsed document
        policy_version: Policy version tag for the ledger

    Returns:
        Ledger with nodes sorted by node path
    """
    nodes = [_ledger_node(element, node_path) for element, node_path in index_node_paths(soup)]
    nodes.sort(key=lambda node: node.node_path)
    _LOGGER.debug("Built structure ledger with %d nodes", len(nodes))
    return StructureLedger(policy_version=policy_version, nodes=nodes)


def analyze_structure(html: str, policy_version: str = DEFAULT_POLICY_VERSION) -> StructureLedger:
    """Parse HTML and build its structure ledger.

    Args:
        html: Raw HTML text
        policy_version: Policy version tag for the ledger

    Returns:
        Ledger with nodes sorted by node path

    Example:
        >>> ledger = analyze_structure('<html><body><a href="/p/1">x</a></body></html>')
        >>> [node.node_path for node in ledger.nodes]
        ['/', '/body[1]', '/body[1]/a[1]']
    """
    return build_ledger(parse_document(html), policy_version)
