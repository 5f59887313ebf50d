"""Style fingerprint collection.

One pass over the style tree groups participating elements by a canonical
tuple of computed properties. Elements sharing a fingerprint are
interchangeable for rule purposes, so rules evaluate buckets instead of
every element, and a bucket's size doubles as the redundancy signal.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from .models import StyleNode, StyleTree

logger = structlog.get_logger(__name__)

# Tags that never render
NON_RENDERING_TAGS = frozenset({
    "head",
    "link",
    "meta",
    "noscript",
    "script",
    "style",
    "template",
    "title",
})

TYPOGRAPHY_PROPERTIES = ("font-family", "font-size", "font-weight", "line-height")
LAYOUT_PROPERTIES = ("display", "position")

Fingerprint = tuple[str, ...]


def participates(node: StyleNode) -> bool:
    """Check if a node takes part in fingerprinting and rule evaluation.

    Non-rendering tags are skipped, as are nodes without a layout box
    unless they are the document root.
    """
    if node.tag_name in NON_RENDERING_TAGS:
        return False
    return node.has_layout_box or node.is_root


def typography_fingerprint(node: StyleNode) -> Fingerprint:
    """(font-family, font-size, font-weight, line-height)"""
    return tuple(node.style(name) for name in TYPOGRAPHY_PROPERTIES)


def layout_fingerprint(node: StyleNode) -> Fingerprint:
    """(tag, display, position)"""
    return (node.tag_name,) + tuple(node.style(name) for name in LAYOUT_PROPERTIES)


@dataclass
class FingerprintBucket:
    """All elements sharing one fingerprint, in document order."""

    key: Fingerprint
    metrics: dict[str, str]
    elements: list[StyleNode] = field(default_factory=list)

    @property
    def representative(self) -> StyleNode:
        return self.elements[0]

    @property
    def count(self) -> int:
        return len(self.elements)

    def add(self, node: StyleNode) -> None:
        self.elements.append(node)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "key": list(self.key),
            "metrics": dict(self.metrics),
            "count": self.count,
            "representative": self.representative.tag_path() if self.elements else None,
        }


class StyleFingerprintCollector:
    """Group the participating elements of a style tree into buckets.

    Args:
        key_fn: Maps a node to its fingerprint
        properties: Computed properties recorded as the bucket metrics
        include_tag: Also record the tag name in the metrics
    """

    def __init__(
        self,
        key_fn: Callable[[StyleNode], Fingerprint] = typography_fingerprint,
        properties: Sequence[str] = TYPOGRAPHY_PROPERTIES,
        include_tag: bool = False,
        name: str = "typography",
    ):
        self.key_fn = key_fn
        self.properties = tuple(properties)
        self.include_tag = include_tag
        self.name = name
        self.log = logger.bind(component="fingerprint_collector", domain=name)

    def collect(self, tree: StyleTree) -> dict[Fingerprint, FingerprintBucket]:
        """Walk the tree once and bucket every participating element.

        Returns:
            Buckets keyed by fingerprint, in order of first appearance
        """
        buckets: dict[Fingerprint, FingerprintBucket] = {}
        skipped = 0

        for node in tree.walk():
            if not participates(node):
                skipped += 1
                continue

            key = self.key_fn(node)
            bucket = buckets.get(key)
            if bucket is None:
                bucket = FingerprintBucket(key=key, metrics=self._metrics(node))
                buckets[key] = bucket
            bucket.add(node)

        self.log.debug("fingerprints_collected", buckets=len(buckets), skipped=skipped)
        return buckets

    def _metrics(self, node: StyleNode) -> dict[str, str]:
        metrics = {name: node.style(name) for name in self.properties}
        if self.include_tag:
            metrics["tag"] = node.tag_name
        return metrics


def typography_collector() -> StyleFingerprintCollector:
    return StyleFingerprintCollector(typography_fingerprint, TYPOGRAPHY_PROPERTIES)


def layout_collector() -> StyleFingerprintCollector:
    return StyleFingerprintCollector(
        layout_fingerprint,
        LAYOUT_PROPERTIES,
        include_tag=True,
        name="layout",
    )
