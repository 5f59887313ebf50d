"""Layout and flexbox convention rules."""

from collections.abc import Iterator
from typing import TYPE_CHECKING

from ..engine.issues import RuleViolation
from ..engine.models import RuleType, StyleNode

if TYPE_CHECKING:
    from ..engine.session import AuditSession

SEMANTIC_CONTAINERS = frozenset({"main", "section", "article"})
OVERFLOW_EXEMPT_CLASSES = frozenset({"carousel", "slider"})
FLEX_DISPLAYS = frozenset({"flex", "inline-flex"})
EMPTY_GAPS = frozenset({"", "normal", "0", "0px", "normal normal", "0px 0px"})

MAX_FLEX_SHRINK = 1.0
MAX_FLEX_GROW = 10.0
MAX_FLEX_ORDER = 10


def _as_float(value: str) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_int(value: str) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class LayoutRules:
    """Structural checks over layout buckets and flex containers."""

    name = "layout"

    def evaluate(self, session: "AuditSession") -> Iterator[RuleViolation]:
        max_depth = session.settings.max_nesting_depth

        for bucket in session.layout_fingerprints.values():
            for node in bucket.elements:
                depth = node.depth
                if depth > max_depth:
                    yield RuleViolation(
                        rule_type=RuleType.DEEP_NESTING,
                        elements=[node],
                        description=f"Nesting too deep ({depth} levels). Deep trees make CSS hard to maintain.",
                        current_values={"nesting-level": depth},
                        suggested_fix={"recommendation": "flatten the element structure"},
                    )

        for node in session.elements:
            yield from self._check_positioning(node)
            if node.style("display") in FLEX_DISPLAYS:
                yield from self._check_flex_container(node)

    def _check_positioning(self, node: StyleNode) -> Iterator[RuleViolation]:
        if node.style("position") == "fixed" and node.style("z-index", "auto") == "auto":
            yield RuleViolation(
                rule_type=RuleType.FIXED_WITHOUT_Z_INDEX,
                elements=[node],
                description="Element with position: fixed should set an explicit z-index for predictable stacking.",
                current_values={"z-index": "auto"},
                suggested_fix={"z-index": "1000"},
            )

        if (
            node.tag_name in SEMANTIC_CONTAINERS
            and node.style("overflow") == "hidden"
            and not OVERFLOW_EXEMPT_CLASSES.intersection(node.classes)
        ):
            yield RuleViolation(
                rule_type=RuleType.SEMANTIC_OVERFLOW_HIDDEN,
                elements=[node],
                description="Semantic container with overflow: hidden. Make sure it does not clip important content.",
                current_values={"overflow": "hidden"},
                suggested_fix={"overflow": "visible"},
            )

    def _check_flex_container(self, container: StyleNode) -> Iterator[RuleViolation]:
        if len(container.children) > 1 and container.style("gap").strip() in EMPTY_GAPS:
            yield RuleViolation(
                rule_type=RuleType.MISSING_FLEX_GAP,
                elements=[container],
                description="Flex container with several children and no gap. Use gap for consistent spacing.",
                current_values={"gap": container.style("gap") or "none"},
                suggested_fix={"gap": "1rem"},
            )

        for item in container.children:
            flex_shrink = _as_float(item.style("flex-shrink"))
            if flex_shrink is not None and flex_shrink > MAX_FLEX_SHRINK:
                yield RuleViolation(
                    rule_type=RuleType.HIGH_FLEX_SHRINK,
                    elements=[item],
                    description=f"High flex-shrink ({flex_shrink:g}) may over-compress the element.",
                    current_values={"flex-shrink": item.style("flex-shrink")},
                    suggested_fix={"flex-shrink": "1"},
                )

            flex_grow = _as_float(item.style("flex-grow"))
            if flex_grow is not None and flex_grow > MAX_FLEX_GROW:
                yield RuleViolation(
                    rule_type=RuleType.EXTREME_FLEX_GROW,
                    elements=[item],
                    description=f"Extreme flex-grow ({flex_grow:g}). Values of 0-3 are usually enough.",
                    current_values={"flex-grow": item.style("flex-grow")},
                    suggested_fix={"flex-grow": "1"},
                )

            order = _as_int(item.style("order"))
            if order is not None and abs(order) > MAX_FLEX_ORDER:
                yield RuleViolation(
                    rule_type=RuleType.EXTREME_FLEX_ORDER,
                    elements=[item],
                    description=f"Extreme order ({order}) breaks the logical reading order for screen readers.",
                    current_values={"order": item.style("order")},
                    suggested_fix={"order": "0"},
                )
