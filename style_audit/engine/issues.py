"""Issue synthesis.

Rule packs report raw ``RuleViolation`` records; the synthesizer maps each
one to a normalized, immutable ``Issue``. Severity, category and WCAG
metadata are fixed per rule type in ``RULE_CATALOG``. Contrast violations
get their corrective colors from the adjustment solver here, lazily, so the
solver only runs for elements that actually fail.
"""

from dataclasses import dataclass, field
from typing import Any

import structlog

from .color import to_hex
from .contrast import ContrastEvaluation
from .models import (
    ContrastKind,
    ElementDescriptor,
    Issue,
    IssueCategory,
    IssueSeverity,
    RuleType,
    StyleNode,
    StyleTree,
)
from .solver import AdjustDirection, ColorAdjustmentSolver

logger = structlog.get_logger(__name__)

TEXT_PREVIEW_LENGTH = 30
EMPTY_TEXT_PREVIEW = "(empty)"


@dataclass(frozen=True)
class RuleMeta:
    """Fixed metadata for one rule type."""

    severity: IssueSeverity
    category: IssueCategory
    automatable: bool
    wcag_level: str | None = None
    wcag_criteria: str | None = None
    impact: str | None = None


RULE_CATALOG: dict[RuleType, RuleMeta] = {
    # Contrast
    RuleType.CONTRAST_AA: RuleMeta(
        IssueSeverity.CRITICAL, IssueCategory.VISUAL, True,
        "AA", "1.4.3 Contrast (Minimum)", "High - users with low vision",
    ),
    RuleType.CONTRAST_AAA: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.VISUAL, True,
        "AAA", "1.4.6 Contrast (Enhanced)", "Medium - enhanced readability",
    ),
    # Typography
    RuleType.LINE_HEIGHT_TOO_SMALL: RuleMeta(
        IssueSeverity.CRITICAL, IssueCategory.COGNITIVE, True,
        "AA", "1.4.12 Text Spacing", "Medium - cramped lines are hard to track",
    ),
    RuleType.LINE_HEIGHT_TOO_LARGE: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.COGNITIVE, True,
        impact="Low - loose lines break reading flow",
    ),
    RuleType.EXTREME_FONT_WEIGHT: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.VISUAL, True,
        impact="Low - extreme weights render poorly at small sizes",
    ),
    RuleType.REDUNDANT_STYLE: RuleMeta(
        IssueSeverity.INFO, IssueCategory.OTHER, False,
        impact="Low - style consistency",
    ),
    RuleType.MIXED_FONT_FAMILIES: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.VISUAL, False,
        impact="Low - unpredictable fallback rendering",
    ),
    RuleType.NON_STANDARD_SIZE: RuleMeta(
        IssueSeverity.INFO, IssueCategory.OTHER, True,
        impact="Low - type scale consistency",
    ),
    RuleType.FONT_TOO_SMALL: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.VISUAL, True,
        "AA", "1.4.4 Resize Text", "Medium - small text is hard to read",
    ),
    RuleType.ZERO_FONT_SIZE: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.SEMANTIC, False,
        impact="Medium - text hidden from sighted users only",
    ),
    # Layout
    RuleType.DEEP_NESTING: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.STRUCTURE, False,
        impact="Low - maintainability and rendering cost",
    ),
    RuleType.FIXED_WITHOUT_Z_INDEX: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.LAYOUT, True,
        impact="Low - stacking order depends on source order",
    ),
    RuleType.SEMANTIC_OVERFLOW_HIDDEN: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.LAYOUT, True,
        "AA", "1.4.10 Reflow", "Medium - content may be clipped when zoomed",
    ),
    RuleType.MISSING_FLEX_GAP: RuleMeta(
        IssueSeverity.INFO, IssueCategory.LAYOUT, True,
        impact="Low - spacing relies on child margins",
    ),
    RuleType.HIGH_FLEX_SHRINK: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.LAYOUT, True,
        impact="Low - items collapse unevenly",
    ),
    RuleType.EXTREME_FLEX_GROW: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.LAYOUT, True,
        impact="Low - unpredictable distribution of free space",
    ),
    RuleType.EXTREME_FLEX_ORDER: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.KEYBOARD, False,
        "A", "1.3.2 Meaningful Sequence", "Medium - visual order differs from focus order",
    ),
    # Interaction
    RuleType.TOUCH_TARGET_SIZE: RuleMeta(
        IssueSeverity.WARNING, IssueCategory.MOTOR, True,
        "AAA", "2.5.5 Target Size", "Medium - mobile and motor-impaired users",
    ),
    RuleType.FOCUS_OUTLINE_MISSING: RuleMeta(
        IssueSeverity.CRITICAL, IssueCategory.KEYBOARD, True,
        "AA", "2.4.7 Focus Visible", "Critical - keyboard navigation",
    ),
}

_KIND_LABELS = {
    ContrastKind.NORMAL_TEXT: "Normal text",
    ContrastKind.LARGE_TEXT: "Large text",
    ContrastKind.NON_TEXT: "Non-text element",
}


@dataclass
class RuleViolation:
    """Raw output of a rule pack, before synthesis.

    ``contrast`` carries the evaluation for contrast rules; the synthesizer
    derives current values and the suggested fix from it.
    """

    rule_type: RuleType
    elements: list[StyleNode]
    description: str
    current_values: dict[str, Any] = field(default_factory=dict)
    suggested_fix: dict[str, Any] = field(default_factory=dict)
    contrast: ContrastEvaluation | None = None


class DescriptorBuilder:
    """Project live nodes into durable ``ElementDescriptor`` records."""

    def __init__(self, tree: StyleTree):
        self.tree = tree
        self._signatures: list[tuple[str, frozenset[str]]] | None = None
        self._match_counts: dict[tuple[str, frozenset[str]], int] = {}

    def describe(self, node: StyleNode) -> ElementDescriptor:
        text = (node.text_content or "").strip()
        return ElementDescriptor(
            selector=self.selector(node),
            tag_path=node.tag_path(),
            text_preview=text[:TEXT_PREVIEW_LENGTH] or EMPTY_TEXT_PREVIEW,
            dom_path=node.dom_path(),
            tag_name=node.tag_name,
            class_name=node.class_name or None,
            element_id=node.element_id,
        )

    def selector(self, node: StyleNode) -> str:
        """Short selector: ``#id``, else ``tag.classes`` with ``:nth-child``
        when it would also match other elements."""
        if node.element_id:
            return f"#{node.element_id}"

        selector = node.tag_name
        if node.classes:
            selector += "." + ".".join(node.classes)

        if self._count_matches(node) > 1 and node.parent is not None:
            twins = [
                sibling
                for sibling in node.parent.children
                if sibling.tag_name == node.tag_name and sibling.class_name == node.class_name
            ]
            if len(twins) > 1:
                selector += f":nth-child({node.index_in_parent()})"
        return selector

    def _count_matches(self, node: StyleNode) -> int:
        key = (node.tag_name, frozenset(node.classes))
        if key not in self._match_counts:
            if self._signatures is None:
                self._signatures = [(n.tag_name, frozenset(n.classes)) for n in self.tree.walk()]
            tag, classes = key
            self._match_counts[key] = sum(
                1 for other_tag, other_classes in self._signatures
                if other_tag == tag and classes <= other_classes
            )
        return self._match_counts[key]


class IssueSynthesizer:
    """Turn rule violations into ``Issue`` records."""

    def __init__(self, solver: ColorAdjustmentSolver, descriptors: DescriptorBuilder):
        self.solver = solver
        self.descriptors = descriptors
        self.log = logger.bind(component="issue_synthesizer")

    def synthesize(self, violation: RuleViolation) -> Issue:
        """Map one violation to an issue. Never touches the tree."""
        meta = RULE_CATALOG[violation.rule_type]

        current_values = dict(violation.current_values)
        suggested_fix = dict(violation.suggested_fix)
        if violation.contrast is not None:
            current_values = {**self.contrast_current_values(violation.contrast), **current_values}
            suggested_fix = {**self.suggest_contrast_fix(violation.contrast, violation.rule_type), **suggested_fix}

        return Issue(
            severity=meta.severity,
            category=meta.category,
            rule_type=violation.rule_type,
            description=violation.description,
            affected_elements=tuple(self.descriptors.describe(node) for node in violation.elements),
            current_values=current_values,
            suggested_fix=suggested_fix,
            automatable=meta.automatable,
            wcag_level=meta.wcag_level,
            wcag_criteria=meta.wcag_criteria,
            impact=meta.impact,
        )

    @staticmethod
    def contrast_current_values(evaluation: ContrastEvaluation) -> dict[str, Any]:
        result = evaluation.result
        return {
            "current-ratio": f"{result.ratio:.2f}",
            "required-ratio": f"{result.requirement.min_ratio_aa:.1f}",
            "required-ratio-aaa": f"{result.requirement.min_ratio_aaa:.1f}",
            "text-color": to_hex(evaluation.text_color),
            "bg-color": to_hex(evaluation.background_color),
            "element-type": result.requirement.kind.value,
        }

    def suggest_contrast_fix(self, evaluation: ContrastEvaluation, rule_type: RuleType) -> dict[str, Any]:
        """Offer a darker text color and a lighter background as alternatives.

        The target is the minimum of the level that was violated. Either
        suggestion may fall short of it when the solver hits its cap, which
        the ``*-meets-target`` flags report.
        """
        requirement = evaluation.result.requirement
        target = requirement.min_ratio_aaa if rule_type is RuleType.CONTRAST_AAA else requirement.min_ratio_aa

        darker_text = self.solver.solve(
            evaluation.text_color, evaluation.background_color, target, AdjustDirection.DARKEN
        )
        lighter_background = self.solver.solve(
            evaluation.background_color, evaluation.text_color, target, AdjustDirection.LIGHTEN
        )

        if not (darker_text.target_met or lighter_background.target_met):
            self.log.debug(
                "contrast_fix_advisory",
                tag=evaluation.node.tag_name,
                target_ratio=target,
                best_ratio=round(max(darker_text.ratio, lighter_background.ratio), 2),
            )

        text_hex = to_hex(darker_text.color)
        background_hex = to_hex(lighter_background.color)
        return {
            "color": text_hex,
            "background-color": background_hex,
            "alternative-1": f"color: {text_hex}",
            "alternative-2": f"background-color: {background_hex}",
            "target-ratio": target,
            "alternative-1-ratio": round(darker_text.ratio, 2),
            "alternative-2-ratio": round(lighter_background.ratio, 2),
            "alternative-1-meets-target": darker_text.target_met,
            "alternative-2-meets-target": lighter_background.target_met,
        }


def describe_contrast_failure(evaluation: ContrastEvaluation, level: str) -> str:
    """Human readable description of a contrast violation."""
    requirement = evaluation.result.requirement
    required = requirement.min_ratio_aa if level == "AA" else requirement.min_ratio_aaa
    return (
        f"Insufficient contrast {evaluation.result.ratio:.2f}:1. "
        f"{_KIND_LABELS[requirement.kind]} requires at least {required}:1 for WCAG {level}."
    )
