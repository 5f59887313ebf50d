"""Focus visibility and touch target rules for interactive elements."""

from collections.abc import Iterator
from typing import TYPE_CHECKING

from ..engine.color import ColorParser
from ..engine.errors import ParseError
from ..engine.issues import RuleViolation
from ..engine.models import BUTTON_LIKE_ROLES, RuleType, StyleNode

if TYPE_CHECKING:
    from ..engine.session import AuditSession

FORM_CONTROL_TAGS = frozenset({"button", "input", "select", "textarea"})
BORDER_WIDTH_PROPERTIES = (
    "border-top-width",
    "border-right-width",
    "border-bottom-width",
    "border-left-width",
)
SUGGESTED_OUTLINE = "2px solid #005fcc"


def is_focusable(node: StyleNode) -> bool:
    """Check if a node can receive keyboard focus or acts as a control."""
    attributes = node.attributes
    if attributes.get("tabindex", "").strip() == "-1":
        return False
    if node.tag_name in ("a", "area") and "href" in attributes:
        return True
    if node.tag_name in FORM_CONTROL_TAGS:
        if "disabled" in attributes:
            return False
        return not (node.tag_name == "input" and attributes.get("type", "").lower() == "hidden")
    if "tabindex" in attributes or "contenteditable" in attributes:
        return True
    return node.role in BUTTON_LIKE_ROLES


def _has_width(value: str) -> bool:
    return any(part not in ("0", "0px") for part in value.split())


class InteractionRules:
    """Keyboard focus and motor accessibility checks."""

    name = "interaction"

    def evaluate(self, session: "AuditSession") -> Iterator[RuleViolation]:
        min_size = session.settings.min_touch_target_px

        for node in session.elements:
            if not is_focusable(node):
                continue

            if not self.has_visible_focus(node, session.parser):
                yield RuleViolation(
                    rule_type=RuleType.FOCUS_OUTLINE_MISSING,
                    elements=[node],
                    description="Focusable element removes its outline without another visible focus indicator.",
                    current_values={
                        "outline-style": node.style("outline-style") or "none",
                        "outline-width": node.style("outline-width") or "0px",
                    },
                    suggested_fix={"outline": SUGGESTED_OUTLINE},
                )

            width = node.bounds.get("width")
            height = node.bounds.get("height")
            if width is None or height is None:
                continue
            if width < min_size or height < min_size:
                yield RuleViolation(
                    rule_type=RuleType.TOUCH_TARGET_SIZE,
                    elements=[node],
                    description=(
                        f"Touch target {width:g}x{height:g}px is smaller than the "
                        f"{min_size}x{min_size}px minimum."
                    ),
                    current_values={"touch-size": f"{width:g}x{height:g}px"},
                    suggested_fix={"min-width": f"{min_size}px", "min-height": f"{min_size}px"},
                )

    def has_visible_focus(self, node: StyleNode, parser: ColorParser) -> bool:
        """An outline, or a box-shadow, border or background standing in for it."""
        outline_style = node.style("outline-style").strip().lower()
        outline_width = node.style("outline-width").strip().lower()
        if outline_style not in ("", "none") and outline_width not in ("0", "0px"):
            return True
        if not outline_style and not outline_width:
            # Nothing captured, browser default outline applies
            return True

        box_shadow = node.style("box-shadow").strip().lower()
        if box_shadow and box_shadow != "none":
            return True

        border_width = node.style("border-width")
        if border_width and _has_width(border_width):
            return True
        if any(_has_width(node.style(name)) for name in BORDER_WIDTH_PROPERTIES if node.style(name)):
            return True

        background = node.style("background-color")
        if not background:
            return False
        try:
            return not parser.parse(background).is_transparent
        except ParseError:
            return False
