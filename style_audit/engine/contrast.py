"""WCAG 2.1 contrast classification and evaluation.

Classification depends on font size (converted to points), font weight and
the element's role. The ratio tables are fixed WCAG constants.
"""

from dataclasses import dataclass

import structlog

from .background import BackgroundResolver
from .color import Color, ColorParser, blend, contrast_ratio
from .models import (
    BUTTON_LIKE_ROLES,
    ContrastKind,
    ContrastRequirement,
    ContrastResult,
    StyleNode,
)

logger = structlog.get_logger(__name__)

# WCAG 2.1 contrast ratio requirements
WCAG_AA_NORMAL_TEXT = 4.5  # Normal text (< 18pt or < 14pt bold)
WCAG_AA_LARGE_TEXT = 3.0  # Large text (>= 18pt or >= 14pt bold)
WCAG_AAA_NORMAL_TEXT = 7.0  # Enhanced contrast for normal text
WCAG_AAA_LARGE_TEXT = 4.5  # Enhanced contrast for large text
WCAG_AA_NON_TEXT = 3.0  # UI components (1.4.11)
WCAG_AAA_NON_TEXT = 4.5

LARGE_TEXT_PT = 18.0
LARGE_BOLD_TEXT_PT = 14.0
BOLD_WEIGHT = 700

REQUIREMENTS: dict[ContrastKind, ContrastRequirement] = {
    ContrastKind.NORMAL_TEXT: ContrastRequirement(
        ContrastKind.NORMAL_TEXT, WCAG_AA_NORMAL_TEXT, WCAG_AAA_NORMAL_TEXT
    ),
    ContrastKind.LARGE_TEXT: ContrastRequirement(
        ContrastKind.LARGE_TEXT, WCAG_AA_LARGE_TEXT, WCAG_AAA_LARGE_TEXT
    ),
    ContrastKind.NON_TEXT: ContrastRequirement(
        ContrastKind.NON_TEXT, WCAG_AA_NON_TEXT, WCAG_AAA_NON_TEXT
    ),
}

# Elements that draw no text of their own
VOID_TAGS = frozenset({
    "area", "audio", "br", "canvas", "embed", "hr", "iframe", "img",
    "input", "meta", "object", "picture", "source", "svg", "track",
    "video", "wbr",
})

DEFAULT_FONT_SIZE_PX = 16.0

_FONT_WEIGHTS = {
    "thin": 100,
    "hairline": 100,
    "extra-light": 200,
    "ultra-light": 200,
    "light": 300,
    "lighter": 300,
    "normal": 400,
    "regular": 400,
    "medium": 500,
    "semi-bold": 600,
    "demi-bold": 600,
    "bold": 700,
    "bolder": 700,
    "extra-bold": 800,
    "ultra-bold": 800,
    "black": 900,
    "heavy": 900,
}


def parse_font_size(font_size: str, default: float = DEFAULT_FONT_SIZE_PX) -> float:
    """Parse CSS font-size value to pixels.

    Args:
        font_size: CSS font-size value (e.g., "16px", "1rem", "12pt")
        default: Value used when the size cannot be read

    Returns:
        Font size in pixels
    """
    if not font_size:
        return default

    font_size = font_size.strip().lower()

    # (suffix, multiplier) pairs; rem before em
    units = (
        ("px", 1.0),
        ("pt", 4 / 3),
        ("rem", DEFAULT_FONT_SIZE_PX),
        ("em", DEFAULT_FONT_SIZE_PX),
        ("%", DEFAULT_FONT_SIZE_PX / 100),
    )
    for suffix, multiplier in units:
        if font_size.endswith(suffix):
            try:
                return float(font_size[: -len(suffix)]) * multiplier
            except ValueError:
                return default

    try:
        return float(font_size)
    except ValueError:
        return default


def parse_font_weight(font_weight: str) -> int:
    """Parse CSS font-weight value to numeric weight.

    Args:
        font_weight: CSS font-weight value (e.g., "400", "bold", "normal")

    Returns:
        Numeric font weight (1-1000)
    """
    if not font_weight:
        return 400

    font_weight = font_weight.strip().lower()
    if font_weight in _FONT_WEIGHTS:
        return _FONT_WEIGHTS[font_weight]

    try:
        return int(float(font_weight))
    except ValueError:
        return 400


def parse_line_height(line_height: str, font_size: float) -> float | None:
    """Parse CSS line-height value to pixels.

    Args:
        line_height: CSS line-height value
        font_size: Font size in pixels for ratio calculations

    Returns:
        Line height in pixels, or None when it cannot be determined
    """
    if not line_height or line_height.strip().lower() == "normal":
        return font_size * 1.2  # Default "normal" line height

    line_height = line_height.strip().lower()

    if line_height.endswith("px"):
        try:
            return float(line_height[:-2])
        except ValueError:
            return None

    if line_height.endswith("%"):
        try:
            return float(line_height[:-1]) / 100 * font_size
        except ValueError:
            return None

    # Unitless (ratio)
    try:
        return float(line_height) * font_size
    except ValueError:
        return None


def px_to_pt(px: float) -> float:
    return px * 0.75


def classify(font_size_px: float, font_weight: int, role: str | None = None) -> ContrastRequirement:
    """Derive the contrast requirement for an element.

    Large text is 18pt or larger, or 14pt or larger when bold (weight >= 700).
    Button-like roles take the non-text requirement regardless of size.

    Args:
        font_size_px: Computed font size in pixels
        font_weight: Numeric font weight
        role: Explicit or implicit ARIA role

    Returns:
        The requirement for this element
    """
    if role and role.lower() in BUTTON_LIKE_ROLES:
        return REQUIREMENTS[ContrastKind.NON_TEXT]

    size_pt = px_to_pt(font_size_px)
    if size_pt >= LARGE_TEXT_PT or (size_pt >= LARGE_BOLD_TEXT_PT and font_weight >= BOLD_WEIGHT):
        return REQUIREMENTS[ContrastKind.LARGE_TEXT]
    return REQUIREMENTS[ContrastKind.NORMAL_TEXT]


def evaluate(
    text_color: Color,
    background_color: Color,
    requirement: ContrastRequirement,
) -> ContrastResult:
    """Check a color pair against a requirement."""
    ratio = contrast_ratio(text_color, background_color)
    return ContrastResult(
        ratio=ratio,
        requirement=requirement,
        pass_aa=ratio >= requirement.min_ratio_aa,
        pass_aaa=ratio >= requirement.min_ratio_aaa,
    )


@dataclass(frozen=True)
class ContrastEvaluation:
    """A node's contrast verdict together with the colors it was based on."""

    node: StyleNode
    text_color: Color
    background_color: Color
    font_size_px: float
    font_weight: int
    result: ContrastResult


class ContrastEvaluator:
    """Evaluate text elements of a style tree against WCAG ratios.

    Shares a color parser and background resolver with the rest of an audit
    session so that parse results and backdrops are computed once per run.
    """

    def __init__(
        self,
        parser: ColorParser | None = None,
        resolver: BackgroundResolver | None = None,
    ):
        self.parser = parser if parser is not None else ColorParser()
        self.resolver = resolver if resolver is not None else BackgroundResolver(self.parser)
        self.log = logger.bind(component="contrast_evaluator")

    def is_candidate(self, node: StyleNode) -> bool:
        """Check if a node draws text that a contrast claim can be made about."""
        if node.tag_name in VOID_TAGS:
            return False
        return bool(node.rendered_text)

    def evaluate_node(self, node: StyleNode) -> ContrastEvaluation | None:
        """Evaluate one node.

        Returns:
            The evaluation, or None when the node is skipped (void element,
            blank text, no computed text color, fully transparent text)

        Raises:
            ParseError: The text or background color could not be parsed
        """
        if not self.is_candidate(node):
            return None

        raw_color = node.style("color")
        if not raw_color:
            self.log.debug("missing_text_color_skipped", tag=node.tag_name)
            return None

        text_color = self.parser.parse(raw_color)
        if text_color.is_transparent:
            self.log.debug("transparent_text_skipped", tag=node.tag_name)
            return None

        background = self.resolver.effective_background(node)
        if not text_color.is_opaque:
            text_color = blend(text_color, background)

        font_size = parse_font_size(node.style("font-size"))
        font_weight = parse_font_weight(node.style("font-weight"))
        requirement = classify(font_size, font_weight, node.role)

        return ContrastEvaluation(
            node=node,
            text_color=text_color,
            background_color=background,
            font_size_px=font_size,
            font_weight=font_weight,
            result=evaluate(text_color, background, requirement),
        )
