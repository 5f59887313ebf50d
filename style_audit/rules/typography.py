"""Typography rules, evaluated once per typography fingerprint bucket."""

import math
from collections.abc import Iterator
from typing import TYPE_CHECKING

from ..config import AuditSettings
from ..engine.contrast import parse_font_size, parse_font_weight, parse_line_height
from ..engine.fingerprint import FingerprintBucket
from ..engine.issues import RuleViolation
from ..engine.models import RuleType

if TYPE_CHECKING:
    from ..engine.session import AuditSession

# Icon fonts legitimately produce one-off style combinations
ICON_FONT_MARKERS = ("material symbols", "material icons", "fontawesome", "font awesome")

SUGGESTED_LINE_HEIGHT_MIN = 1.4
SUGGESTED_LINE_HEIGHT_MAX = 1.5
NON_STANDARD_SIZE_FLOOR_PX = 10.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _format_px(value: float) -> str:
    return f"{value:g}px"


def font_families(font_family: str) -> list[str]:
    """Split a font-family stack into lowercased, unquoted names."""
    return [
        name.strip().strip("\"'").lower()
        for name in font_family.split(",")
        if name.strip()
    ]


def is_icon_font(font_family: str) -> bool:
    family = font_family.lower()
    return any(marker in family for marker in ICON_FONT_MARKERS)


def nearest_standard_size(font_size_px: float, common_sizes: list[str]) -> str:
    """Closest size of the typographic scale; the smaller one wins ties."""
    sizes = [parse_font_size(size) for size in common_sizes]
    return _format_px(min(sizes, key=lambda size: abs(size - font_size_px)))


class TypographyRules:
    """Legibility and consistency checks over typography buckets.

    Every element of a bucket shares the same family, size, weight and line
    height, so each rule fires at most once per bucket and the resulting
    issue lists all of the bucket's elements.
    """

    name = "typography"

    def evaluate(self, session: "AuditSession") -> Iterator[RuleViolation]:
        for bucket in session.fingerprints.values():
            yield from self.check_bucket(bucket, session.settings)

    def check_bucket(self, bucket: FingerprintBucket, settings: AuditSettings) -> Iterator[RuleViolation]:
        metrics = bucket.metrics
        font_family = metrics.get("font-family", "")
        font_size = metrics.get("font-size", "")
        font_weight = metrics.get("font-weight", "")
        line_height = metrics.get("line-height", "")
        elements = list(bucket.elements)

        size_px = parse_font_size(font_size) if font_size else None

        if size_px is not None and size_px <= 0:
            yield RuleViolation(
                rule_type=RuleType.ZERO_FONT_SIZE,
                elements=elements,
                description="Font size is 0. Text is invisible but still read by assistive technology.",
                current_values={"font-size": font_size},
                suggested_fix={"font-size": _format_px(settings.min_font_size_px)},
            )
        elif size_px is not None:
            yield from self._check_line_height(elements, size_px, font_size, line_height, settings)
            yield from self._check_size(elements, size_px, font_size, settings)

        if font_weight in settings.suspicious_font_weights:
            suggested_weight = "400" if parse_font_weight(font_weight) < 400 else "700"
            yield RuleViolation(
                rule_type=RuleType.EXTREME_FONT_WEIGHT,
                elements=elements,
                description=f"Extreme font-weight ({font_weight}) may hurt legibility and font compatibility.",
                current_values={"font-weight": font_weight},
                suggested_fix={"font-weight": suggested_weight},
            )

        if bucket.count <= settings.redundancy_threshold and not is_icon_font(font_family):
            yield RuleViolation(
                rule_type=RuleType.REDUNDANT_STYLE,
                elements=elements,
                description="Unique style combination. Consider reusing an existing text style for consistency.",
                current_values={
                    "font-family": font_family,
                    "font-size": font_size,
                    "font-weight": font_weight,
                    "line-height": line_height,
                },
                suggested_fix={"note": "merge with an existing text style"},
            )

        families = font_families(font_family)
        if "serif" in families and "sans-serif" in families:
            yield RuleViolation(
                rule_type=RuleType.MIXED_FONT_FAMILIES,
                elements=elements,
                description="Both serif and sans-serif in one font-family stack may render unpredictably.",
                current_values={"font-family": font_family},
                suggested_fix={"font-family": "choose either serif or sans-serif"},
            )

    def _check_line_height(
        self,
        elements: list,
        size_px: float,
        font_size: str,
        line_height: str,
        settings: AuditSettings,
    ) -> Iterator[RuleViolation]:
        if not line_height or line_height.strip().lower() == "normal":
            return
        line_height_px = parse_line_height(line_height, size_px)
        if line_height_px is None:
            return

        ratio = line_height_px / size_px
        if ratio < settings.min_line_height_ratio:
            yield RuleViolation(
                rule_type=RuleType.LINE_HEIGHT_TOO_SMALL,
                elements=elements,
                description=(
                    f"Line-height too small ({ratio:.2f} < {settings.min_line_height_ratio}). "
                    "1.4-1.6 is recommended for readability."
                ),
                current_values={"font-size": font_size, "line-height": line_height, "ratio": round(ratio, 2)},
                suggested_fix={"line-height": f"{_round_half_up(size_px * SUGGESTED_LINE_HEIGHT_MIN)}px"},
            )
        elif ratio > settings.max_line_height_ratio:
            yield RuleViolation(
                rule_type=RuleType.LINE_HEIGHT_TOO_LARGE,
                elements=elements,
                description=(
                    f"Line-height excessive ({ratio:.2f} > {settings.max_line_height_ratio}). "
                    "Loose lines make text harder to follow."
                ),
                current_values={"font-size": font_size, "line-height": line_height, "ratio": round(ratio, 2)},
                suggested_fix={"line-height": f"{_round_half_up(size_px * SUGGESTED_LINE_HEIGHT_MAX)}px"},
            )

    def _check_size(
        self,
        elements: list,
        size_px: float,
        font_size: str,
        settings: AuditSettings,
    ) -> Iterator[RuleViolation]:
        if size_px < settings.min_font_size_px:
            yield RuleViolation(
                rule_type=RuleType.FONT_TOO_SMALL,
                elements=elements,
                description=f"Font size {font_size} is below the readable minimum of {_format_px(settings.min_font_size_px)}.",
                current_values={"font-size": font_size},
                suggested_fix={"font-size": _format_px(settings.min_font_size_px)},
            )

        standard = [parse_font_size(size) for size in settings.common_font_sizes]
        if size_px > NON_STANDARD_SIZE_FLOOR_PX and not any(math.isclose(size_px, s) for s in standard):
            yield RuleViolation(
                rule_type=RuleType.NON_STANDARD_SIZE,
                elements=elements,
                description=f"Font size {font_size} is not on the typographic scale.",
                current_values={"font-size": font_size},
                suggested_fix={"font-size": nearest_standard_size(size_px, settings.common_font_sizes)},
            )
