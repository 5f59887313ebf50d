"""Iterative color adjustment for contrast fixes."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from .color import Color, contrast_ratio, to_hex

logger = structlog.get_logger(__name__)

DEFAULT_STEP = 10
DEFAULT_MAX_ITERATIONS = 25


class AdjustDirection(Enum):
    """Which way to move every channel."""

    DARKEN = "darken"
    LIGHTEN = "lighten"


@dataclass(frozen=True)
class AdjustmentResult:
    """Best color found by the solver.

    ``target_met`` is False when the iteration cap (or a channel bound) was
    reached first; the color is then advisory and must be re-checked.
    """

    color: Color
    ratio: float
    iterations: int
    target_met: bool

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "color": to_hex(self.color),
            "ratio": round(self.ratio, 2),
            "iterations": self.iterations,
            "target_met": self.target_met,
        }


class ColorAdjustmentSolver:
    """Fixed-step hill climb toward a target contrast ratio.

    Each iteration shifts all three channels by ``step`` (down to darken, up
    to lighten), clamped to [0, 255], then re-measures the ratio against the
    fixed counterpart. It stops as soon as the target is reached or after
    ``max_iterations`` steps, whichever comes first.

    Example:
        solver = ColorAdjustmentSolver()
        result = solver.solve(text, background, 4.5, AdjustDirection.DARKEN)
        if not result.target_met:
            ...  # suggestion is best-effort only
    """

    def __init__(self, step: int = DEFAULT_STEP, max_iterations: int = DEFAULT_MAX_ITERATIONS):
        if step <= 0:
            raise ValueError("step must be positive")
        if max_iterations < 0:
            raise ValueError("max_iterations must not be negative")
        self.step = step
        self.max_iterations = max_iterations
        self.log = logger.bind(component="color_solver")

    def solve(
        self,
        color: Color,
        against: Color,
        target_ratio: float,
        direction: AdjustDirection,
    ) -> AdjustmentResult:
        """Search for a shifted ``color`` meeting ``target_ratio`` against ``against``.

        Args:
            color: Color to move
            against: Fixed counterpart (text or background)
            target_ratio: Contrast ratio to reach
            direction: Darken or lighten

        Returns:
            The best color found and whether it meets the target
        """
        delta = -self.step if direction is AdjustDirection.DARKEN else self.step
        current = color
        ratio = contrast_ratio(current, against)
        iterations = 0

        while ratio < target_ratio and iterations < self.max_iterations:
            current = current.with_channels(
                current.r + delta,
                current.g + delta,
                current.b + delta,
            )
            ratio = contrast_ratio(current, against)
            iterations += 1

        target_met = ratio >= target_ratio
        if not target_met:
            self.log.debug(
                "solver_cap_reached",
                start=to_hex(color),
                against=to_hex(against),
                direction=direction.value,
                target_ratio=target_ratio,
                achieved_ratio=round(ratio, 2),
                iterations=iterations,
            )

        return AdjustmentResult(color=current, ratio=ratio, iterations=iterations, target_met=target_met)


def adjust_color(
    color: Color,
    against: Color,
    target_ratio: float,
    direction: AdjustDirection | str,
    step: int = DEFAULT_STEP,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Color:
    """Return only the adjusted color. The result may still miss the target."""
    solver = ColorAdjustmentSolver(step=step, max_iterations=max_iterations)
    return solver.solve(color, against, target_ratio, AdjustDirection(direction)).color
