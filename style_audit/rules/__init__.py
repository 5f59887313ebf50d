"""Rule packs evaluated by the style audit engine."""

from .base import RulePack
from .contrast import ContrastRules
from .interaction import InteractionRules
from .layout import LayoutRules
from .typography import TypographyRules


def default_rule_packs() -> list[RulePack]:
    """All rule packs, in the order their issues are reported."""
    return [ContrastRules(), TypographyRules(), LayoutRules(), InteractionRules()]


__all__ = [
    "RulePack",
    "ContrastRules",
    "TypographyRules",
    "LayoutRules",
    "InteractionRules",
    "default_rule_packs",
]
