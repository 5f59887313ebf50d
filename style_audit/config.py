"""Configuration management for the style audit engine."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RulePackName(str, Enum):
    """Rule packs that can contribute violations to an audit."""
    CONTRAST = "contrast"
    TYPOGRAPHY = "typography"
    LAYOUT = "layout"
    INTERACTION = "interaction"


class AuditSettings(BaseSettings):
    """Audit settings loaded from environment variables.

    WCAG contrast ratios are fixed constants and intentionally absent here.
    """

    model_config = SettingsConfigDict(
        env_prefix="STYLE_AUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Contrast
    check_aaa: bool = Field(True, description="Report elements that pass AA but fail AAA")

    # Typography
    min_line_height_ratio: float = Field(1.2, description="Minimum line-height / font-size ratio")
    max_line_height_ratio: float = Field(1.8, description="Maximum line-height / font-size ratio")
    suspicious_font_weights: list[str] = Field(
        default_factory=lambda: ["100", "200", "800", "900"],
        description="Font weights that hurt legibility"
    )
    common_font_sizes: list[str] = Field(
        default_factory=lambda: ["12px", "14px", "16px", "18px", "20px", "24px", "32px"],
        description="Typographic scale used to flag non-standard sizes"
    )
    redundancy_threshold: int = Field(1, description="Buckets this small are flagged as redundant styles")
    min_font_size_px: float = Field(12.0, description="Smallest readable font size")

    # Layout
    max_nesting_depth: int = Field(10, description="Maximum element depth below body")

    # Interaction
    min_touch_target_px: int = Field(44, description="Minimum touch target edge in pixels")

    # Color adjustment solver
    solver_step: int = Field(10, description="Per-channel step of the contrast fix search")
    solver_max_iterations: int = Field(25, description="Iteration cap of the contrast fix search")

    enabled_rule_packs: list[RulePackName] = Field(
        default_factory=lambda: list(RulePackName),
        description="Rule packs run by the engine"
    )

    # Logging
    log_level: str = Field("INFO", description="Log level")
    json_logs: bool = Field(False, description="Render logs as JSON")


def get_settings() -> AuditSettings:
    """Get audit settings."""
    return AuditSettings()
