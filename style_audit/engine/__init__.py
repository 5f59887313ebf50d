"""Style audit and contrast evaluation engine.

This module provides:
- Color parsing, WCAG luminance and contrast math
- Effective background resolution through ancestor compositing
- Style fingerprinting of a rendered style tree
- Iterative color adjustment for contrast fixes
- Issue synthesis and the per-run audit session
"""

from .background import BackgroundResolver
from .color import (
    WHITE,
    Color,
    ColorParser,
    blend,
    contrast_ratio,
    parse_color,
    relative_luminance,
    to_hex,
)
from .contrast import ContrastEvaluation, ContrastEvaluator, classify, evaluate
from .errors import ElementNotFound, ParseError, SnapshotError, StyleAuditError
from .fingerprint import (
    FingerprintBucket,
    StyleFingerprintCollector,
    layout_fingerprint,
    participates,
    typography_fingerprint,
)
from .issues import RULE_CATALOG, DescriptorBuilder, IssueSynthesizer, RuleMeta, RuleViolation
from .models import (
    ContrastKind,
    ContrastRequirement,
    ContrastResult,
    ElementDescriptor,
    Issue,
    IssueCategory,
    IssueSeverity,
    RuleType,
    StyleNode,
    StyleTree,
)
from .session import AuditResult, AuditSession, StyleAuditEngine, run_audit
from .solver import AdjustDirection, AdjustmentResult, ColorAdjustmentSolver, adjust_color

__all__ = [
    # Models
    "StyleNode",
    "StyleTree",
    "ElementDescriptor",
    "Issue",
    "IssueSeverity",
    "IssueCategory",
    "RuleType",
    "ContrastKind",
    "ContrastRequirement",
    "ContrastResult",
    # Errors
    "StyleAuditError",
    "ParseError",
    "ElementNotFound",
    "SnapshotError",
    # Color model
    "Color",
    "ColorParser",
    "WHITE",
    "parse_color",
    "relative_luminance",
    "contrast_ratio",
    "blend",
    "to_hex",
    # Background and contrast
    "BackgroundResolver",
    "ContrastEvaluator",
    "ContrastEvaluation",
    "classify",
    "evaluate",
    # Fingerprints
    "FingerprintBucket",
    "StyleFingerprintCollector",
    "participates",
    "typography_fingerprint",
    "layout_fingerprint",
    # Solver
    "AdjustDirection",
    "AdjustmentResult",
    "ColorAdjustmentSolver",
    "adjust_color",
    # Issues and session
    "RULE_CATALOG",
    "RuleMeta",
    "RuleViolation",
    "DescriptorBuilder",
    "IssueSynthesizer",
    "AuditSession",
    "AuditResult",
    "StyleAuditEngine",
    "run_audit",
]
