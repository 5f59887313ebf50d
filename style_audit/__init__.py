"""Style audit: typography, WCAG contrast and layout checks over rendered style trees."""

from .engine import (
    AuditResult,
    Issue,
    IssueSeverity,
    StyleAuditEngine,
    StyleNode,
    StyleTree,
    run_audit,
)

__version__ = "0.1.0"

__all__ = [
    "AuditResult",
    "Issue",
    "IssueSeverity",
    "StyleAuditEngine",
    "StyleNode",
    "StyleTree",
    "run_audit",
]
