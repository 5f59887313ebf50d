"""Audit session and engine entry point.

Every ``run_audit`` call builds a fresh ``AuditSession`` holding all per-run
state (color cache, background memo, fingerprint buckets). Nothing survives
between runs, so re-auditing an unchanged tree yields an equal issue list.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog

from ..config import AuditSettings, get_settings
from ..utils.logging import log_operation
from .background import BackgroundResolver
from .color import ColorParser
from .contrast import ContrastEvaluator
from .fingerprint import (
    Fingerprint,
    FingerprintBucket,
    layout_collector,
    participates,
    typography_collector,
)
from .issues import DescriptorBuilder, IssueSynthesizer
from .models import Issue, IssueSeverity, StyleNode, StyleTree
from .solver import ColorAdjustmentSolver

logger = structlog.get_logger(__name__)


@dataclass
class AuditSession:
    """Per-run state shared by the rule packs of one audit pass."""

    tree: StyleTree
    settings: AuditSettings
    parser: ColorParser
    resolver: BackgroundResolver
    evaluator: ContrastEvaluator
    elements: list[StyleNode] = field(default_factory=list)
    fingerprints: dict[Fingerprint, FingerprintBucket] = field(default_factory=dict)
    layout_fingerprints: dict[Fingerprint, FingerprintBucket] = field(default_factory=dict)

    @classmethod
    def start(cls, tree: StyleTree, settings: AuditSettings) -> "AuditSession":
        """Create a session and collect the fingerprints of ``tree``."""
        parser = ColorParser()
        resolver = BackgroundResolver(parser)
        return cls(
            tree=tree,
            settings=settings,
            parser=parser,
            resolver=resolver,
            evaluator=ContrastEvaluator(parser, resolver),
            elements=[node for node in tree.walk() if participates(node)],
            fingerprints=typography_collector().collect(tree),
            layout_fingerprints=layout_collector().collect(tree),
        )


@dataclass
class AuditResult:
    """Everything one audit pass produced."""

    fingerprints: dict[Fingerprint, FingerprintBucket]
    layout_fingerprints: dict[Fingerprint, FingerprintBucket]
    issues: list[Issue]
    url: str = ""
    elements_analyzed: int = 0
    failed_rule_packs: list[str] = field(default_factory=list)
    audited_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_critical_issues(self) -> bool:
        return any(issue.severity is IssueSeverity.CRITICAL for issue in self.issues)

    def by_severity(self) -> dict[IssueSeverity, list[Issue]]:
        """Group issues by severity, most severe first."""
        grouped: dict[IssueSeverity, list[Issue]] = {
            IssueSeverity.CRITICAL: [],
            IssueSeverity.WARNING: [],
            IssueSeverity.INFO: [],
        }
        for issue in self.issues:
            grouped[issue.severity].append(issue)
        return grouped

    @property
    def summary(self) -> dict[str, Any]:
        """Issue counts by severity and category."""
        severity_counts = {severity.value: len(issues) for severity, issues in self.by_severity().items()}
        category_counts: dict[str, int] = {}
        for issue in self.issues:
            category_counts[issue.category.value] = category_counts.get(issue.category.value, 0) + 1
        return {
            "total_issues": len(self.issues),
            "by_severity": severity_counts,
            "by_category": category_counts,
            "affected_elements": sum(issue.element_count for issue in self.issues),
            "automatable": sum(1 for issue in self.issues if issue.automatable),
            "unique_styles": len(self.fingerprints),
            "layout_patterns": len(self.layout_fingerprints),
            "elements_analyzed": self.elements_analyzed,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "url": self.url,
            "audited_at": self.audited_at.isoformat(),
            "summary": self.summary,
            "fingerprints": [bucket.to_dict() for bucket in self.fingerprints.values()],
            "layout_fingerprints": [bucket.to_dict() for bucket in self.layout_fingerprints.values()],
            "issues": [issue.to_dict() for issue in self.issues],
            "failed_rule_packs": list(self.failed_rule_packs),
        }


class StyleAuditEngine:
    """Run rule packs over a style tree and synthesize the issue list.

    Example:
        engine = StyleAuditEngine()
        result = engine.run_audit(StyleTree.from_json(snapshot))
        for issue in result.by_severity()[IssueSeverity.CRITICAL]:
            print(issue.description)
    """

    def __init__(
        self,
        settings: AuditSettings | None = None,
        rule_packs: Iterable[Any] | None = None,
    ):
        self.settings = settings or get_settings()
        if rule_packs is None:
            from ..rules import default_rule_packs

            rule_packs = default_rule_packs()
        self.rule_packs = list(rule_packs)
        self.log = logger.bind(component="style_audit_engine")

    def run_audit(self, tree: StyleTree) -> AuditResult:
        """Audit ``tree`` from scratch.

        A rule pack that raises is logged and skipped; the pass always
        completes with whatever the other packs found.
        """
        enabled = {str(getattr(name, "value", name)) for name in self.settings.enabled_rule_packs}

        with log_operation("run_audit", self.log, url=tree.url or None) as op:
            session = AuditSession.start(tree, self.settings)
            synthesizer = IssueSynthesizer(
                ColorAdjustmentSolver(self.settings.solver_step, self.settings.solver_max_iterations),
                DescriptorBuilder(tree),
            )

            issues: list[Issue] = []
            failed: list[str] = []
            for pack in self.rule_packs:
                if pack.name not in enabled:
                    continue
                try:
                    pack_issues = [synthesizer.synthesize(v) for v in pack.evaluate(session)]
                except Exception as e:
                    self.log.error("rule_pack_failed", pack=pack.name, error=str(e), exc_info=True)
                    failed.append(pack.name)
                    continue
                self.log.debug("rule_pack_completed", pack=pack.name, issues=len(pack_issues))
                issues.extend(pack_issues)

            result = AuditResult(
                fingerprints=session.fingerprints,
                layout_fingerprints=session.layout_fingerprints,
                issues=issues,
                url=tree.url,
                elements_analyzed=len(session.elements),
                failed_rule_packs=failed,
            )
            op["issues"] = len(issues)
            op["critical"] = len(result.by_severity()[IssueSeverity.CRITICAL])
            op["elements"] = len(session.elements)
            op["color_cache_size"] = len(session.parser)

        return result


def run_audit(tree: StyleTree, settings: AuditSettings | None = None) -> AuditResult:
    """Audit ``tree`` with the default rule packs."""
    return StyleAuditEngine(settings).run_audit(tree)

