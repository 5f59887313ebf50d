"""WCAG contrast rules."""

from collections.abc import Iterator
from typing import TYPE_CHECKING

import structlog

from ..engine.errors import ParseError
from ..engine.issues import RuleViolation, describe_contrast_failure
from ..engine.models import RuleType

if TYPE_CHECKING:
    from ..engine.session import AuditSession

logger = structlog.get_logger(__name__)


class ContrastRules:
    """Flag text whose contrast against its effective background is too low.

    Failing AA yields ``contrast-aa``; passing AA but failing AAA yields
    ``contrast-aaa`` when AAA checking is enabled. Elements whose colors
    cannot be parsed are skipped.
    """

    name = "contrast"

    def __init__(self):
        self.log = logger.bind(component="contrast_rules")

    def evaluate(self, session: "AuditSession") -> Iterator[RuleViolation]:
        check_aaa = session.settings.check_aaa
        skipped = 0

        for node in session.elements:
            try:
                evaluation = session.evaluator.evaluate_node(node)
            except ParseError as e:
                skipped += 1
                self.log.debug("contrast_element_skipped", tag=node.tag_name, value=e.value, reason=e.reason)
                continue
            if evaluation is None:
                continue

            result = evaluation.result
            if not result.pass_aa:
                yield RuleViolation(
                    rule_type=RuleType.CONTRAST_AA,
                    elements=[node],
                    description=describe_contrast_failure(evaluation, "AA"),
                    contrast=evaluation,
                )
            elif check_aaa and not result.pass_aaa:
                yield RuleViolation(
                    rule_type=RuleType.CONTRAST_AAA,
                    elements=[node],
                    description=describe_contrast_failure(evaluation, "AAA"),
                    contrast=evaluation,
                )

        if skipped:
            self.log.debug("contrast_parse_failures", skipped=skipped)
