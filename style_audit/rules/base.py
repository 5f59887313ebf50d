"""Rule pack protocol."""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..engine.issues import RuleViolation

if TYPE_CHECKING:
    from ..engine.session import AuditSession


@runtime_checkable
class RulePack(Protocol):
    """A named group of rules evaluated against one audit session.

    Rule packs only read the session; they report ``RuleViolation`` records
    and leave severity, categories and fixes to the issue synthesizer.
    """

    name: str

    def evaluate(self, session: "AuditSession") -> Iterable[RuleViolation]:
        ...
