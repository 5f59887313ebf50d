"""Exceptions raised by the style audit engine."""


class StyleAuditError(Exception):
    """Base class for all style audit errors."""


class ParseError(StyleAuditError, ValueError):
    """A CSS value (usually a color) could not be resolved."""

    def __init__(self, value: str, reason: str = "unrecognized color"):
        self.value = value
        self.reason = reason
        super().__init__(f"Cannot parse {value!r}: {reason}")


class ElementNotFound(StyleAuditError, LookupError):
    """A descriptor no longer matches any element of the style tree."""

    def __init__(self, dom_path: str):
        self.dom_path = dom_path
        super().__init__(f"No element matches {dom_path!r}")


class SnapshotError(StyleAuditError):
    """A style tree snapshot is malformed or could not be captured."""
