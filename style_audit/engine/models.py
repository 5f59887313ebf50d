"""Style audit data models.

This module contains the dataclasses and enums shared by the engine and
the rule packs: the style tree snapshot the audit reads, the contrast
requirement/result values, and the issue records it produces.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from .errors import ElementNotFound, SnapshotError


class IssueSeverity(Enum):
    """Severity levels for audit issues."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return {"critical": 3, "warning": 2, "info": 1}[self.value]

    def __lt__(self, other: "IssueSeverity") -> bool:
        if isinstance(other, IssueSeverity):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other: "IssueSeverity") -> bool:
        if isinstance(other, IssueSeverity):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other: "IssueSeverity") -> bool:
        if isinstance(other, IssueSeverity):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other: "IssueSeverity") -> bool:
        if isinstance(other, IssueSeverity):
            return self.rank >= other.rank
        return NotImplemented


class IssueCategory(Enum):
    """Accessibility impact area of an issue."""

    VISUAL = "visual"
    KEYBOARD = "keyboard"
    SEMANTIC = "semantic"
    MOTOR = "motor"
    COGNITIVE = "cognitive"
    STRUCTURE = "structure"
    LAYOUT = "layout"
    OTHER = "other"


class RuleType(Enum):
    """Every rule the engine can report."""

    # Contrast
    CONTRAST_AA = "contrast-aa"
    CONTRAST_AAA = "contrast-aaa"

    # Typography
    LINE_HEIGHT_TOO_SMALL = "line-height-too-small"
    LINE_HEIGHT_TOO_LARGE = "line-height-too-large"
    EXTREME_FONT_WEIGHT = "extreme-font-weight"
    REDUNDANT_STYLE = "redundant-style"
    MIXED_FONT_FAMILIES = "mixed-font-families"
    NON_STANDARD_SIZE = "non-standard-size"
    FONT_TOO_SMALL = "font-too-small"
    ZERO_FONT_SIZE = "zero-font-size"

    # Layout
    DEEP_NESTING = "deep-nesting"
    FIXED_WITHOUT_Z_INDEX = "fixed-without-z-index"
    SEMANTIC_OVERFLOW_HIDDEN = "semantic-overflow-hidden"
    MISSING_FLEX_GAP = "missing-flex-gap"
    HIGH_FLEX_SHRINK = "high-flex-shrink"
    EXTREME_FLEX_GROW = "extreme-flex-grow"
    EXTREME_FLEX_ORDER = "extreme-flex-order"

    # Interaction
    TOUCH_TARGET_SIZE = "touch-target-size"
    FOCUS_OUTLINE_MISSING = "focus-outline-missing"


class ContrastKind(Enum):
    """WCAG contrast classes."""

    NORMAL_TEXT = "normal-text"
    LARGE_TEXT = "large-text"
    NON_TEXT = "non-text"


@dataclass(frozen=True)
class ContrastRequirement:
    """Minimum contrast ratios an element must meet."""

    kind: ContrastKind
    min_ratio_aa: float
    min_ratio_aaa: float


@dataclass(frozen=True)
class ContrastResult:
    """Outcome of evaluating a color pair against a requirement."""

    ratio: float
    requirement: ContrastRequirement
    pass_aa: bool
    pass_aaa: bool

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "ratio": round(self.ratio, 2),
            "kind": self.requirement.kind.value,
            "min_ratio_aa": self.requirement.min_ratio_aa,
            "min_ratio_aaa": self.requirement.min_ratio_aaa,
            "pass_aa": self.pass_aa,
            "pass_aaa": self.pass_aaa,
        }


# Roles that take the non-text contrast requirement
BUTTON_LIKE_ROLES = frozenset({"button", "tab", "menuitem"})

_IMPLICIT_BUTTON_INPUT_TYPES = frozenset({"button", "submit", "reset", "image"})


@dataclass(eq=False)
class StyleNode:
    """One element of a rendered style tree.

    Nodes compare and hash by identity so they can key per-run memo tables.
    """

    tag_name: str
    computed_styles: dict[str, str] = field(default_factory=dict)
    attributes: dict[str, str] = field(default_factory=dict)
    bounds: dict[str, float] = field(default_factory=dict)  # x, y, width, height
    text_content: str | None = None
    own_text: str | None = None
    has_layout_box: bool = True
    children: list["StyleNode"] = field(default_factory=list)
    parent: "StyleNode | None" = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.tag_name = self.tag_name.lower()
        for child in self.children:
            child.parent = self

    def append(self, child: "StyleNode") -> "StyleNode":
        """Attach a child node and return it."""
        child.parent = self
        self.children.append(child)
        return child

    def style(self, name: str, default: str = "") -> str:
        """Read a computed style value."""
        return self.computed_styles.get(name, default)

    @property
    def element_id(self) -> str | None:
        return self.attributes.get("id") or None

    @property
    def class_name(self) -> str:
        return self.attributes.get("class", "").strip()

    @property
    def classes(self) -> list[str]:
        return self.class_name.split()

    @property
    def role(self) -> str | None:
        """Explicit ARIA role, falling back to the implicit role of controls."""
        explicit = self.attributes.get("role", "").strip().lower()
        if explicit:
            return explicit
        if self.tag_name == "button":
            return "button"
        if self.tag_name == "input" and self.attributes.get("type", "").lower() in _IMPLICIT_BUTTON_INPUT_TYPES:
            return "button"
        if self.tag_name == "a" and "href" in self.attributes:
            return "link"
        return None

    @property
    def is_button_like(self) -> bool:
        return self.role in BUTTON_LIKE_ROLES

    @property
    def rendered_text(self) -> str:
        """Text drawn by this element itself, stripped."""
        text = self.own_text if self.own_text is not None else self.text_content
        return (text or "").strip()

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def depth(self) -> int:
        """Number of ancestors between this node and ``body``."""
        level = 0
        current = self.parent
        while current is not None and current.tag_name not in ("body", "html"):
            level += 1
            current = current.parent
        return level

    def ancestors(self) -> Iterator["StyleNode"]:
        """Yield ancestors from the parent up to the root."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def index_in_parent(self) -> int:
        """1-based position among the parent's element children."""
        if self.parent is None:
            return 1
        for position, sibling in enumerate(self.parent.children, start=1):
            if sibling is self:
                return position
        return 1

    def dom_path(self) -> str:
        """Full CSS path from the root (or nearest id) to this node."""
        parts = []
        current: StyleNode | None = self
        while current is not None:
            segment = current.tag_name
            if current.element_id:
                parts.insert(0, f"{segment}#{current.element_id}")
                break
            if current.classes:
                segment += "." + ".".join(current.classes)
            if current.parent is not None:
                same_tag = [s for s in current.parent.children if s.tag_name == current.tag_name]
                if len(same_tag) > 1:
                    nth = next(i for i, s in enumerate(same_tag, start=1) if s is current)
                    segment += f":nth-of-type({nth})"
            parts.insert(0, segment)
            current = current.parent
        return " > ".join(parts)

    def tag_path(self) -> str:
        """Short readable path below ``body``, first class only."""
        parts = []
        current: StyleNode | None = self
        while current is not None and current.tag_name not in ("body", "html"):
            segment = current.tag_name
            if current.element_id:
                parts.insert(0, f"{segment}#{current.element_id}")
                break
            if current.classes:
                segment += "." + current.classes[0]
            parts.insert(0, segment)
            current = current.parent
        return " > ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the nested snapshot representation."""
        return {
            "tag_name": self.tag_name,
            "computed_styles": dict(self.computed_styles),
            "attributes": dict(self.attributes),
            "bounds": dict(self.bounds),
            "text_content": self.text_content,
            "own_text": self.own_text,
            "has_layout_box": self.has_layout_box,
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StyleNode":
        """Create a node (and its subtree) from the snapshot representation.

        Raises:
            SnapshotError: A node is missing its tag name or has a field of the
                wrong shape (non-object styles, non-numeric bounds, ...)
        """
        if not isinstance(data, dict) or not data.get("tag_name"):
            raise SnapshotError(f"Malformed style node: {str(data)[:80]!r}")
        tag_name = str(data["tag_name"])

        children = data.get("children") or []
        if not isinstance(children, list):
            raise SnapshotError(f"Malformed style node <{tag_name}>: children must be a list")

        try:
            bounds = {str(k): float(v) for k, v in _snapshot_mapping(data, "bounds", tag_name).items()}
        except (TypeError, ValueError) as e:
            raise SnapshotError(f"Malformed style node <{tag_name}>: non-numeric bounds ({e})") from e

        return cls(
            tag_name=tag_name,
            computed_styles={
                str(k): str(v) for k, v in _snapshot_mapping(data, "computed_styles", tag_name).items()
            },
            attributes={str(k): str(v) for k, v in _snapshot_mapping(data, "attributes", tag_name).items()},
            bounds=bounds,
            text_content=data.get("text_content"),
            own_text=data.get("own_text"),
            has_layout_box=bool(data.get("has_layout_box", True)),
            children=[cls.from_dict(child) for child in children],
        )


def _snapshot_mapping(data: dict[str, Any], key: str, tag_name: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise SnapshotError(f"Malformed style node <{tag_name}>: {key} must be an object")
    return value


@dataclass
class StyleTree:
    """A snapshot of a rendered document's computed style tree."""

    root: StyleNode
    url: str = ""
    captured_at: str = ""

    def walk(self) -> Iterator[StyleNode]:
        """Depth-first traversal in document order."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def __len__(self) -> int:
        return sum(1 for _ in self.walk())

    def locate(self, descriptor: "ElementDescriptor") -> StyleNode:
        """Re-select the live node a descriptor was built from.

        Raises:
            ElementNotFound: The tree no longer contains a matching node.
        """
        for node in self.walk():
            if node.dom_path() == descriptor.dom_path:
                return node
        raise ElementNotFound(descriptor.dom_path)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the snapshot envelope representation."""
        return {
            "url": self.url,
            "captured_at": self.captured_at,
            "root": self.root.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StyleTree":
        """Create a tree from an envelope or from a bare root node."""
        if not isinstance(data, dict):
            raise SnapshotError("Snapshot must be a JSON object")
        if "root" in data:
            return cls(
                root=StyleNode.from_dict(data["root"]),
                url=str(data.get("url") or ""),
                captured_at=str(data.get("captured_at") or ""),
            )
        return cls(root=StyleNode.from_dict(data))

    def to_json(self) -> str:
        """Serialize the snapshot to a JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> "StyleTree":
        """Deserialize a snapshot from a JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Snapshot is not valid JSON: {e}") from e
        return cls.from_dict(data)


@dataclass(frozen=True)
class ElementDescriptor:
    """Durable, read-only projection of an element.

    Issues hold descriptors rather than nodes so they remain meaningful after
    the document changes; use ``StyleTree.locate`` to get back to a node.
    """

    selector: str
    tag_path: str
    text_preview: str
    dom_path: str
    tag_name: str
    class_name: str | None = None
    element_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "selector": self.selector,
            "tag_path": self.tag_path,
            "text_preview": self.text_preview,
            "dom_path": self.dom_path,
            "tag_name": self.tag_name,
            "class_name": self.class_name,
            "element_id": self.element_id,
        }


@dataclass(frozen=True)
class Issue:
    """One fixable rule violation found by an audit pass."""

    severity: IssueSeverity
    category: IssueCategory
    rule_type: RuleType
    description: str
    affected_elements: tuple[ElementDescriptor, ...]
    current_values: dict[str, Any]
    suggested_fix: dict[str, Any]
    automatable: bool
    wcag_level: str | None = None
    wcag_criteria: str | None = None
    impact: str | None = None

    @property
    def element_count(self) -> int:
        return len(self.affected_elements)

    def is_blocking(self, threshold: IssueSeverity = IssueSeverity.CRITICAL) -> bool:
        """Check if this issue meets a severity threshold."""
        return self.severity >= threshold

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "severity": self.severity.value,
            "category": self.category.value,
            "rule_type": self.rule_type.value,
            "description": self.description,
            "affected_elements": [d.to_dict() for d in self.affected_elements],
            "element_count": self.element_count,
            "current_values": dict(self.current_values),
            "suggested_fix": dict(self.suggested_fix),
            "automatable": self.automatable,
            "wcag_level": self.wcag_level,
            "wcag_criteria": self.wcag_criteria,
            "impact": self.impact,
        }
