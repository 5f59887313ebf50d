"""Tests for engine/models.py."""

import json

import pytest

from style_audit.engine.errors import ElementNotFound, SnapshotError
from style_audit.engine.models import (
    ElementDescriptor,
    Issue,
    IssueCategory,
    IssueSeverity,
    RuleType,
    StyleNode,
    StyleTree,
)


class TestIssueSeverity:
    def test_ordering(self):
        assert IssueSeverity.CRITICAL > IssueSeverity.WARNING > IssueSeverity.INFO
        assert max([IssueSeverity.INFO, IssueSeverity.CRITICAL]) is IssueSeverity.CRITICAL
        assert IssueSeverity.WARNING <= IssueSeverity.WARNING


class TestStyleNode:
    """Tests for StyleNode."""

    def test_children_get_parent(self, make_node):
        child = make_node("span")
        parent = make_node("div", children=[child])
        assert child.parent is parent
        assert parent.append(make_node("em")).parent is parent

    def test_tag_is_lowercased(self):
        assert StyleNode(tag_name="DIV").tag_name == "div"

    def test_nodes_hash_by_identity(self, make_node):
        first, second = make_node("p"), make_node("p")
        assert first != second
        assert len({first, second}) == 2

    @pytest.mark.parametrize(
        "tag,attributes,expected",
        [
            ("button", {}, "button"),
            ("input", {"type": "submit"}, "button"),
            ("input", {"type": "text"}, None),
            ("a", {"href": "/"}, "link"),
            ("a", {}, None),
            ("div", {"role": "Tab"}, "tab"),
            ("button", {"role": "menuitem"}, "menuitem"),
        ],
    )
    def test_role(self, make_node, tag, attributes, expected):
        assert make_node(tag, **attributes).role == expected

    def test_is_button_like(self, make_node):
        assert make_node("div", role="tab").is_button_like
        assert not make_node("a", href="/").is_button_like

    def test_rendered_text_prefers_own_text(self):
        node = StyleNode(tag_name="p", text_content="Hello world", own_text="  Hello ")
        assert node.rendered_text == "Hello"
        assert StyleNode(tag_name="p", text_content=" Fallback ").rendered_text == "Fallback"
        assert StyleNode(tag_name="p").rendered_text == ""

    def test_depth_counts_below_body(self, sample_tree):
        body = sample_tree.root.children[0]
        main = body.children[0]
        span = main.children[4].children[0]

        assert body.depth == 0
        assert main.depth == 0
        assert span.depth == 2

    def test_paths(self, sample_tree):
        main = sample_tree.root.children[0].children[0]
        plain = main.children[2]
        span = main.children[4].children[0]

        assert plain.dom_path() == "html > body > main > p:nth-of-type(2)"
        assert plain.tag_path() == "main > p"
        assert span.tag_path() == "main > div.card > span"
        assert main.children[3].dom_path() == "button#submit"
        assert plain.index_in_parent() == 3

    def test_round_trip(self, sample_tree):
        root = sample_tree.root
        assert StyleNode.from_dict(root.to_dict()).to_dict() == root.to_dict()

    @pytest.mark.parametrize(
        "data",
        [
            None,
            [],
            {},
            {"tag_name": ""},
            {"children": []},
            {"tag_name": "html", "bounds": {"width": "wide"}},
            {"tag_name": "html", "bounds": {"width": [1]}},
            {"tag_name": "html", "bounds": [0, 0]},
            {"tag_name": "html", "computed_styles": ["color"]},
            {"tag_name": "html", "attributes": "lang=en"},
            {"tag_name": "html", "children": {"tag_name": "body"}},
            {"tag_name": "html", "children": [{"tag_name": "body", "bounds": {"x": "left"}}]},
        ],
    )
    def test_from_dict_malformed(self, data):
        with pytest.raises(SnapshotError):
            StyleNode.from_dict(data)

    def test_from_dict_defaults(self):
        node = StyleNode.from_dict({"tag_name": "P", "bounds": {"width": "10"}})
        assert node.tag_name == "p"
        assert node.bounds == {"width": 10.0}
        assert node.has_layout_box
        assert node.children == []


class TestStyleTree:
    """Tests for StyleTree."""

    def test_walk_is_document_order(self, sample_tree):
        tags = [node.tag_name for node in sample_tree.walk()]
        assert tags == ["html", "body", "main", "h1", "p", "p", "button", "div", "span"]
        assert len(sample_tree) == 9

    def test_from_dict_envelope_and_bare_root(self, sample_tree):
        envelope = StyleTree.from_dict(sample_tree.to_dict())
        bare = StyleTree.from_dict(sample_tree.root.to_dict())

        assert envelope.url == "https://example.com"
        assert bare.url == ""
        assert len(envelope) == len(bare) == 9

    def test_from_dict_rejects_non_object(self):
        with pytest.raises(SnapshotError):
            StyleTree.from_dict(["html"])

    def test_json(self, sample_tree):
        restored = StyleTree.from_json(sample_tree.to_json())
        assert restored.to_dict() == sample_tree.to_dict()
        assert json.loads(sample_tree.to_json())["root"]["tag_name"] == "html"

    def test_from_json_invalid(self):
        with pytest.raises(SnapshotError):
            StyleTree.from_json("{not json")

    def test_locate(self, sample_tree):
        main = sample_tree.root.children[0].children[0]
        target = main.children[1]
        descriptor = ElementDescriptor(
            selector="p.muted",
            tag_path=target.tag_path(),
            text_preview="Muted",
            dom_path=target.dom_path(),
            tag_name="p",
        )
        assert sample_tree.locate(descriptor) is target

    def test_locate_missing(self, sample_tree):
        descriptor = ElementDescriptor(
            selector="#gone",
            tag_path="div#gone",
            text_preview="(empty)",
            dom_path="div#gone",
            tag_name="div",
        )
        with pytest.raises(ElementNotFound) as exc_info:
            sample_tree.locate(descriptor)
        assert exc_info.value.dom_path == "div#gone"
        assert isinstance(exc_info.value, LookupError)


class TestIssue:
    def test_to_dict(self):
        descriptor = ElementDescriptor(
            selector="h1.title",
            tag_path="main > h1.title",
            text_preview="Welcome",
            dom_path="html > body > main > h1.title",
            tag_name="h1",
            class_name="title",
        )
        issue = Issue(
            severity=IssueSeverity.WARNING,
            category=IssueCategory.VISUAL,
            rule_type=RuleType.EXTREME_FONT_WEIGHT,
            description="Extreme weight",
            affected_elements=(descriptor,),
            current_values={"font-weight": "900"},
            suggested_fix={"font-weight": "700"},
            automatable=True,
        )

        data = issue.to_dict()

        assert data["severity"] == "warning"
        assert data["rule_type"] == "extreme-font-weight"
        assert data["element_count"] == 1
        assert data["affected_elements"][0]["selector"] == "h1.title"
        assert issue.is_blocking(IssueSeverity.WARNING)
        assert not issue.is_blocking()
