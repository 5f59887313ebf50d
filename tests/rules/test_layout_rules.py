"""Tests for rules/layout.py."""

import pytest

from style_audit.engine.models import RuleType
from style_audit.engine.session import AuditSession
from style_audit.rules.layout import LayoutRules


def _violations(tree, settings, rule_type):
    session = AuditSession.start(tree, settings)
    return [v for v in LayoutRules().evaluate(session) if v.rule_type is rule_type]


class TestNesting:
    def _chain(self, make_node, levels):
        node = make_node("div")
        innermost = node
        for _ in range(levels - 1):
            node = make_node("div", children=[node])
        return node, innermost

    def test_deep_nesting(self, make_node, make_document, settings):
        outer, innermost = self._chain(make_node, 12)
        tree = make_document(outer)

        [violation] = _violations(tree, settings, RuleType.DEEP_NESTING)

        assert violation.elements == [innermost]
        assert violation.current_values == {"nesting-level": 11}

    def test_shallow_tree(self, make_node, make_document, settings):
        outer, _ = self._chain(make_node, 11)
        assert _violations(make_document(outer), settings, RuleType.DEEP_NESTING) == []

    def test_depth_limit_from_settings(self, make_node, make_document, settings):
        outer, _ = self._chain(make_node, 4)
        shallow = settings.model_copy(update={"max_nesting_depth": 2})
        assert len(_violations(make_document(outer), shallow, RuleType.DEEP_NESTING)) == 1


class TestPositioning:
    def test_fixed_without_z_index(self, make_node, make_document, settings):
        header = make_node("header", {"position": "fixed", "z-index": "auto"})
        tree = make_document(header)

        [violation] = _violations(tree, settings, RuleType.FIXED_WITHOUT_Z_INDEX)

        assert violation.suggested_fix == {"z-index": "1000"}

    def test_fixed_with_z_index(self, make_node, make_document, settings):
        tree = make_document(make_node("header", {"position": "fixed", "z-index": "10"}))
        assert _violations(tree, settings, RuleType.FIXED_WITHOUT_Z_INDEX) == []

    def test_semantic_overflow_hidden(self, make_node, make_document, settings):
        tree = make_document(
            make_node("main", {"overflow": "hidden"}),
            make_node("section", {"overflow": "hidden"}, class_="carousel"),
            make_node("div", {"overflow": "hidden"}),
        )

        [violation] = _violations(tree, settings, RuleType.SEMANTIC_OVERFLOW_HIDDEN)

        assert violation.elements[0].tag_name == "main"
        assert violation.suggested_fix == {"overflow": "visible"}


class TestFlexbox:
    """Tests for flex container and flex item checks."""

    @pytest.mark.parametrize("gap", ["", "normal", "0px"])
    def test_missing_gap(self, make_node, make_document, settings, gap):
        row = make_node("div", {"display": "flex", "gap": gap}, children=[make_node("a"), make_node("a")])
        tree = make_document(row)

        [violation] = _violations(tree, settings, RuleType.MISSING_FLEX_GAP)

        assert violation.elements == [row]
        assert violation.suggested_fix == {"gap": "1rem"}

    def test_gap_present_or_single_child(self, make_node, make_document, settings):
        tree = make_document(
            make_node("div", {"display": "inline-flex", "gap": "8px"}, children=[make_node("a"), make_node("a")]),
            make_node("div", {"display": "flex"}, children=[make_node("a")]),
            make_node("div", {"display": "block"}, children=[make_node("a"), make_node("a")]),
        )
        assert _violations(tree, settings, RuleType.MISSING_FLEX_GAP) == []

    def test_flex_item_values(self, make_node, make_document, settings):
        shrinky = make_node("div", {"flex-shrink": "3"})
        greedy = make_node("div", {"flex-grow": "11"})
        reordered = make_node("div", {"order": "-20"})
        calm = make_node("div", {"flex-shrink": "1", "flex-grow": "2", "order": "3"})
        row = make_node("div", {"display": "flex", "gap": "4px"}, children=[shrinky, greedy, reordered, calm])
        tree = make_document(row)

        assert [v.elements for v in _violations(tree, settings, RuleType.HIGH_FLEX_SHRINK)] == [[shrinky]]
        assert [v.elements for v in _violations(tree, settings, RuleType.EXTREME_FLEX_GROW)] == [[greedy]]
        assert [v.elements for v in _violations(tree, settings, RuleType.EXTREME_FLEX_ORDER)] == [[reordered]]

    def test_item_rules_need_flex_parent(self, make_node, make_document, settings):
        tree = make_document(make_node("div", {"display": "grid"}, children=[make_node("div", {"order": "50"})]))
        assert _violations(tree, settings, RuleType.EXTREME_FLEX_ORDER) == []
