"""Tests for rules/contrast.py."""

from style_audit.engine.models import RuleType
from style_audit.engine.session import AuditSession
from style_audit.rules.contrast import ContrastRules


def _violations(tree, settings):
    return list(ContrastRules().evaluate(AuditSession.start(tree, settings)))


class TestContrastRules:
    """Tests for AA/AAA contrast violations."""

    def test_aa_failure(self, make_node, make_document, text_styles, settings):
        node = make_node("p", {**text_styles, "color": "rgb(119, 119, 119)"}, text="Grey")
        tree = make_document(node, body_styles={"background-color": "rgb(255, 255, 255)"})

        [violation] = _violations(tree, settings)

        assert violation.rule_type is RuleType.CONTRAST_AA
        assert violation.elements == [node]
        assert violation.contrast.result.ratio < 4.5
        assert violation.description.startswith("Insufficient contrast 4.48:1")

    def test_large_text_uses_lower_threshold(self, make_node, make_document, text_styles, settings):
        node = make_node("h2", {**text_styles, "color": "rgb(119, 119, 119)", "font-size": "24px"}, text="Large")
        tree = make_document(node)

        [violation] = _violations(tree, settings)

        assert violation.rule_type is RuleType.CONTRAST_AAA

    def test_bold_large_text(self, make_node, make_document, text_styles, settings):
        styles = {**text_styles, "color": "rgb(119, 119, 119)", "font-size": "18.67px", "font-weight": "bold"}
        tree = make_document(make_node("strong", styles, text="Bold"))
        assert [v.rule_type for v in _violations(tree, settings)] == [RuleType.CONTRAST_AAA]

    def test_aaa_disabled(self, make_node, make_document, text_styles, settings):
        node = make_node("h2", {**text_styles, "color": "rgb(119, 119, 119)", "font-size": "24px"}, text="Large")
        tree = make_document(node)
        assert _violations(tree, settings.model_copy(update={"check_aaa": False})) == []

    def test_background_inherited_from_ancestor(self, make_node, make_document, text_styles, settings):
        inner = make_node("span", {**text_styles, "color": "rgb(255, 255, 255)"}, text="White on dark")
        panel = make_node("div", {"background-color": "rgb(20, 20, 20)"}, children=[inner])
        tree = make_document(panel)
        assert _violations(tree, settings) == []

    def test_translucent_text_is_blended(self, make_node, make_document, text_styles, settings):
        node = make_node("p", {**text_styles, "color": "rgba(0, 0, 0, 0.3)"}, text="Faint")
        tree = make_document(node)

        [violation] = _violations(tree, settings)

        assert violation.rule_type is RuleType.CONTRAST_AA
        assert violation.contrast.text_color.is_opaque

    def test_button_uses_non_text_requirement(self, make_node, make_document, text_styles, settings):
        styles = {**text_styles, "color": "rgb(119, 119, 119)"}
        tree = make_document(make_node("button", styles, text="Go"))
        assert [v.rule_type for v in _violations(tree, settings)] == [RuleType.CONTRAST_AAA]

    def test_unparseable_colors_are_skipped(self, make_node, make_document, text_styles, settings):
        broken = make_node("p", {**text_styles, "color": "banana"}, text="Broken")
        grey = make_node("p", {**text_styles, "color": "rgb(119, 119, 119)"}, text="Grey")
        tree = make_document(broken, grey)

        violations = _violations(tree, settings)

        assert [v.elements for v in violations] == [[grey]]

    def test_skipped_elements(self, make_node, make_document, text_styles, settings):
        tree = make_document(
            make_node("p", {**text_styles, "color": "transparent"}, text="Invisible"),
            make_node("p", {**text_styles, "color": "rgb(200, 200, 200)"}, text="   "),
            make_node("input", {**text_styles, "color": "rgb(200, 200, 200)"}, text="value"),
            make_node("p", {**text_styles, "color": "rgb(200, 200, 200)"}, text="Hidden", has_layout_box=False),
        )
        assert _violations(tree, settings) == []

    def test_container_judged_on_own_text(self, make_node, make_document, text_styles, settings):
        child = make_node("span", text_styles, text="Dark child")
        wrapper = make_node("div", {**text_styles, "color": "rgb(200, 200, 200)"}, children=[child])
        wrapper.text_content = "Dark child"
        wrapper.own_text = ""
        tree = make_document(wrapper)
        assert _violations(tree, settings) == []
