"""Shared fixtures for style audit tests."""

from unittest.mock import AsyncMock

import pytest

from style_audit.config import AuditSettings
from style_audit.engine.models import StyleNode, StyleTree


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "smoke: mark test as smoke test (fast, critical path)"
    )


def build_node(tag="div", styles=None, text=None, children=None, bounds=None, has_layout_box=True, **attributes):
    """Build a StyleNode; ``text`` is both the node's own and full text."""
    return StyleNode(
        tag_name=tag,
        computed_styles=dict(styles or {}),
        attributes={key.rstrip("_").replace("_", "-"): value for key, value in attributes.items()},
        bounds=dict(bounds or {}),
        text_content=text,
        own_text=text,
        has_layout_box=has_layout_box,
        children=list(children or []),
    )


def build_document(*body_children, body_styles=None, url="https://example.com"):
    """Wrap nodes in html > body and return the tree."""
    body = build_node("body", body_styles or {}, children=body_children)
    html = build_node("html", children=[body])
    return StyleTree(root=html, url=url)


@pytest.fixture
def make_node():
    """Factory for StyleNode instances."""
    return build_node


@pytest.fixture
def make_document():
    """Factory for html > body documents."""
    return build_document


@pytest.fixture
def settings(monkeypatch):
    """Default audit settings, isolated from the environment."""
    for name in (
        "STYLE_AUDIT_CHECK_AAA",
        "STYLE_AUDIT_ENABLED_RULE_PACKS",
        "STYLE_AUDIT_REDUNDANCY_THRESHOLD",
    ):
        monkeypatch.delenv(name, raising=False)
    return AuditSettings(_env_file=None)


TEXT_STYLES = {
    "color": "rgb(0, 0, 0)",
    "font-family": "Inter, sans-serif",
    "font-size": "16px",
    "font-weight": "400",
    "line-height": "24px",
    "display": "block",
    "position": "static",
}


@pytest.fixture
def text_styles():
    """Computed styles of plain, well-formed body text."""
    return dict(TEXT_STYLES)


@pytest.fixture
def sample_tree():
    """A small page: heading, low-contrast paragraph, button and a card."""
    heading = build_node(
        "h1",
        {**TEXT_STYLES, "font-size": "32px", "font-weight": "700", "line-height": "40px"},
        text="Welcome",
        class_="title",
    )
    muted = build_node(
        "p",
        {**TEXT_STYLES, "color": "rgb(119, 119, 119)"},
        text="Muted paragraph text",
        class_="muted",
    )
    body_text = build_node("p", dict(TEXT_STYLES), text="Regular paragraph")
    button = build_node(
        "button",
        {**TEXT_STYLES, "background-color": "rgb(0, 95, 204)", "color": "rgb(255, 255, 255)"},
        text="Submit",
        bounds={"x": 0, "y": 0, "width": 120, "height": 48},
        id="submit",
    )
    card_text = build_node("span", dict(TEXT_STYLES), text="Inside a card")
    card = build_node(
        "div",
        {**TEXT_STYLES, "background-color": "rgba(0, 0, 0, 0.05)"},
        children=[card_text],
        class_="card",
    )
    main = build_node("main", {**TEXT_STYLES}, children=[heading, muted, body_text, button, card])
    return build_document(main, body_styles={**TEXT_STYLES, "background-color": "rgb(255, 255, 255)"})


@pytest.fixture
def mock_playwright_page(sample_tree):
    """Create a mocked Playwright page that serializes ``sample_tree``."""
    page = AsyncMock()
    page.url = "https://example.com"
    page.goto = AsyncMock()
    page.evaluate = AsyncMock(return_value=sample_tree.root.to_dict())
    return page
