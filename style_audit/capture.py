"""Style tree capture.

Captures the computed style tree of a live page with Playwright, and loads
or saves style tree snapshots as JSON files.

This module provides:
- Computed style extraction for every element, in document order
- Layout box detection (offsetParent based, with fixed elements kept)
- Own-text extraction so contrast is judged on text an element draws itself
- JSON snapshot persistence
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog
from playwright.async_api import Page, async_playwright

from .engine.errors import SnapshotError
from .engine.models import StyleTree

logger = structlog.get_logger(__name__)


# Computed properties read by the rule packs
CAPTURED_PROPERTIES = [
    "color",
    "background-color",
    "font-family",
    "font-size",
    "font-weight",
    "line-height",
    "display",
    "position",
    "z-index",
    "overflow",
    "gap",
    "flex-grow",
    "flex-shrink",
    "order",
    "outline-style",
    "outline-width",
    "box-shadow",
    "border-top-width",
    "border-right-width",
    "border-bottom-width",
    "border-left-width",
    "visibility",
    "opacity",
]


# JavaScript code for serializing the computed style tree
STYLE_TREE_EXTRACTOR_JS = """
([properties, maxElements, maxText]) => {
    let count = 0;

    const serialize = (el) => {
        count++;
        const computed = window.getComputedStyle(el);
        const styles = {};
        for (const prop of properties) {
            styles[prop] = computed.getPropertyValue(prop);
        }

        const attributes = {};
        for (const attr of el.attributes || []) {
            attributes[attr.name] = attr.value;
        }

        const rect = el.getBoundingClientRect();
        const isDocument = el === document.body || el === document.documentElement;
        const isFixedWithBox = computed.position === 'fixed' && rect.width > 0 && rect.height > 0;

        let ownText = '';
        for (const child of el.childNodes) {
            if (child.nodeType === Node.TEXT_NODE) {
                ownText += child.textContent;
            }
        }

        const children = [];
        for (const child of el.children) {
            if (count >= maxElements) {
                break;
            }
            children.push(serialize(child));
        }

        return {
            tag_name: el.tagName.toLowerCase(),
            computed_styles: styles,
            attributes: attributes,
            bounds: {
                x: rect.x,
                y: rect.y,
                width: rect.width,
                height: rect.height
            },
            text_content: (el.textContent || '').trim().substring(0, maxText),
            own_text: ownText.trim().substring(0, maxText),
            has_layout_box: el.offsetParent !== null || isDocument || isFixedWithBox,
            children: children
        };
    };

    return serialize(document.documentElement);
}
"""


class StyleTreeCapture:
    """Captures the computed style tree of a page.

    Usage:
        capture = StyleTreeCapture()

        # Use with existing page
        tree = await capture.capture_tree(page)

        # Use with fresh browser context
        tree = await capture.capture_url("https://example.com")

    Attributes:
        default_viewport: Default viewport dimensions
        max_elements: Maximum number of elements to serialize
        max_text_length: Maximum characters of text kept per element
        log: Structured logger instance
    """

    def __init__(
        self,
        default_viewport: Optional[Dict[str, int]] = None,
        max_elements: int = 10000,
        max_text_length: int = 200,
    ):
        """Initialize StyleTreeCapture.

        Args:
            default_viewport: Default viewport size {"width": int, "height": int}
            max_elements: Maximum elements to serialize (prevents memory issues)
            max_text_length: Text truncation per element
        """
        self.default_viewport = default_viewport or {"width": 1920, "height": 1080}
        self.max_elements = max_elements
        self.max_text_length = max_text_length
        self.log = logger.bind(component="style_tree_capture")

    async def extract_tree(self, page: Page) -> Dict[str, Any]:
        """Serialize the page's computed style tree.

        Args:
            page: Playwright page instance

        Returns:
            Nested node dictionaries in snapshot format

        Raises:
            SnapshotError: The page could not be serialized
        """
        try:
            root = await page.evaluate(
                STYLE_TREE_EXTRACTOR_JS,
                [CAPTURED_PROPERTIES, self.max_elements, self.max_text_length],
            )
        except Exception as e:
            self.log.error("Style tree extraction failed", error=str(e))
            raise SnapshotError(f"Style tree extraction failed: {e}") from e

        if not isinstance(root, dict):
            self.log.error("Style tree extraction returned no tree", result_type=type(root).__name__)
            raise SnapshotError("Style tree extraction returned no tree")
        return root

    async def capture_tree(self, page: Page) -> StyleTree:
        """Capture a ``StyleTree`` from an already loaded page.

        Args:
            page: Playwright page instance

        Returns:
            Style tree snapshot of the page
        """
        root = await self.extract_tree(page)
        tree = StyleTree.from_dict({
            "url": page.url,
            "captured_at": datetime.now(timezone.utc).isoformat(),
            "root": root,
        })
        self.log.info("Style tree captured", url=tree.url, elements=len(tree))
        return tree

    async def capture_url(
        self,
        url: str,
        browser_type: str = "chromium",
        viewport: Optional[Dict[str, int]] = None,
        headless: bool = True,
    ) -> StyleTree:
        """Capture a style tree by launching a fresh browser.

        Args:
            url: URL to capture
            browser_type: Browser to use (chromium, firefox, webkit)
            viewport: Viewport size
            headless: Whether to run headless

        Returns:
            Style tree snapshot of the page

        Raises:
            SnapshotError: Browser launch, navigation or extraction failed
        """
        viewport = viewport or self.default_viewport
        browser = None

        try:
            async with async_playwright() as p:
                browser_launcher = getattr(p, browser_type)
                browser = await browser_launcher.launch(headless=headless)

                try:
                    context = await browser.new_context(
                        viewport=viewport,
                        device_scale_factor=1,
                    )

                    page = await context.new_page()

                    await page.goto(url, wait_until="load")
                    return await self.capture_tree(page)
                finally:
                    await browser.close()
        except SnapshotError:
            raise
        except Exception as e:
            self.log.error(
                "Page capture failed",
                url=url,
                browser_launched=browser is not None,
                error=str(e),
            )
            raise SnapshotError(f"Could not capture {url}: {e}") from e


def load_snapshot(path: Union[str, Path]) -> StyleTree:
    """Load a style tree snapshot from a JSON file.

    Raises:
        SnapshotError: The file cannot be read or is not a valid snapshot
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SnapshotError(f"Cannot read snapshot {path}: {e}") from e
    tree = StyleTree.from_json(content)
    logger.debug("Snapshot loaded", path=str(path), elements=len(tree))
    return tree


def save_snapshot(tree: StyleTree, path: Union[str, Path]) -> Path:
    """Write a style tree snapshot to a JSON file."""
    target = Path(path)
    target.write_text(json.dumps(tree.to_dict(), indent=2), encoding="utf-8")
    logger.debug("Snapshot saved", path=str(target))
    return target


# Convenience factory function
def create_style_tree_capture(
    max_elements: int = 10000,
    viewport: Optional[Dict[str, int]] = None,
) -> StyleTreeCapture:
    """Factory function for creating StyleTreeCapture instance.

    Args:
        max_elements: Maximum elements to serialize
        viewport: Default viewport size

    Returns:
        Configured StyleTreeCapture instance
    """
    return StyleTreeCapture(default_viewport=viewport, max_elements=max_elements)
