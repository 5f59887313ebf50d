"""Effective background resolution through ancestor compositing."""

import structlog

from .color import WHITE, Color, ColorParser, blend
from .models import StyleNode

logger = structlog.get_logger(__name__)


class BackgroundResolver:
    """Resolve the opaque color actually visible behind a node.

    Walks from the node itself up through its ancestors:
    - an opaque background ends the walk and is returned as is
    - a translucent background is blended over the parent's effective
      background
    - a fully transparent (or unset) background continues the walk

    When the root is passed without finding any color, the page is assumed
    white. Results are memoized per node for the lifetime of the resolver,
    including every transparent node walked through on the way.
    """

    def __init__(self, parser: ColorParser | None = None, default: Color = WHITE):
        self.parser = parser if parser is not None else ColorParser()
        self.default = default
        self._memo: dict[StyleNode, Color] = {}
        self.log = logger.bind(component="background_resolver")

    def effective_background(self, node: StyleNode) -> Color:
        """Get the effective opaque background behind ``node``.

        Args:
            node: Element whose backdrop is needed

        Returns:
            Opaque color (alpha 1)

        Raises:
            ParseError: A background color on the walk could not be parsed
        """
        visited: list[StyleNode] = []
        result: Color | None = None
        current: StyleNode | None = node

        while current is not None:
            cached = self._memo.get(current)
            if cached is not None:
                result = cached
                break

            visited.append(current)
            color = self.parser.parse(current.style("background-color") or "transparent")

            if color.is_opaque:
                result = color
                break
            if not color.is_transparent:
                parent = current.parent
                backdrop = self.effective_background(parent) if parent is not None else self.default
                result = blend(color, backdrop)
                break
            current = current.parent

        if result is None:
            self.log.debug(
                "background_resolution_exhausted",
                tag=node.tag_name,
                depth=len(visited),
            )
            result = self.default

        for walked in visited:
            self._memo[walked] = result
        return result

    def clear(self) -> None:
        self._memo.clear()

    def __len__(self) -> int:
        return len(self._memo)
