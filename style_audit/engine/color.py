"""Color model for contrast evaluation.

Parses CSS color strings into immutable ``Color`` values and implements the
WCAG 2.1 color math:
- Relative luminance from linearized sRGB channels
- Contrast ratio (L1 + 0.05) / (L2 + 0.05), from 1:1 to 21:1
- Source-over alpha compositing onto an opaque backdrop
"""

import colorsys
import math
import re
from dataclasses import dataclass

import structlog

from .errors import ParseError

logger = structlog.get_logger(__name__)


def _clamp_channel(value: float) -> int:
    # Half-up rounding, matching browser serialization of computed colors
    return int(math.floor(max(0.0, min(255.0, float(value))) + 0.5))


def _clamp_alpha(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


@dataclass(frozen=True)
class Color:
    """An sRGB color with straight (non-premultiplied) alpha.

    Components are clamped to their domain on construction: channels to
    integers in [0, 255], alpha to [0.0, 1.0].
    """

    r: int
    g: int
    b: int
    a: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "r", _clamp_channel(self.r))
        object.__setattr__(self, "g", _clamp_channel(self.g))
        object.__setattr__(self, "b", _clamp_channel(self.b))
        object.__setattr__(self, "a", _clamp_alpha(self.a))

    @property
    def is_opaque(self) -> bool:
        return self.a >= 1.0

    @property
    def is_transparent(self) -> bool:
        return self.a <= 0.0

    def with_channels(self, r: float, g: float, b: float) -> "Color":
        """Return a copy with new (clamped) channels and the same alpha."""
        return Color(r, g, b, self.a)

    def to_css(self) -> str:
        """Serialize as ``rgb()`` / ``rgba()`` the way browsers compute colors."""
        if self.is_opaque:
            return f"rgb({self.r}, {self.g}, {self.b})"
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a:g})"

    def __str__(self) -> str:
        return self.to_css()


WHITE = Color(255, 255, 255, 1.0)
BLACK = Color(0, 0, 0, 1.0)
TRANSPARENT = Color(0, 0, 0, 0.0)


# CSS Color Module Level 4 named colors
NAMED_COLORS: dict[str, str] = {
    "aliceblue": "#f0f8ff", "antiquewhite": "#faebd7", "aqua": "#00ffff",
    "aquamarine": "#7fffd4", "azure": "#f0ffff", "beige": "#f5f5dc",
    "bisque": "#ffe4c4", "black": "#000000", "blanchedalmond": "#ffebcd",
    "blue": "#0000ff", "blueviolet": "#8a2be2", "brown": "#a52a2a",
    "burlywood": "#deb887", "cadetblue": "#5f9ea0", "chartreuse": "#7fff00",
    "chocolate": "#d2691e", "coral": "#ff7f50", "cornflowerblue": "#6495ed",
    "cornsilk": "#fff8dc", "crimson": "#dc143c", "cyan": "#00ffff",
    "darkblue": "#00008b", "darkcyan": "#008b8b", "darkgoldenrod": "#b8860b",
    "darkgray": "#a9a9a9", "darkgreen": "#006400", "darkgrey": "#a9a9a9",
    "darkkhaki": "#bdb76b", "darkmagenta": "#8b008b", "darkolivegreen": "#556b2f",
    "darkorange": "#ff8c00", "darkorchid": "#9932cc", "darkred": "#8b0000",
    "darksalmon": "#e9967a", "darkseagreen": "#8fbc8f", "darkslateblue": "#483d8b",
    "darkslategray": "#2f4f4f", "darkslategrey": "#2f4f4f", "darkturquoise": "#00ced1",
    "darkviolet": "#9400d3", "deeppink": "#ff1493", "deepskyblue": "#00bfff",
    "dimgray": "#696969", "dimgrey": "#696969", "dodgerblue": "#1e90ff",
    "firebrick": "#b22222", "floralwhite": "#fffaf0", "forestgreen": "#228b22",
    "fuchsia": "#ff00ff", "gainsboro": "#dcdcdc", "ghostwhite": "#f8f8ff",
    "gold": "#ffd700", "goldenrod": "#daa520", "gray": "#808080",
    "green": "#008000", "greenyellow": "#adff2f", "grey": "#808080",
    "honeydew": "#f0fff0", "hotpink": "#ff69b4", "indianred": "#cd5c5c",
    "indigo": "#4b0082", "ivory": "#fffff0", "khaki": "#f0e68c",
    "lavender": "#e6e6fa", "lavenderblush": "#fff0f5", "lawngreen": "#7cfc00",
    "lemonchiffon": "#fffacd", "lightblue": "#add8e6", "lightcoral": "#f08080",
    "lightcyan": "#e0ffff", "lightgoldenrodyellow": "#fafad2", "lightgray": "#d3d3d3",
    "lightgreen": "#90ee90", "lightgrey": "#d3d3d3", "lightpink": "#ffb6c1",
    "lightsalmon": "#ffa07a", "lightseagreen": "#20b2aa", "lightskyblue": "#87cefa",
    "lightslategray": "#778899", "lightslategrey": "#778899", "lightsteelblue": "#b0c4de",
    "lightyellow": "#ffffe0", "lime": "#00ff00", "limegreen": "#32cd32",
    "linen": "#faf0e6", "magenta": "#ff00ff", "maroon": "#800000",
    "mediumaquamarine": "#66cdaa", "mediumblue": "#0000cd", "mediumorchid": "#ba55d3",
    "mediumpurple": "#9370db", "mediumseagreen": "#3cb371", "mediumslateblue": "#7b68ee",
    "mediumspringgreen": "#00fa9a", "mediumturquoise": "#48d1cc", "mediumvioletred": "#c71585",
    "midnightblue": "#191970", "mintcream": "#f5fffa", "mistyrose": "#ffe4e1",
    "moccasin": "#ffe4b5", "navajowhite": "#ffdead", "navy": "#000080",
    "oldlace": "#fdf5e6", "olive": "#808000", "olivedrab": "#6b8e23",
    "orange": "#ffa500", "orangered": "#ff4500", "orchid": "#da70d6",
    "palegoldenrod": "#eee8aa", "palegreen": "#98fb98", "paleturquoise": "#afeeee",
    "palevioletred": "#db7093", "papayawhip": "#ffefd5", "peachpuff": "#ffdab9",
    "peru": "#cd853f", "pink": "#ffc0cb", "plum": "#dda0dd",
    "powderblue": "#b0e0e6", "purple": "#800080", "rebeccapurple": "#663399",
    "red": "#ff0000", "rosybrown": "#bc8f8f", "royalblue": "#4169e1",
    "saddlebrown": "#8b4513", "salmon": "#fa8072", "sandybrown": "#f4a460",
    "seagreen": "#2e8b57", "seashell": "#fff5ee", "sienna": "#a0522d",
    "silver": "#c0c0c0", "skyblue": "#87ceeb", "slateblue": "#6a5acd",
    "slategray": "#708090", "slategrey": "#708090", "snow": "#fffafa",
    "springgreen": "#00ff7f", "steelblue": "#4682b4", "tan": "#d2b48c",
    "teal": "#008080", "thistle": "#d8bfd8", "tomato": "#ff6347",
    "turquoise": "#40e0d0", "violet": "#ee82ee", "wheat": "#f5deb3",
    "white": "#ffffff", "whitesmoke": "#f5f5f5", "yellow": "#ffff00",
    "yellowgreen": "#9acd32",
}

_HEX_RE = re.compile(r"^#([0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$")
_FUNC_RE = re.compile(r"^(rgba?|hsla?)\(\s*(.*?)\s*\)$")
_HUE_UNITS = {"deg": 1.0, "grad": 0.9, "rad": 180.0 / math.pi, "turn": 360.0}


def _split_arguments(raw: str, body: str) -> tuple[list[str], str | None]:
    """Split function arguments in legacy comma or modern space syntax."""
    if "," in body:
        parts = [p.strip() for p in body.split(",")]
        if len(parts) not in (3, 4):
            raise ParseError(raw, "expected 3 or 4 components")
        return parts[:3], (parts[3] if len(parts) == 4 else None)
    main, slash, alpha = body.partition("/")
    parts = main.split()
    if len(parts) != 3 or (slash and not alpha.strip()):
        raise ParseError(raw, "expected 3 components")
    return parts, (alpha.strip() if slash else None)


def _parse_number(raw: str, token: str) -> float:
    try:
        return float(token)
    except ValueError:
        raise ParseError(raw, f"invalid number {token!r}") from None


def _parse_channel(raw: str, token: str) -> float:
    if token.endswith("%"):
        return _parse_number(raw, token[:-1]) / 100 * 255
    return _parse_number(raw, token)


def _parse_alpha(raw: str, token: str | None) -> float:
    if token is None:
        return 1.0
    if token.endswith("%"):
        return _parse_number(raw, token[:-1]) / 100
    return _parse_number(raw, token)


def _parse_percentage(raw: str, token: str) -> float:
    if not token.endswith("%"):
        raise ParseError(raw, "saturation and lightness must be percentages")
    return max(0.0, min(100.0, _parse_number(raw, token[:-1]))) / 100


def _parse_hue(raw: str, token: str) -> float:
    for unit, factor in _HUE_UNITS.items():
        if token.endswith(unit):
            return (_parse_number(raw, token[: -len(unit)]) * factor) % 360
    return _parse_number(raw, token) % 360


def _parse_hex(raw: str, digits: str) -> Color:
    if len(digits) in (3, 4):
        digits = "".join(c * 2 for c in digits)
    r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
    a = int(digits[6:8], 16) / 255 if len(digits) == 8 else 1.0
    return Color(r, g, b, a)


def parse_color(value: str) -> Color:
    """Parse a CSS color string.

    Handles ``rgb()``/``rgba()`` (comma or space syntax, percentages,
    ``/ alpha``), ``hsl()``/``hsla()``, 3/4/6/8 digit hex, the CSS named
    colors and ``transparent``. Named, hex and hsl forms are normalized to
    rgb before the result is built.

    Args:
        value: CSS color value

    Returns:
        Parsed color

    Raises:
        ParseError: The value does not resolve to an rgb/rgba color
    """
    if not isinstance(value, str):
        raise ParseError(str(value), "not a string")
    text = value.strip().lower()
    if not text:
        raise ParseError(value, "empty value")

    if text == "transparent":
        return TRANSPARENT
    if text in NAMED_COLORS:
        text = NAMED_COLORS[text]

    hex_match = _HEX_RE.match(text)
    if hex_match:
        return _parse_hex(value, hex_match.group(1))

    func_match = _FUNC_RE.match(text)
    if not func_match:
        raise ParseError(value)

    name, body = func_match.groups()
    parts, alpha = _split_arguments(value, body)

    if name.startswith("rgb"):
        r, g, b = (_parse_channel(value, p) for p in parts)
        return Color(r, g, b, _parse_alpha(value, alpha))

    hue = _parse_hue(value, parts[0])
    saturation = _parse_percentage(value, parts[1])
    lightness = _parse_percentage(value, parts[2])
    r, g, b = colorsys.hls_to_rgb(hue / 360, lightness, saturation)
    return Color(r * 255, g * 255, b * 255, _parse_alpha(value, alpha))


class ColorParser:
    """Memoizing ``parse_color`` front end.

    The same handful of color strings recurs across thousands of nodes, so
    results (and failures) are cached by the raw string. One parser lives for
    exactly one audit session.
    """

    def __init__(self) -> None:
        self._cache: dict[str, Color | ParseError] = {}
        self.hits = 0
        self.misses = 0

    def parse(self, value: str) -> Color:
        """Parse ``value``, reusing a cached result when available.

        Raises:
            ParseError: The value does not resolve to a color
        """
        cached = self._cache.get(value)
        if cached is None:
            self.misses += 1
            try:
                cached = parse_color(value)
            except ParseError as e:
                logger.debug("color_parse_failed", value=value, reason=e.reason)
                cached = e
            self._cache[value] = cached
        else:
            self.hits += 1

        if isinstance(cached, ParseError):
            raise cached
        return cached

    def clear(self) -> None:
        self._cache.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._cache)


def _linearize(channel: int) -> float:
    c = channel / 255
    if c <= 0.03928:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(color: Color) -> float:
    """Calculate WCAG relative luminance.

    L = 0.2126 * R + 0.7152 * G + 0.0722 * B over linearized sRGB channels.
    Alpha is ignored; composite translucent colors first.

    Returns:
        Relative luminance value (0 to 1)
    """
    return (
        0.2126 * _linearize(color.r)
        + 0.7152 * _linearize(color.g)
        + 0.0722 * _linearize(color.b)
    )


def contrast_ratio(color1: Color, color2: Color) -> float:
    """Calculate WCAG contrast ratio between two colors.

    Returns:
        Contrast ratio (1:1 to 21:1), symmetric in its arguments
    """
    l1 = relative_luminance(color1)
    l2 = relative_luminance(color2)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def blend(foreground: Color, background: Color) -> Color:
    """Composite ``foreground`` over an opaque ``background``.

    The background is assumed opaque; resolving it is the caller's job.
    An opaque foreground is returned unchanged.
    """
    if foreground.is_opaque:
        return foreground
    alpha = foreground.a
    inverse = 1 - alpha
    return Color(
        foreground.r * alpha + background.r * inverse,
        foreground.g * alpha + background.g * inverse,
        foreground.b * alpha + background.b * inverse,
        1.0,
    )


def to_hex(color: Color) -> str:
    """Serialize to lowercase hex.

    Opaque colors use ``#rrggbb``; translucent ones ``#rrggbbaa`` with alpha
    quantized to 1/255.
    """
    hex_color = f"#{color.r:02x}{color.g:02x}{color.b:02x}"
    if not color.is_opaque:
        hex_color += f"{_clamp_channel(color.a * 255):02x}"
    return hex_color
