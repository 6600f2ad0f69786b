# ColorCodec - RGB565 color conversion for TFT statements
#
# The drawing statements take 16-bit colors packed as 5 bits red,
# 6 bits green and 5 bits blue.  The model stores "#rrggbb" strings.
# Named TFT_* constants are resolved before numeric literals.

__all__ = (
    "DEFAULT_COLOR", "DEFAULT_BACKGROUND", "TFT_COLORS",
    "to_packed", "from_packed", "packed_value",
    "resolve_color", "same_color",
)

# Color used when a color token cannot be resolved
DEFAULT_COLOR = "#ffffff"

# Fill used by a screen with no background set
DEFAULT_BACKGROUND = "TFT_BLACK"

TFT_COLORS = {
    "TFT_BLACK": 0x0000, "TFT_NAVY": 0x000F, "TFT_DARKGREEN": 0x03E0,
    "TFT_DARKCYAN": 0x03EF, "TFT_MAROON": 0x7800, "TFT_PURPLE": 0x780F,
    "TFT_OLIVE": 0x7BE0, "TFT_LIGHTGREY": 0xC618, "TFT_DARKGREY": 0x7BEF,
    "TFT_BLUE": 0x001F, "TFT_GREEN": 0x07E0, "TFT_CYAN": 0x07FF,
    "TFT_RED": 0xF800, "TFT_MAGENTA": 0xF81F, "TFT_YELLOW": 0xFFE0,
    "TFT_WHITE": 0xFFFF, "TFT_ORANGE": 0xFDA0, "TFT_GREENYELLOW": 0xB7E0,
    "TFT_PINK": 0xFE19, "TFT_BROWN": 0x9A60, "TFT_GOLD": 0xFEA0,
    "TFT_SILVER": 0xC618, "TFT_SKYBLUE": 0x867D, "TFT_VIOLET": 0x915C,
}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _rgb(color):
    """Split "#rrggbb" or "#rgb" into an (r, g, b) tuple, None if malformed."""
    if not color or not isinstance(color, str):
        return None
    digits = color.strip().lstrip("#")
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    if len(digits) != 6 or not set(digits) <= _HEX_DIGITS:
        return None
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def _scale(value, bits):
    top = (1 << bits) - 1
    return int(value * 255 / top + 0.5)


def packed_value(color):
    """Return the 16-bit RGB565 integer for a "#rrggbb" color.

    Each channel is truncated (not rounded) to its bit depth.
    Malformed or empty colors pack to 0.
    """
    rgb = _rgb(color)
    if rgb is None:
        return 0
    r, g, b = rgb
    return ((r & 0xF8) << 8) | ((g & 0xFC) << 3) | (b >> 3)


def to_packed(color):
    """Return the RGB565 literal for a color, e.g. "#1e293b" -> "0x1947"."""
    return f"0x{packed_value(color):04X}"


def from_packed(value):
    """Expand a 16-bit RGB565 value back to "#rrggbb".

    Channels are scaled to the full 8-bit range, so 0xFFFF gives
    "#ffffff" rather than "#f8fcf8".
    """
    value = int(value) & 0xFFFF
    r = _scale((value >> 11) & 0x1F, 5)
    g = _scale((value >> 5) & 0x3F, 6)
    b = _scale(value & 0x1F, 5)
    return f"#{r:02x}{g:02x}{b:02x}"


def resolve_color(token):
    """Resolve a color token from source text to "#rrggbb".

    Lookup order: named TFT_* constant, 0x-prefixed hex literal,
    decimal literal.  Anything else (a variable, an expression)
    resolves to DEFAULT_COLOR.
    """
    token = (token or "").strip()
    if token in TFT_COLORS:
        return from_packed(TFT_COLORS[token])
    try:
        if token[:2] in ("0x", "0X"):
            return from_packed(int(token[2:], 16))
        return from_packed(int(token, 10))
    except ValueError:
        return DEFAULT_COLOR


def same_color(a, b):
    """True if two colors are indistinguishable once packed to RGB565."""
    return packed_value(a) == packed_value(b)
