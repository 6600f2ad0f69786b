# CodeGenerator - Emit TFT drawing code from a Project
#
# One "void draw_<Screen>()" function per screen, one statement per
# element, each element statement tagged with a "// <name>" comment
# that the parser reads back as the element's identity.  When the
# previous buffer is supplied, its preamble (everything before the
# first draw function) and any user-written functions are carried
# over unchanged, so regenerating is idempotent.

import math
import re

from . import utils_core as Utils
from . import ProjectModel as M
from .ColorCodec import DEFAULT_BACKGROUND, to_packed
from .ScreenScanner import (
    GENERATED_PREFIX, canonical_name, find_user_functions,
    first_generated_function,
)

__all__ = (
    "DEFAULT_PREAMBLE", "USER_LOGIC_MARKER", "CodeGenerator",
    "generate", "rename_screen_function",
)

DEFAULT_PREAMBLE = (
    "// tftsync - generated display code\n"
    "// Edit freely: changes are parsed back into the screen designer.\n"
    "#include <TFT_eSPI.h>\n"
    "#include <SPI.h>\n"
    "extern TFT_eSPI tft;\n"
    "\n"
)

USER_LOGIC_MARKER = "// --- User Logic Preserved ---"

# drawCentreString font number
CENTRE_FONT = 2


def _round(value):
    """Round half up, as the designer rounds pixel positions."""
    return int(math.floor(value + 0.5))


def _quote(text):
    text = (text or "").replace("\\", "\\\\").replace('"', '\\"')
    return '"' + text.replace("\n", "\\n").replace("\t", "\\t") + '"'


def _comment(name):
    return " ".join(str(name or "").splitlines())


class CodeGenerator:
    """Render a Project (or parts of it) as TFT_eSPI source text."""

    def __init__(self, receiver=None, width=None, height=None):
        """
        Args:
            receiver: Object the statements are called on ("tft").
            width, height: Display size used for background images.
        """
        self.receiver = receiver or Utils.getStr("Generator", "receiver",
                                                 "tft")
        self.width = width or Utils.getInt("Display", "width", 240)
        self.height = height or Utils.getInt("Display", "height", 240)

    # ------------------------------------------------------------------
    # Whole buffer
    # ------------------------------------------------------------------
    def generate(self, project, previous_text=None):
        """Return the full source text for project.

        Args:
            project: The Project to render.
            previous_text: Current editor buffer, if any.  Its preamble
                           and user functions are preserved.
        """
        previous_text = previous_text or ""
        start = first_generated_function(previous_text)
        if start is None:
            preamble = DEFAULT_PREAMBLE
            user_functions = find_user_functions(previous_text)
        else:
            preamble = previous_text[:start]
            user_functions = find_user_functions(previous_text, start)

        parts = [preamble]
        for screen in project.screens:
            parts.append(self.emit_screen(screen))
        if user_functions:
            parts.append(USER_LOGIC_MARKER + "\n")
            parts.append("\n\n".join(user_functions))
            parts.append("\n")
        return "".join(parts)

    # ------------------------------------------------------------------
    # One screen
    # ------------------------------------------------------------------
    def emit_screen(self, screen):
        name = canonical_name(screen.name)
        lines = [f"void {GENERATED_PREFIX}{name}() {{\n"]
        lines.append(self.emit_background(screen))
        for el in screen.elements:
            lines.append(self.emit_element(el))
        lines.append("}\n\n")
        return "".join(lines)

    def emit_background(self, screen):
        r = self.receiver
        if screen.background or screen.background_asset:
            image = screen.background_asset or \
                f"{canonical_name(screen.name)}_bg"
            return (f"  {r}.pushImage(0,0,{self.width},{self.height},"
                    f"{image});\n")
        if screen.background_color:
            return f"  {r}.fillScreen({to_packed(screen.background_color)});\n"
        return f"  {r}.fillScreen({DEFAULT_BACKGROUND});\n"

    # ------------------------------------------------------------------
    # One element
    # ------------------------------------------------------------------
    def emit_element(self, el):
        """Return the statement line(s) drawing one element."""
        r = self.receiver
        color = el.color_bind or to_packed(el.color)
        x, y = self._operand(el, "x"), self._operand(el, "y")
        w, h = self._operand(el, "w"), self._operand(el, "h")
        tail = f"; // {_comment(el.name)}\n"
        t = el.type

        if t in (M.FILL_CIRCLE, M.DRAW_CIRCLE):
            args = (self._centre_x(el), self._centre_y(el),
                    self._composite(el, ("w", "h"), "min({w}, {h}) / 2",
                                    _round(min(el.w, el.h) / 2)),
                    color)
        elif t in (M.FILL_ROUND_RECT, M.DRAW_ROUND_RECT):
            args = (x, y, w, h,
                    self._composite(el, ("w", "h"), "min({w}, {h}) / 4",
                                    _round(min(el.w, el.h) / 4)),
                    color)
        elif t in (M.FILL_ELLIPSE, M.DRAW_ELLIPSE):
            args = (self._centre_x(el), self._centre_y(el),
                    self._composite(el, ("w",), "({w}/2)", _round(el.w / 2)),
                    self._composite(el, ("h",), "({h}/2)", _round(el.h / 2)),
                    color)
        elif t in (M.FILL_TRIANGLE, M.DRAW_TRIANGLE):
            # isosceles, apex centred on the top edge
            bottom = self._composite(el, ("y", "h"), "{y} + {h}", el.y + el.h)
            args = (self._centre_x(el), y, x, bottom,
                    self._composite(el, ("x", "w"), "{x} + {w}", el.x + el.w),
                    bottom, color)
        elif t == M.DRAW_LINE:
            args = (x, y,
                    self._composite(el, ("x", "w"), "{x} + {w}", el.x + el.w),
                    self._composite(el, ("y", "h"), "{y} + {h}", el.y + el.h),
                    color)
        elif t == M.DRAW_FAST_HLINE:
            args = (x, y, w, color)
        elif t == M.DRAW_FAST_VLINE:
            args = (x, y, h, color)
        elif t == M.DRAW_PIXEL:
            args = (x, y, color)
        elif t in M.TEXT_TYPES:
            text = f"String({el.value_bind}).c_str()" if el.value_bind \
                else _quote(el.name)
            size = self._composite(el, ("h",), "max(1, (int)({h} / 8))",
                                   max(1, _round(el.h / 8)))
            state = f"  {r}.setTextColor({color}); {r}.setTextSize({size});\n"
            if t == M.DRAW_CENTRE_STRING:
                args = (text, self._centre_x(el), y, CENTRE_FONT)
            else:
                args = (text, x, y)
            return state + self._call(t, args) + tail
        elif t == M.PUSH_IMAGE:
            args = (x, y, w, h, el.asset or "nullptr")
        else:
            # fillRect / drawRect
            args = (x, y, w, h, color)
        return self._call(t, args) + tail

    # ------------------------------------------------------------------
    def _call(self, keyword, args):
        return f"  {self.receiver}.{keyword}({','.join(str(a) for a in args)})"

    @staticmethod
    def _operand(el, field):
        return el.bind(field) or str(getattr(el, field))

    def _composite(self, el, fields, template, literal):
        """Expression mixing literal and bound operands.

        Folded to a literal integer unless one of fields is bound.
        """
        if not any(el.bind(f) for f in fields):
            return str(literal)
        return template.format(**{f: self._operand(el, f) for f in fields})

    def _centre_x(self, el):
        return self._composite(el, ("x", "w"), "{x} + ({w}/2)",
                               _round(el.x + el.w / 2))

    def _centre_y(self, el):
        return self._composite(el, ("y", "h"), "{y} + ({h}/2)",
                               _round(el.y + el.h / 2))


# -----------------------------------------------------------------------------
def generate(project, previous_text=None):
    """Render project with the configured generator settings."""
    return CodeGenerator().generate(project, previous_text)


# -----------------------------------------------------------------------------
def rename_screen_function(text, old_name, new_name):
    """Rewrite definitions of and calls to draw_<old> for a renamed screen.

    Returns text unchanged if the canonical names are equal.
    """
    old = canonical_name(old_name)
    new = canonical_name(new_name)
    if old == new:
        return text
    pattern = re.compile(
        r"\b" + GENERATED_PREFIX + re.escape(old) + r"(?=\s*\()", re.ASCII)
    return pattern.sub(GENERATED_PREFIX + new, text)
