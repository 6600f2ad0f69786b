# StatementParser - Parse TFT drawing statements back into commands
#
# A draw function body is tokenized line by line.  Each statement
# "[receiver.]keyword(arg, ...);" is looked up in STATEMENTS, a
# closed table giving the argument kinds and the command builder
# for every keyword the code generator emits.  Text color and size
# are parser state carried from setTextColor()/setTextSize() to the
# text statements that follow them.
#
# Parsing is best effort: a line that does not form a known
# statement is dropped (and recorded in StatementParser.skipped).

import logging
import re

from . import ColorCodec
from . import ProjectModel as M
from .ScreenScanner import extract_body, find_function

__all__ = (
    "ParsedCommand", "ParsedBackground", "ParsedBody", "ParserState",
    "StatementParser", "STATEMENTS", "tokenize",
    "parse_screen", "parse_commands",
)

DEFAULT_TEXT_COLOR = "#ffffff"
DEFAULT_TEXT_SIZE = 16          # pixels; setTextSize(n) means n * 8
TEXT_SIZE_STEP = 8
LINE_THICKNESS = 2              # nominal height/width of fast lines

_NULL_ASSETS = ("nullptr", "NULL")

_TOKEN_RE = re.compile(r"""
      (?P<comment>//.*)
    | (?P<block>/\*.*?\*/)
    | (?P<string>"(?:[^"\\]|\\.)*")
    | (?P<char>'(?:[^'\\]|\\.)*')
    | (?P<number>0[xX][0-9A-Fa-f]+|\d+)
    | (?P<ident>[A-Za-z_]\w*)
    | (?P<space>\s+)
    | (?P<punct>.)
""", re.VERBOSE | re.ASCII)

_ESCAPE_RE = re.compile(r"\\(.)")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}


# =============================================================================
# Result types
# =============================================================================
class ParsedCommand:
    """One drawing statement resolved to literal geometry and color.

    Never stored in the project; the reconciler merges it into an
    Element.
    """

    __slots__ = ("type", "x", "y", "w", "h", "color", "asset",
                 "name", "named")

    def __init__(self, type, x=0, y=0, w=0, h=0, color=None, asset=None,
                 name=None, named=False):
        """
        Args:
            type: Element type (statement keyword).
            x, y, w, h: Bounding box derived from the statement.
            color: Resolved "#rrggbb".
            asset: Asset name for pushImage.
            name: Name from the trailing comment (or text literal),
                  else a type-derived default.
            named: True if name came from the source text.
        """
        self.type = type
        self.x = x
        self.y = y
        self.w = w
        self.h = h
        self.color = color
        self.asset = asset
        self.name = name if name is not None else type
        self.named = named

    def geometry(self):
        return (self.x, self.y, self.w, self.h)

    def __eq__(self, other):
        if not isinstance(other, ParsedCommand):
            return NotImplemented
        return all(getattr(self, s) == getattr(other, s)
                   for s in self.__slots__)

    def __repr__(self):
        return (f"ParsedCommand({self.type!r}, {self.x}, {self.y}, "
                f"{self.w}, {self.h}, {self.color!r}, asset={self.asset!r}, "
                f"name={self.name!r})")


class ParsedBackground:
    """The background statement of a draw function.

    Exactly one of color (fillScreen) or asset (pushImage of a named
    asset) is set; inline is True for the "<Screen>_bg" image array
    generated from an embedded background.
    """

    __slots__ = ("color", "asset", "inline")

    def __init__(self, color=None, asset=None, inline=False):
        self.color = color
        self.asset = asset
        self.inline = inline


class ParsedBody:
    """Commands of one function body plus its background, if any."""

    __slots__ = ("commands", "background")

    def __init__(self, commands=None, background=None):
        self.commands = commands if commands is not None else []
        self.background = background

    def __iter__(self):
        return iter(self.commands)

    def __len__(self):
        return len(self.commands)

    def __getitem__(self, index):
        return self.commands[index]


class ParserState:
    """Text attributes in effect at the current line of a body scan."""

    __slots__ = ("text_color", "text_size")

    def __init__(self):
        self.text_color = DEFAULT_TEXT_COLOR
        self.text_size = DEFAULT_TEXT_SIZE


# =============================================================================
# Tokenizer
# =============================================================================
def tokenize(line):
    """Split one source line into (kind, value) tokens.

    Whitespace and /* */ comments are dropped; a // comment is
    returned as a single trailing "comment" token.
    """
    tokens = []
    for m in _TOKEN_RE.finditer(line):
        kind = m.lastgroup
        if kind in ("space", "block"):
            continue
        tokens.append((kind, m.group()))
    return tokens


def _split(tokens, sep):
    """Split tokens on a punctuation separator outside brackets."""
    parts = [[]]
    depth = 0
    for tok in tokens:
        kind, value = tok
        if kind == "punct":
            if value in "([{":
                depth += 1
            elif value in ")]}":
                depth -= 1
            elif value == sep and depth == 0:
                parts.append([])
                continue
        parts[-1].append(tok)
    return parts


def _open_comment(line):
    """Offset of a "/*" left unclosed on line, or None."""
    for m in _TOKEN_RE.finditer(line):
        if m.lastgroup == "punct" and line.startswith("/*", m.start()):
            return m.start()
    return None


def _balanced(tokens):
    depth = 0
    for kind, value in tokens:
        if kind != "punct":
            continue
        if value in "([{":
            depth += 1
        elif value in ")]}":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def _unescape(literal):
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)),
                          literal[1:-1])


# =============================================================================
# Argument conversion
#
# A single literal token converts directly.  Anything else is a
# symbolic expression (a variable, a bind expression) and resolves
# to the kind's fallback so the statement still yields a command.
# =============================================================================
def _int_arg(tokens):
    values = [v for _k, v in tokens]
    sign = 1
    if len(tokens) == 2 and values[0] in "-+" and tokens[1][0] == "number":
        sign = -1 if values[0] == "-" else 1
        tokens = tokens[1:]
    if len(tokens) == 1 and tokens[0][0] == "number":
        value = tokens[0][1]
        if value[:2] in ("0x", "0X"):
            return sign * int(value[2:], 16)
        return sign * int(value, 10)
    return 0


def _color_arg(tokens):
    return ColorCodec.resolve_color("".join(v for _k, v in tokens))


def _text_arg(tokens):
    if len(tokens) == 1 and tokens[0][0] == "string":
        return _unescape(tokens[0][1])
    return None


def _asset_arg(tokens):
    if len(tokens) == 1 and tokens[0][0] == "ident":
        value = tokens[0][1]
        return None if value in _NULL_ASSETS else value
    return None


_CONVERTERS = {
    "int": _int_arg,
    "color": _color_arg,
    "text": _text_arg,
    "asset": _asset_arg,
}


# =============================================================================
# Statement builders: (args, state) -> ParsedCommand, ParsedBackground
# or None for state-only statements
# =============================================================================
def _rect(kind):
    def build(a, state):
        return ParsedCommand(kind, a[0], a[1], a[2], a[3], a[4])
    return build


def _round_rect(kind):
    def build(a, state):
        return ParsedCommand(kind, a[0], a[1], a[2], a[3], a[5])
    return build


def _circle(kind):
    def build(a, state):
        cx, cy, r = a[0], a[1], a[2]
        return ParsedCommand(kind, cx - r, cy - r, 2 * r, 2 * r, a[3])
    return build


def _ellipse(kind):
    def build(a, state):
        cx, cy, rx, ry = a[0], a[1], a[2], a[3]
        return ParsedCommand(kind, cx - rx, cy - ry, 2 * rx, 2 * ry, a[4])
    return build


def _triangle(kind):
    def build(a, state):
        xs = (a[0], a[2], a[4])
        ys = (a[1], a[3], a[5])
        return ParsedCommand(kind, min(xs), min(ys),
                             max(xs) - min(xs), max(ys) - min(ys), a[6])
    return build


def _line(a, state):
    return ParsedCommand(M.DRAW_LINE, a[0], a[1], a[2] - a[0], a[3] - a[1],
                         a[4])


def _hline(a, state):
    return ParsedCommand(M.DRAW_FAST_HLINE, a[0], a[1], a[2],
                         LINE_THICKNESS, a[3])


def _vline(a, state):
    return ParsedCommand(M.DRAW_FAST_VLINE, a[0], a[1], LINE_THICKNESS,
                         a[2], a[3])


def _pixel(a, state):
    return ParsedCommand(M.DRAW_PIXEL, a[0], a[1], 0, 0, a[2])


def _text(kind):
    def build(a, state):
        text = a[0]
        return ParsedCommand(kind, a[1], a[2], 0, state.text_size,
                             state.text_color, name=text,
                             named=text is not None)
    return build


def _image(a, state):
    return ParsedCommand(M.PUSH_IMAGE, a[0], a[1], a[2], a[3], None,
                         asset=a[4], name=a[4] or M.PUSH_IMAGE,
                         named=False)


def _fill_screen(a, state):
    return ParsedBackground(color=a[0])


def _set_text_color(a, state):
    state.text_color = a[0]


def _set_text_size(a, state):
    state.text_size = a[0] * TEXT_SIZE_STEP


class StatementForm:
    """Argument kinds and builder of one statement keyword."""

    __slots__ = ("keyword", "kinds", "optional", "build")

    def __init__(self, keyword, kinds, build, optional=0):
        """
        Args:
            keyword: Function name in the graphics API.
            kinds: Argument kinds, a subset of _CONVERTERS keys.
            build: Called with the converted arguments and state.
            optional: Number of trailing kinds that may be omitted.
        """
        self.keyword = keyword
        self.kinds = kinds
        self.build = build
        self.optional = optional

    def accepts(self, nargs):
        return len(self.kinds) - self.optional <= nargs <= len(self.kinds)


_I4C = ("int", "int", "int", "int", "color")

STATEMENTS = {f.keyword: f for f in (
    StatementForm("fillScreen", ("color",), _fill_screen),
    StatementForm(M.FILL_RECT, _I4C, _rect(M.FILL_RECT)),
    StatementForm(M.DRAW_RECT, _I4C, _rect(M.DRAW_RECT)),
    StatementForm(M.FILL_ROUND_RECT, ("int",) + _I4C,
                  _round_rect(M.FILL_ROUND_RECT)),
    StatementForm(M.DRAW_ROUND_RECT, ("int",) + _I4C,
                  _round_rect(M.DRAW_ROUND_RECT)),
    StatementForm(M.FILL_CIRCLE, ("int", "int", "int", "color"),
                  _circle(M.FILL_CIRCLE)),
    StatementForm(M.DRAW_CIRCLE, ("int", "int", "int", "color"),
                  _circle(M.DRAW_CIRCLE)),
    StatementForm(M.FILL_ELLIPSE, _I4C, _ellipse(M.FILL_ELLIPSE)),
    StatementForm(M.DRAW_ELLIPSE, _I4C, _ellipse(M.DRAW_ELLIPSE)),
    StatementForm(M.FILL_TRIANGLE, ("int",) * 6 + ("color",),
                  _triangle(M.FILL_TRIANGLE)),
    StatementForm(M.DRAW_TRIANGLE, ("int",) * 6 + ("color",),
                  _triangle(M.DRAW_TRIANGLE)),
    StatementForm(M.DRAW_LINE, _I4C, _line),
    StatementForm(M.DRAW_FAST_HLINE, ("int", "int", "int", "color"), _hline),
    StatementForm(M.DRAW_FAST_VLINE, ("int", "int", "int", "color"), _vline),
    StatementForm(M.DRAW_PIXEL, ("int", "int", "color"), _pixel),
    StatementForm("setTextColor", ("color", "color"), _set_text_color,
                  optional=1),
    StatementForm("setTextSize", ("int",), _set_text_size),
    StatementForm(M.DRAW_STRING, ("text", "int", "int", "int"),
                  _text(M.DRAW_STRING), optional=1),
    StatementForm(M.DRAW_CENTRE_STRING, ("text", "int", "int", "int"),
                  _text(M.DRAW_CENTRE_STRING), optional=1),
    StatementForm(M.PUSH_IMAGE, ("int", "int", "int", "int", "asset"),
                  _image),
)}


# =============================================================================
# Parser
# =============================================================================
class StatementParser:
    """Parse draw function bodies into ParsedBody results.

    A fresh ParserState is used for every body.  Lines that do not
    form a statement of STATEMENTS are appended to self.skipped as
    (line number, line text) and otherwise ignored.
    """

    def __init__(self):
        self.skipped = []

    # ------------------------------------------------------------------
    def parse_screen(self, text, name, occurrence=0):
        """Parse the body of draw_<name> in text.

        Args:
            text: Whole source buffer.
            name: Canonical screen name.
            occurrence: Index of the definition when name is repeated.

        Returns:
            ParsedBody, or None if the function is not defined.
        """
        m = find_function(text, name, occurrence)
        if m is None:
            return None
        first_line = text.count("\n", 0, m.end()) + 1
        return self.parse(extract_body(text, name, occurrence),
                          screen_name=name, first_line=first_line)

    # ------------------------------------------------------------------
    def parse(self, body, screen_name=None, first_line=1):
        """Parse a block of statements.

        Args:
            body: Statement text (a function body or free lines).
            screen_name: Canonical name of the owning screen; enables
                         recognition of its "<name>_bg" image.
            first_line: Line number of the first body line.
        """
        state = ParserState()
        result = ParsedBody()
        in_comment = False
        for lineno, line in enumerate(body.split("\n"), first_line):
            if in_comment:
                end = line.find("*/")
                if end < 0:
                    continue
                line = line[end + 2:]
                in_comment = False
            start = _open_comment(line)
            if start is not None:
                line = line[:start]
                in_comment = True
            stripped = line.strip()
            if not stripped or stripped.startswith("//"):
                continue
            self._parse_line(stripped, lineno, state, result, screen_name)
        return result

    # ------------------------------------------------------------------
    def _parse_line(self, line, lineno, state, result, screen_name):
        tokens = tokenize(line)
        comment = None
        if tokens and tokens[-1][0] == "comment":
            comment = tokens.pop()[1][2:].strip() or None

        statements = [s for s in _split(tokens, ";") if s]
        built = []
        for stmt in statements:
            ok, item = self._build(stmt, state)
            if not ok:
                self.skipped.append((lineno, line))
                logging.debug("Skipped line %d: %s", lineno, line)
                continue
            if item is not None:
                built.append(item)

        for i, item in enumerate(built):
            last = i == len(built) - 1
            if isinstance(item, ParsedBackground):
                if result.background is None:
                    result.background = item
                continue
            # a text literal is the name itself; otherwise the comment
            if last and comment is not None and not (
                    item.type in M.TEXT_TYPES and item.named):
                item.name = comment
                item.named = True
            if item.type == M.PUSH_IMAGE and \
                    self._is_background(item, result, screen_name):
                if result.background is None:
                    result.background = ParsedBackground(
                        asset=item.asset,
                        inline=item.asset == f"{screen_name}_bg")
                continue
            result.commands.append(item)

    # ------------------------------------------------------------------
    @staticmethod
    def _is_background(item, result, screen_name):
        if screen_name is None:
            return False
        if item.asset == f"{screen_name}_bg":
            return True
        # an uncommented blit ahead of every element is the backdrop
        return not item.named and not result.commands \
            and result.background is None

    # ------------------------------------------------------------------
    @staticmethod
    def _build(stmt, state):
        """Return (ok, item) for one statement's tokens."""
        # strip "receiver." / "receiver->" prefixes
        while len(stmt) >= 3 and stmt[0][0] == "ident":
            if stmt[1] == ("punct", "."):
                stmt = stmt[2:]
            elif stmt[1] == ("punct", "-") and stmt[2] == ("punct", ">"):
                stmt = stmt[3:]
            else:
                break
        if len(stmt) < 3 or stmt[0][0] != "ident" \
                or stmt[1] != ("punct", "(") or stmt[-1] != ("punct", ")"):
            return False, None
        form = STATEMENTS.get(stmt[0][1])
        if form is None:
            return False, None

        inner = stmt[2:-1]
        # the opening paren must close at the end of the statement
        if not _balanced(inner):
            return False, None
        args = _split(inner, ",") if inner else []
        if any(not a for a in args) or not form.accepts(len(args)):
            return False, None

        values = [_CONVERTERS[kind](arg)
                  for kind, arg in zip(form.kinds, args)]
        return True, form.build(values, state)


# =============================================================================
# Module-level conveniences
# =============================================================================
def parse_screen(text, name):
    """Parse draw_<name> from text; None if the function is missing."""
    return StatementParser().parse_screen(text, name)


def parse_commands(text):
    """Parse free statements (no background recognition)."""
    return StatementParser().parse(text).commands
