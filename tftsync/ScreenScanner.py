# ScreenScanner - Locate generated draw functions in source text
#
# Every screen owns one function named "draw_<CanonicalName>".  The
# scanner finds those definitions in a whole source buffer; their
# order defines which screens exist and in what order.  Helpers
# here are shared by the statement parser (function bodies) and
# the code generator (preamble and user functions).

import re

__all__ = (
    "GENERATED_PREFIX", "canonical_name", "scan_screen_order",
    "find_function", "extract_body", "first_generated_function",
    "find_user_functions", "match_brace",
)

GENERATED_PREFIX = "draw_"

# "<words> <name>(<params>) {" starting a line; <words> is the return
# type plus any qualifiers ("static", "unsigned long", "void").
_DEF_HEAD = r"^[ \t]*((?:[A-Za-z_][\w:<>*&]*[ \t]+)+)\**"
_DEF_TAIL = r"[ \t]*\([^)]*\)\s*\{"

_GENERATED_DEF_RE = re.compile(
    _DEF_HEAD + GENERATED_PREFIX + r"([A-Za-z0-9_]+)" + _DEF_TAIL,
    re.MULTILINE | re.ASCII)
_ANY_DEF_RE = re.compile(
    _DEF_HEAD + r"([A-Za-z_]\w*)" + _DEF_TAIL,
    re.MULTILINE | re.ASCII)

# Control statements look like definitions to the patterns above
_KEYWORDS = frozenset((
    "if", "else", "for", "while", "do", "switch", "catch",
    "return", "sizeof",
))

_WS_RE = re.compile(r"\s+")
_NON_IDENT_RE = re.compile(r"[^A-Za-z0-9_]")


def canonical_name(name):
    """Map a screen display name to the identifier used in its function.

    Whitespace runs become "_", anything outside [A-Za-z0-9_] is
    dropped; an empty result falls back to "Screen".
    """
    if not name:
        return "Screen"
    clean = _NON_IDENT_RE.sub("", _WS_RE.sub("_", name))
    return clean or "Screen"


def scan_screen_order(text):
    """Return canonical names of all generated functions, in source order."""
    return [m.group(2) for m in _GENERATED_DEF_RE.finditer(text or "")]


def first_generated_function(text):
    """Return the offset of the first generated definition, or None."""
    m = _GENERATED_DEF_RE.search(text or "")
    return m.start() if m else None


def find_function(text, name, occurrence=0):
    """Return the match of a "draw_<name>(...) {" definition.

    Args:
        occurrence: Which definition to return when the name is
                    defined more than once (0 = first).
    """
    pattern = re.compile(
        _DEF_HEAD + GENERATED_PREFIX + re.escape(name) + _DEF_TAIL,
        re.MULTILINE | re.ASCII)
    for i, m in enumerate(pattern.finditer(text or "")):
        if i == occurrence:
            return m
    return None


def extract_body(text, name, occurrence=0):
    """Return the text between "{" and the first "}" of draw_<name>.

    Generated bodies hold straight-line statements only, so the first
    closing brace outside literals and comments ends the body.
    Returns None if there is no such function; an unterminated body
    runs to the end of the text.
    """
    m = find_function(text, name, occurrence)
    if m is None:
        return None
    end = _scan(text, m.end(), nested=False)
    if end is None:
        return text[m.end():]
    return text[m.end():end - 1]


def match_brace(text, open_pos):
    """Return the offset just past the brace closing the one at open_pos.

    String and character literals and comments are skipped.  An
    unbalanced block extends to the end of the text.
    """
    end = _scan(text, open_pos, nested=True)
    return len(text) if end is None else end


def _scan(text, pos, nested):
    """Return the offset just past the closing "}" found from pos.

    With nested, braces are counted from the "{" at pos; otherwise
    the first "}" closes.  Literals and comments are skipped.
    Returns None if the text ends first.
    """
    depth = 0
    i = pos
    n = len(text)
    while i < n:
        c = text[i]
        if c == "{" and nested:
            depth += 1
        elif c == "}":
            depth -= 1
            if depth <= 0:
                return i + 1
        elif c in "\"'":
            i += 1
            while i < n and text[i] not in (c, "\n"):
                if text[i] == "\\":
                    i += 1
                i += 1
        elif text.startswith("//", i):
            i = text.find("\n", i)
            if i < 0:
                return None
        elif text.startswith("/*", i):
            i = text.find("*/", i + 2)
            if i < 0:
                return None
            i += 1
        i += 1
    return None


def find_user_functions(text, start=0):
    """Return the source of every non-generated function after start.

    Only top-level definitions are considered: the body of each
    function found (generated or not) is skipped as a whole.
    """
    functions = []
    pos = start
    while True:
        m = _ANY_DEF_RE.search(text, pos)
        if m is None:
            break
        end = match_brace(text, m.end() - 1)
        name = m.group(2)
        if name in _KEYWORDS or name.startswith(GENERATED_PREFIX):
            pos = end
            continue
        functions.append(text[m.start():end].strip("\n"))
        pos = end
    return functions
