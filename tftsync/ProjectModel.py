# ProjectModel - Screens, elements and assets of a display project
#
# Plain in-memory model shared by the UI actions and the code
# reconciler.  Ids are integers handed out by the Project's
# sequences and are never reused, so an element keeps its id across
# reorders, edits and text round trips.

import copy

from .ScreenScanner import canonical_name

# Element types (the keyword of the statement that draws them)
FILL_RECT = "fillRect"
DRAW_RECT = "drawRect"
FILL_ROUND_RECT = "fillRoundRect"
DRAW_ROUND_RECT = "drawRoundRect"
FILL_CIRCLE = "fillCircle"
DRAW_CIRCLE = "drawCircle"
FILL_ELLIPSE = "fillEllipse"
DRAW_ELLIPSE = "drawEllipse"
FILL_TRIANGLE = "fillTriangle"
DRAW_TRIANGLE = "drawTriangle"
DRAW_LINE = "drawLine"
DRAW_FAST_HLINE = "drawFastHLine"
DRAW_FAST_VLINE = "drawFastVLine"
DRAW_PIXEL = "drawPixel"
DRAW_STRING = "drawString"
DRAW_CENTRE_STRING = "drawCentreString"
PUSH_IMAGE = "pushImage"

ELEMENT_TYPES = (
    FILL_RECT, DRAW_RECT, FILL_ROUND_RECT, DRAW_ROUND_RECT,
    FILL_CIRCLE, DRAW_CIRCLE, FILL_ELLIPSE, DRAW_ELLIPSE,
    FILL_TRIANGLE, DRAW_TRIANGLE, DRAW_LINE,
    DRAW_FAST_HLINE, DRAW_FAST_VLINE, DRAW_PIXEL,
    DRAW_STRING, DRAW_CENTRE_STRING, PUSH_IMAGE,
)
TEXT_TYPES = (DRAW_STRING, DRAW_CENTRE_STRING)

GEOMETRY_FIELDS = ("x", "y", "w", "h")
BIND_FIELDS = ("x_bind", "y_bind", "w_bind", "h_bind",
               "color_bind", "value_bind")

# Properties a UI panel may set on an element
ELEMENT_PROPERTIES = ("name", "type", "color", "asset") \
    + GEOMETRY_FIELDS + BIND_FIELDS
SCREEN_PROPERTIES = ("name", "background", "background_asset",
                     "background_color")

NEW_ELEMENT_COLOR = "#38bdf8"

# Starting content for screens created from the UI
SCREEN_TEMPLATES = {
    "dashboard": [
        dict(type=FILL_RECT, name="Header", x=0, y=0, w=240, h=30,
             color="#1e293b"),
        dict(type=DRAW_CENTRE_STRING, name="CPU: 45%", x=120, y=8, w=0,
             h=16, color="#38bdf8", value_bind="cpu_usage"),
        dict(type=FILL_CIRCLE, name="Status_OK", x=190, y=15, w=10, h=10,
             color="#4ade80"),
        dict(type=FILL_RECT, name="ChartArea", x=20, y=60, w=200, h=120,
             color="#0f172a"),
        dict(type=DRAW_LINE, name="GraphLine", x=20, y=180, w=200, h=-80,
             color="#38bdf8"),
    ],
    "menu": [
        dict(type=DRAW_CENTRE_STRING, name="MAIN MENU", x=120, y=20, w=0,
             h=16, color="#f8fafc"),
        dict(type=FILL_ROUND_RECT, name="Opt_1", x=40, y=60, w=160, h=35,
             color="#334155"),
        dict(type=DRAW_STRING, name="Settings", x=60, y=70, w=0, h=16,
             color="#ffffff"),
        dict(type=FILL_ROUND_RECT, name="Opt_2", x=40, y=105, w=160, h=35,
             color="#334155"),
        dict(type=DRAW_STRING, name="Sensors", x=60, y=115, w=0, h=16,
             color="#ffffff"),
        dict(type=FILL_ROUND_RECT, name="Opt_3", x=40, y=150, w=160, h=35,
             color="#334155"),
        dict(type=DRAW_STRING, name="Exit", x=60, y=160, w=0, h=16,
             color="#ffffff"),
    ],
    "loading": [
        dict(type=DRAW_CENTRE_STRING, name="LOADING...", x=120, y=100, w=0,
             h=16, color="#38bdf8"),
        dict(type=DRAW_RECT, name="ProgressBorder", x=40, y=130, w=160,
             h=10, color="#475569"),
        dict(type=FILL_RECT, name="ProgressBar", x=42, y=132, w=80, h=6,
             color="#38bdf8", w_bind="loading_progress"),
    ],
    "clock": [
        dict(type=DRAW_CIRCLE, name="ClockFace", x=20, y=20, w=200, h=200,
             color="#1e293b"),
        dict(type=DRAW_CENTRE_STRING, name="12:45", x=120, y=90, w=0,
             h=16, color="#ffffff", value_bind="current_time"),
        dict(type=DRAW_CENTRE_STRING, name="Wed, 25 Feb", x=120, y=140,
             w=0, h=16, color="#475569", value_bind="current_date"),
    ],
    "others": [
        dict(type=FILL_TRIANGLE, name="Decor_1", x=20, y=20, w=100, h=100,
             color="#6366f1"),
        dict(type=FILL_ELLIPSE, name="Decor_2", x=120, y=120, w=80, h=40,
             color="#a855f7"),
        dict(type=DRAW_PIXEL, name="Star", x=200, y=50, w=0, h=0,
             color="#fbbf24"),
    ],
}


class Element:
    """One drawing primitive on a screen."""

    __slots__ = ("id", "type", "name", "x", "y", "w", "h", "color",
                 "asset") + BIND_FIELDS

    def __init__(self, id, type=FILL_RECT, name="", x=0, y=0, w=0, h=0,
                 color="#ffffff", asset=None, x_bind=None, y_bind=None,
                 w_bind=None, h_bind=None, color_bind=None,
                 value_bind=None):
        """
        Args:
            id: Stable integer id, unique within the project.
            type: One of ELEMENT_TYPES.
            name: Display name; also the literal text of text elements.
            x, y, w, h: Bounding box in display pixels.
            color: "#rrggbb".
            asset: Asset name drawn by pushImage elements.
            *_bind: Source expressions substituted for the literal
                    value in generated code (empty = use the literal).
        """
        self.id = id
        self.type = type
        self.name = name
        self.x = x
        self.y = y
        self.w = w
        self.h = h
        self.color = color
        self.asset = asset
        self.x_bind = x_bind
        self.y_bind = y_bind
        self.w_bind = w_bind
        self.h_bind = h_bind
        self.color_bind = color_bind
        self.value_bind = value_bind

    def bind(self, field):
        """Return the bind expression for a geometry/color field, or None."""
        value = getattr(self, f"{field}_bind")
        return value if value else None

    def has_binds(self):
        return any(getattr(self, f) for f in BIND_FIELDS)

    def to_dict(self):
        return {slot: getattr(self, slot) for slot in self.__slots__}

    @classmethod
    def from_dict(cls, data):
        kwargs = {k: v for k, v in data.items() if k in cls.__slots__}
        return cls(**kwargs)

    def __repr__(self):
        return (f"Element({self.id}, {self.type!r}, {self.name!r}, "
                f"{self.x}, {self.y}, {self.w}, {self.h}, {self.color!r})")


class Screen:
    """A named screen: background plus an ordered list of elements.

    Element order is both paint order and statement order in the
    generated draw function.
    """

    __slots__ = ("id", "name", "elements", "background",
                 "background_asset", "background_color")

    def __init__(self, id, name="Screen", elements=None, background=None,
                 background_asset=None, background_color=None):
        self.id = id
        self.name = name
        self.elements = list(elements) if elements else []
        self.background = background
        self.background_asset = background_asset
        self.background_color = background_color

    @property
    def canonical_name(self):
        return canonical_name(self.name)

    def element(self, element_id):
        for el in self.elements:
            if el.id == element_id:
                return el
        return None

    def element_index(self):
        """Return {element id: position} for the current element order."""
        return {el.id: i for i, el in enumerate(self.elements)}

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "elements": [el.to_dict() for el in self.elements],
            "background": self.background,
            "background_asset": self.background_asset,
            "background_color": self.background_color,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            data["id"],
            data.get("name", "Screen"),
            [Element.from_dict(e) for e in data.get("elements", [])],
            data.get("background"),
            data.get("background_asset"),
            data.get("background_color"),
        )

    def __repr__(self):
        return f"Screen({self.id}, {self.name!r}, {len(self.elements)} elements)"


class Asset:
    """A named image; the payload is opaque to this package."""

    __slots__ = ("name", "data")

    def __init__(self, name, data=None):
        self.name = name
        self.data = data

    def to_dict(self):
        return {"name": self.name, "data": self.data}


class Project:
    """Ordered screens, assets and the active screen/element pointers."""

    def __init__(self):
        self.screens = []
        self.assets = []
        self.active_screen_id = None
        self.active_element_id = None
        self.screen_seq = 1
        self.element_seq = 1

    # ------------------------------------------------------------------
    # Ids
    # ------------------------------------------------------------------
    def next_screen_id(self):
        sid = self.screen_seq
        self.screen_seq += 1
        return sid

    def next_element_id(self):
        eid = self.element_seq
        self.element_seq += 1
        return eid

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    @property
    def active_screen(self):
        return self.screen(self.active_screen_id)

    def screen(self, screen_id):
        if screen_id is None:
            return None
        for screen in self.screens:
            if screen.id == screen_id:
                return screen
        return None

    def screen_index(self, screen_id):
        for i, screen in enumerate(self.screens):
            if screen.id == screen_id:
                return i
        return -1

    def find_element(self, element_id):
        """Return (screen, element) for an element id, or (None, None)."""
        for screen in self.screens:
            el = screen.element(element_id)
            if el is not None:
                return screen, el
        return None, None

    def asset(self, name):
        for asset in self.assets:
            if asset.name == name:
                return asset
        return None

    # ------------------------------------------------------------------
    # Screens
    # ------------------------------------------------------------------
    def add_screen(self, name=None, template=None):
        """Append a new screen and make it active.

        Args:
            name: Display name; defaults to "<Template>_<n>".
            template: Optional key of SCREEN_TEMPLATES to seed elements.

        Returns:
            The new Screen.
        """
        if name is None:
            prefix = template.capitalize() if template else "Screen"
            name = f"{prefix}_{len(self.screens) + 1}"
        screen = Screen(self.next_screen_id(), name)
        for fields in SCREEN_TEMPLATES.get(template, ()):
            screen.elements.append(
                Element(self.next_element_id(), **copy.deepcopy(fields)))
        self.screens.append(screen)
        self.active_screen_id = screen.id
        return screen

    def delete_screen(self, screen_id):
        """Remove a screen, retargeting the active pointer if needed."""
        idx = self.screen_index(screen_id)
        if idx < 0:
            return False
        screen = self.screens.pop(idx)
        if self.active_screen_id == screen_id:
            self.active_screen_id = self.screens[0].id if self.screens else None
        if self.active_element_id is not None and \
                screen.element(self.active_element_id) is not None:
            self.active_element_id = None
        return True

    def move_screen(self, screen_id, new_index):
        """Move a screen to new_index (clamped).  Returns True if moved."""
        idx = self.screen_index(screen_id)
        if idx < 0:
            return False
        screen = self.screens.pop(idx)
        target = max(0, min(new_index, len(self.screens)))
        self.screens.insert(target, screen)
        return target != idx

    def set_screen_property(self, screen_id, prop, value):
        screen = self.screen(screen_id)
        if screen is None or prop not in SCREEN_PROPERTIES:
            return False
        if getattr(screen, prop) == value:
            return False
        setattr(screen, prop, value)
        if prop == "background_asset":
            asset = self.asset(value)
            screen.background = asset.data if asset is not None else None
        return True

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------
    def add_element(self, type, asset=None, screen_id=None):
        """Append a new element to a screen (default: the active one).

        Placement follows the editor convention: each new element is
        offset by 5 pixels from the previous one.
        """
        screen = self.screen(screen_id) if screen_id is not None \
            else self.active_screen
        if screen is None:
            return None
        n = len(screen.elements)
        round_shape = type in (FILL_CIRCLE, DRAW_CIRCLE)
        el = Element(
            self.next_element_id(),
            type=type,
            name=f"{type}_{n + 1}",
            x=10 + n * 5,
            y=10 + n * 5,
            w=60 if round_shape else 80,
            h=60 if round_shape else 40,
            color=NEW_ELEMENT_COLOR,
            asset=asset,
        )
        screen.elements.append(el)
        self.active_element_id = el.id
        return el

    def delete_element(self, element_id):
        screen, el = self.find_element(element_id)
        if el is None:
            return False
        screen.elements.remove(el)
        if self.active_element_id == element_id:
            self.active_element_id = None
        return True

    def move_element(self, element_id, new_index):
        """Move an element within its screen (clamped).  True if moved."""
        screen, el = self.find_element(element_id)
        if el is None:
            return False
        idx = screen.elements.index(el)
        screen.elements.pop(idx)
        target = max(0, min(new_index, len(screen.elements)))
        screen.elements.insert(target, el)
        return target != idx

    def set_element_property(self, element_id, prop, value):
        _screen, el = self.find_element(element_id)
        if el is None or prop not in ELEMENT_PROPERTIES:
            return False
        if prop in GEOMETRY_FIELDS:
            value = int(value)
        if getattr(el, prop) == value:
            return False
        setattr(el, prop, value)
        return True

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------
    def add_asset(self, name, data=None):
        """Add an asset, replacing the payload of one with the same name."""
        asset = self.asset(name)
        if asset is None:
            asset = Asset(name, data)
            self.assets.append(asset)
        else:
            asset.data = data
        return asset

    def delete_asset(self, name):
        """Remove an asset and clear every reference to it."""
        asset = self.asset(name)
        if asset is None:
            return False
        self.assets.remove(asset)
        for screen in self.screens:
            if screen.background_asset == name:
                screen.background_asset = None
                screen.background = None
            for el in screen.elements:
                if el.asset == name:
                    el.asset = None
        return True

    # ------------------------------------------------------------------
    # Serialisation (for the persistence collaborator)
    # ------------------------------------------------------------------
    def to_dict(self):
        return {
            "screens": [s.to_dict() for s in self.screens],
            "assets": [a.to_dict() for a in self.assets],
            "active_screen_id": self.active_screen_id,
            "active_element_id": self.active_element_id,
            "screen_seq": self.screen_seq,
            "element_seq": self.element_seq,
        }

    @classmethod
    def from_dict(cls, data):
        project = cls()
        if not data:
            return project
        project.screens = [Screen.from_dict(s) for s in data.get("screens", [])]
        project.assets = [Asset(a["name"], a.get("data"))
                          for a in data.get("assets", [])]
        project.active_screen_id = data.get("active_screen_id")
        project.active_element_id = data.get("active_element_id")
        # Sequences must stay ahead of every id already handed out
        max_sid = max((s.id for s in project.screens), default=0)
        max_eid = max((e.id for s in project.screens for e in s.elements),
                      default=0)
        project.screen_seq = max(data.get("screen_seq", 1), max_sid + 1)
        project.element_seq = max(data.get("element_seq", 1), max_eid + 1)
        return project
