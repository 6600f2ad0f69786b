# Reconciler - Merge parsed source text into the live Project
#
# Screens are matched to "draw_<Name>" functions by canonical name,
# elements to statements by type and name.  Matched entities keep
# their ids; only fields that actually differ are written, so a pass
# over text generated from the model itself reports no change.

import logging

from . import ProjectModel as M
from .CodeGenerator import CodeGenerator
from .ColorCodec import DEFAULT_COLOR, same_color
from .ScreenScanner import scan_screen_order
from .StatementParser import StatementParser, parse_commands

__all__ = ("Reconciler", "reconcile")

# Geometry fields a statement form carries; the others are derived
# (line thickness, text width) and left as the model has them.
_CARRIED = {
    M.DRAW_FAST_HLINE: ("x", "y", "w"),
    M.DRAW_FAST_VLINE: ("x", "y", "h"),
    M.DRAW_PIXEL: ("x", "y"),
    M.DRAW_STRING: ("x", "y", "h"),
}


class Reconciler:
    """Bring a Project in line with a source buffer.

    Args:
        generator: CodeGenerator used to project elements back to the
                   statements they generate.
    """

    def __init__(self, generator=None):
        self.generator = generator or CodeGenerator()
        self.parser = StatementParser()

    # ------------------------------------------------------------------
    def reconcile(self, project, text):
        """Apply text to project in place.

        Returns:
            True if anything in the project changed.
        """
        text = text or ""
        self.parser = StatementParser()
        changed = self.reconcile_screens(project, scan_screen_order(text))

        # repeated names map to successive definitions
        seen = {}
        for screen in project.screens:
            name = screen.canonical_name
            occurrence = seen.get(name, 0)
            seen[name] = occurrence + 1
            body = self.parser.parse_screen(text, name, occurrence)
            if body is None:
                continue
            if self.reconcile_background(project, screen, body.background):
                changed = True
            if self.reconcile_elements(project, screen, body.commands):
                changed = True
        return changed

    # ------------------------------------------------------------------
    # Screens
    # ------------------------------------------------------------------
    def reconcile_screens(self, project, names):
        """Order, create and delete screens to follow names."""
        changed = False
        claimed = set()
        inserted = False
        for i, name in enumerate(names):
            screen = None
            for s in project.screens:
                if s.id not in claimed and s.canonical_name == name:
                    screen = s
                    break
            if screen is None:
                screen = M.Screen(project.next_screen_id(), name)
                project.screens.insert(i, screen)
                logging.info("Screen %r created from code", name)
                if not inserted and project.active_screen_id is None:
                    project.active_screen_id = screen.id
                inserted = True
                changed = True
            else:
                idx = project.screens.index(screen)
                if idx != i:
                    project.screens.insert(i, project.screens.pop(idx))
                    changed = True
            claimed.add(screen.id)

        for screen in [s for s in project.screens if s.id not in claimed]:
            project.delete_screen(screen.id)
            logging.info("Screen %r removed from code", screen.name)
            changed = True

        if project.active_screen is None:
            first = project.screens[0].id if project.screens else None
            if project.active_screen_id != first:
                project.active_screen_id = first
                changed = True
        return changed

    # ------------------------------------------------------------------
    # Background
    # ------------------------------------------------------------------
    def reconcile_background(self, project, screen, background):
        """Apply a parsed background statement.  True if changed."""
        if background is None:
            return False
        current = self.parser.parse(
            self.generator.emit_background(screen),
            screen_name=screen.canonical_name).background

        if background.color is not None:
            if current is not None and current.color is not None and \
                    same_color(current.color, background.color):
                return False
            screen.background = None
            screen.background_asset = None
            screen.background_color = background.color
            return True

        # image backgrounds; an inline image cannot be rebuilt from text
        if background.inline or (current is not None and
                                 current.asset == background.asset):
            return False
        asset = project.asset(background.asset)
        screen.background_asset = background.asset
        screen.background = asset.data if asset is not None else None
        return True

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------
    def reconcile_elements(self, project, screen, commands):
        """Match, update, create, delete and reorder a screen's elements."""
        changed = False
        used = set()
        order = []
        for cmd in commands:
            el = self._match(screen.elements, used, cmd)
            if el is None:
                el = M.Element(
                    project.next_element_id(),
                    type=cmd.type,
                    name=cmd.name,
                    x=cmd.x, y=cmd.y, w=cmd.w, h=cmd.h,
                    color=cmd.color or DEFAULT_COLOR,
                    asset=cmd.asset)
                changed = True
            elif self.merge(el, cmd):
                changed = True
            used.add(el.id)
            order.append(el)

        for el in screen.elements:
            if el.id not in used:
                changed = True
                if project.active_element_id == el.id:
                    project.active_element_id = None

        if [el.id for el in screen.elements] != [el.id for el in order]:
            changed = True
        screen.elements = order
        return changed

    @staticmethod
    def _match(elements, used, cmd):
        for el in elements:
            if el.id not in used and el.type == cmd.type and \
                    (not cmd.named or el.name == cmd.name):
                return el
        if cmd.named:
            for el in elements:
                if el.id not in used and el.type == cmd.type:
                    return el
        return None

    # ------------------------------------------------------------------
    def projection(self, el):
        """Return the command el's own generated statement parses to."""
        commands = parse_commands(self.generator.emit_element(el))
        return commands[0] if commands else None

    def merge(self, el, cmd):
        """Overwrite the fields of el that cmd says differ.

        Fields are compared through el's projection, so values the
        statement form cannot express (a circle's unequal sides, a
        color's low bits, a bound operand) do not count as changes.
        Bound fields are never written.

        Returns:
            True if el was modified.
        """
        proj = self.projection(el)
        changed = False

        if proj is None or proj.geometry() != cmd.geometry():
            for field in _CARRIED.get(cmd.type, M.GEOMETRY_FIELDS):
                if el.bind(field):
                    continue
                value = getattr(cmd, field)
                if getattr(el, field) != value:
                    setattr(el, field, value)
                    changed = True

        if cmd.color is not None and not el.color_bind and \
                (proj is None or not same_color(proj.color, cmd.color)):
            if el.color != cmd.color:
                el.color = cmd.color
                changed = True

        if cmd.named and (proj is None or proj.name != cmd.name) and \
                el.name != cmd.name:
            el.name = cmd.name
            changed = True

        if cmd.type == M.PUSH_IMAGE and el.asset != cmd.asset:
            el.asset = cmd.asset
            changed = True
        return changed


# -----------------------------------------------------------------------------
def reconcile(project, text):
    """Reconcile project against text with a default Reconciler."""
    return Reconciler().reconcile(project, text)
