"""Tests for merging parsed code back into the project model."""

import os
import sys
import unittest

_root = os.path.join(os.path.dirname(__file__), "..")
if _root not in sys.path:
    sys.path.insert(0, _root)

from tftsync import ProjectModel as M  # noqa: E402
from tftsync.CodeGenerator import CodeGenerator  # noqa: E402
from tftsync.Reconciler import Reconciler  # noqa: E402


def rect(project, type, name, x=0, y=0, w=10, h=10, color="#ff0000",
         screen=None, **kw):
    screen = screen or project.active_screen
    el = M.Element(project.next_element_id(), type, name, x, y, w, h, color,
                   **kw)
    screen.elements.append(el)
    return el


def replace_line(text, marker, new_line):
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if marker in line:
            if new_line is None:
                del lines[i]
            else:
                lines[i] = new_line
            return "\n".join(lines)
    raise AssertionError(f"{marker!r} not in text")


def insert_in(text, screen_name, line):
    """Insert line as the last statement of draw_<screen_name>."""
    start = text.index(f"void draw_{screen_name}()")
    end = text.index("}\n", start)
    return text[:end] + line + "\n" + text[end:]


class ReconcilerTestCase(unittest.TestCase):

    def setUp(self):
        self.gen = CodeGenerator(receiver="tft", width=240, height=240)
        self.rec = Reconciler(self.gen)
        self.project = M.Project()
        self.main = self.project.add_screen("Main")

    def generate(self):
        return self.gen.generate(self.project)

    def reconcile(self, text):
        return self.rec.reconcile(self.project, text)


class TestRoundTrip(ReconcilerTestCase):

    def test_every_template(self):
        for template in M.SCREEN_TEMPLATES:
            self.project.add_screen(template=template)
        before = self.project.to_dict()
        self.assertFalse(self.reconcile(self.generate()))
        self.assertEqual(self.project.to_dict(), before)

    def test_lossy_statement_forms(self):
        """Geometry a statement cannot express is not reported as a change."""
        rect(self.project, M.FILL_CIRCLE, "Oval", 10, 10, 60, 40)
        rect(self.project, M.DRAW_STRING, "Odd", 5, 5, 0, 20)
        rect(self.project, M.DRAW_CENTRE_STRING, "Wide", 20, 5, 100, 16)
        rect(self.project, M.DRAW_FAST_HLINE, "H", 0, 0, 30, 7)
        rect(self.project, M.DRAW_PIXEL, "P", 3, 3, 9, 9)
        rect(self.project, M.FILL_RECT, "Shade", color="#123456")
        before = self.project.to_dict()
        self.assertFalse(self.reconcile(self.generate()))
        self.assertEqual(self.project.to_dict(), before)

    def test_binds_survive(self):
        rect(self.project, M.FILL_RECT, "Bar", 42, 132, 80, 6,
             w_bind="progress", color_bind="barColor")
        rect(self.project, M.FILL_CIRCLE, "Knob", 0, 30, 40, 40,
             x_bind="knob_x")
        before = self.project.to_dict()
        self.assertFalse(self.reconcile(self.generate()))
        self.assertEqual(self.project.to_dict(), before)

    def test_brace_in_comment_name(self):
        rect(self.project, M.FILL_RECT, "Box}")
        rect(self.project, M.FILL_RECT, "After", 20, 20)
        before = self.project.to_dict()
        self.assertFalse(self.reconcile(self.generate()))
        self.assertEqual(self.project.to_dict(), before)

    def test_braces_in_text_literal(self):
        rect(self.project, M.DRAW_STRING, "{x}", 5, 5, 0, 16)
        rect(self.project, M.FILL_RECT, "Bar", 20, 20)
        before = self.project.to_dict()
        self.assertFalse(self.reconcile(self.generate()))
        self.assertEqual(self.project.to_dict(), before)


class TestElements(ReconcilerTestCase):

    def setUp(self):
        super().setUp()
        self.a = rect(self.project, M.FILL_RECT, "A")
        self.b = rect(self.project, M.DRAW_RECT, "B", 20, 20)

    def ids(self):
        return [el.id for el in self.main.elements]

    def test_reorder_keeps_identity(self):
        text = self.generate()
        line_a = next(l for l in text.split("\n") if "// A" in l)
        line_b = next(l for l in text.split("\n") if "// B" in l)
        text = replace_line(text, "// A", "@@")
        text = replace_line(text, "// B", line_a)
        text = replace_line(text, "@@", line_b)

        self.assertTrue(self.reconcile(text))
        self.assertEqual(self.ids(), [self.b.id, self.a.id])
        self.assertEqual((self.b.x, self.a.x), (20, 0))

    def test_creation(self):
        old_ids = set(self.ids())
        text = insert_in(self.generate(), "Main",
                         "  tft.drawPixel(5,5,TFT_RED); // NewDot")
        self.assertTrue(self.reconcile(text))
        self.assertEqual(len(self.main.elements), 3)
        new = self.main.elements[-1]
        self.assertNotIn(new.id, old_ids)
        self.assertEqual((new.type, new.name, new.x, new.y),
                         (M.DRAW_PIXEL, "NewDot", 5, 5))
        self.assertEqual(new.color, "#ff0000")

    def test_deletion(self):
        self.project.active_element_id = self.a.id
        text = replace_line(self.generate(), "// A", None)
        self.assertTrue(self.reconcile(text))
        self.assertEqual(self.ids(), [self.b.id])
        self.assertIsNone(self.project.active_element_id)

    def test_edit_in_place(self):
        text = replace_line(self.generate(), "// A",
                            "  tft.fillRect(1,2,3,4,TFT_BLUE); // A")
        self.assertTrue(self.reconcile(text))
        self.assertEqual(self.ids(), [self.a.id, self.b.id])
        self.assertEqual((self.a.x, self.a.y, self.a.w, self.a.h),
                         (1, 2, 3, 4))
        self.assertEqual(self.a.color, "#0000ff")

    def test_rename_keeps_identity(self):
        text = replace_line(self.generate(), "// A",
                            "  tft.fillRect(0,0,10,10,0xF800); // Renamed")
        self.assertTrue(self.reconcile(text))
        self.assertEqual(self.a.name, "Renamed")
        self.assertEqual(self.ids(), [self.a.id, self.b.id])

    def test_name_wins_over_position(self):
        c = rect(self.project, M.FILL_RECT, "C", 50, 50)
        text = replace_line(self.generate(), "// A", None)
        self.assertTrue(self.reconcile(text))
        self.assertEqual(self.ids(), [self.b.id, c.id])
        self.assertEqual(c.x, 50)

    def test_type_change_replaces_element(self):
        text = replace_line(self.generate(), "// A",
                            "  tft.drawPixel(0,0,0xF800); // A")
        self.assertTrue(self.reconcile(text))
        self.assertNotIn(self.a.id, self.ids())
        self.assertEqual(self.main.elements[0].type, M.DRAW_PIXEL)

    def test_unnamed_statement_keeps_name(self):
        text = replace_line(self.generate(), "// A",
                            "  tft.fillRect(0,0,10,10,0xF800);")
        self.assertFalse(self.reconcile(text))
        self.assertEqual(self.a.name, "A")

    def test_bound_fields_not_written(self):
        self.a.w_bind = "progress"
        text = replace_line(self.generate(), "// A",
                            "  tft.fillRect(7,0,progress,10,0xF800); // A")
        self.assertTrue(self.reconcile(text))
        self.assertEqual((self.a.x, self.a.w), (7, 10))
        self.assertEqual(self.a.w_bind, "progress")

    def test_idempotent(self):
        text = insert_in(self.generate(), "Main",
                         "  tft.fillCircle(33,33,7,12345); // Odd\n"
                         "  tft.setTextSize(0);\n"
                         '  tft.drawString("tiny",1,1);\n'
                         "  tft.fillTriangle(0,0,9,3,4,11,TFT_GOLD);")
        self.assertTrue(self.reconcile(text))
        after = self.project.to_dict()
        self.assertFalse(self.reconcile(text))
        self.assertEqual(self.project.to_dict(), after)


class TestScreens(ReconcilerTestCase):

    def names(self):
        return [s.name for s in self.project.screens]

    def test_screen_created_from_code(self):
        text = self.generate() + "void draw_Settings(){}\n"
        self.assertTrue(self.reconcile(text))
        self.assertEqual(self.names(), ["Main", "Settings"])
        settings = self.project.screens[1]
        self.assertEqual(settings.elements, [])
        self.assertEqual(self.project.active_screen_id, self.main.id)

        self.project.active_screen_id = settings.id
        self.assertTrue(self.reconcile(self.generate().replace(
            "void draw_Settings() {\n  tft.fillScreen(TFT_BLACK);\n}\n", "")))
        self.assertEqual(self.names(), ["Main"])
        self.assertEqual(self.project.active_screen_id, self.main.id)

    def test_created_at_scan_position(self):
        text = "void draw_First() {\n}\n" + self.generate()
        self.reconcile(text)
        self.assertEqual(self.names(), ["First", "Main"])

    def test_first_created_becomes_active(self):
        self.project = M.Project()
        self.reconcile("void draw_A() {\n}\nvoid draw_B() {\n}\n")
        self.assertEqual(self.names(), ["A", "B"])
        self.assertEqual(self.project.active_screen_id,
                         self.project.screens[0].id)

    def test_reorder_keeps_identity(self):
        other = self.project.add_screen("Other")
        rect(self.project, M.FILL_RECT, "X", screen=other)
        text = self.generate()
        main_src = text[text.index("void draw_Main"):
                        text.index("void draw_Other")]
        text = text.replace(main_src, "") + main_src
        self.assertTrue(self.reconcile(text))
        self.assertEqual([s.id for s in self.project.screens],
                         [other.id, self.main.id])
        self.assertEqual(other.elements[0].name, "X")

    def test_duplicate_names_claim_distinct_screens(self):
        text = ("void draw_Main() {\n  tft.drawPixel(1,1,0); // One\n}\n"
                "void draw_Main() {\n  tft.drawPixel(2,2,0); // Two\n}\n")
        self.assertTrue(self.reconcile(text))
        self.assertEqual(self.names(), ["Main", "Main"])
        self.assertEqual(self.project.screens[0].id, self.main.id)
        self.assertEqual(
            [[e.name for e in s.elements] for s in self.project.screens],
            [["One"], ["Two"]])
        self.assertFalse(self.reconcile(text))

    def test_empty_text_removes_every_screen(self):
        self.assertTrue(self.reconcile(""))
        self.assertEqual(self.project.screens, [])
        self.assertIsNone(self.project.active_screen_id)


class TestBackground(ReconcilerTestCase):

    def test_fill_color(self):
        text = self.generate().replace("fillScreen(TFT_BLACK)",
                                       "fillScreen(TFT_BLUE)")
        self.assertTrue(self.reconcile(text))
        self.assertEqual(self.main.background_color, "#0000ff")
        self.assertFalse(self.reconcile(text))

    def test_asset_image(self):
        self.project.add_asset("splash", "PNG")
        text = self.generate().replace("tft.fillScreen(TFT_BLACK)",
                                       "tft.pushImage(0,0,240,240,splash)")
        self.assertTrue(self.reconcile(text))
        self.assertEqual(self.main.background_asset, "splash")
        self.assertEqual(self.main.background, "PNG")
        self.assertFalse(self.reconcile(text))

    def test_default_background_is_not_a_change(self):
        self.assertFalse(self.reconcile(self.generate()))
        self.assertIsNone(self.main.background_color)


if __name__ == "__main__":
    unittest.main()
