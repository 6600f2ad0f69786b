"""Tests for the drawing statement parser."""

import os
import sys
import unittest

_root = os.path.join(os.path.dirname(__file__), "..")
if _root not in sys.path:
    sys.path.insert(0, _root)

from tftsync import ProjectModel as M  # noqa: E402
from tftsync.ColorCodec import same_color  # noqa: E402
from tftsync.StatementParser import (  # noqa: E402
    DEFAULT_TEXT_SIZE,
    STATEMENTS,
    StatementParser,
    parse_commands,
    parse_screen,
    tokenize,
)


def one(text):
    commands = parse_commands(text)
    assert len(commands) == 1, commands
    return commands[0]


class TestTokenize(unittest.TestCase):

    def test_kinds(self):
        tokens = tokenize('tft.drawString("a,b", 0x1F, 12); // Name')
        kinds = [k for k, _v in tokens]
        self.assertEqual(kinds[0], "ident")
        self.assertIn("string", kinds)
        self.assertEqual(tokens[-1], ("comment", "// Name"))
        self.assertIn(("number", "0x1F"), tokens)

    def test_comment_marker_inside_string(self):
        tokens = tokenize('tft.drawString("http://x",1,2);')
        self.assertNotIn("comment", [k for k, _v in tokens])

    def test_block_comments_dropped(self):
        tokens = tokenize("fillRect(/* x */ 1,2,3,4,5);")
        self.assertEqual(tokens[2], ("number", "1"))


class TestStatementForms(unittest.TestCase):
    """Each statement form yields its bounding box."""

    def test_table_covers_every_element_type(self):
        for type in M.ELEMENT_TYPES:
            self.assertIn(type, STATEMENTS)

    def test_rect(self):
        cmd = one("tft.fillRect(0,0,240,30,0x1947); // Header")
        self.assertEqual(cmd.type, M.FILL_RECT)
        self.assertEqual(cmd.geometry(), (0, 0, 240, 30))
        self.assertTrue(same_color(cmd.color, "#1e293b"))
        self.assertEqual(cmd.name, "Header")
        self.assertTrue(cmd.named)

    def test_round_rect_ignores_radius(self):
        cmd = one("tft.drawRoundRect(40,60,160,35,9,TFT_WHITE); // Opt")
        self.assertEqual(cmd.geometry(), (40, 60, 160, 35))
        self.assertEqual(cmd.color, "#ffffff")

    def test_circle(self):
        cmd = one("tft.fillCircle(100,50,20,TFT_RED); // Dot")
        self.assertEqual(cmd.geometry(), (80, 30, 40, 40))
        self.assertEqual(cmd.color, "#ff0000")

    def test_ellipse(self):
        cmd = one("tft.fillEllipse(160,140,40,20,TFT_BLUE); // E")
        self.assertEqual(cmd.geometry(), (120, 120, 80, 40))

    def test_triangle_bounding_box(self):
        cmd = one("tft.fillTriangle(70,20,20,120,120,120,TFT_RED); // T")
        self.assertEqual(cmd.geometry(), (20, 20, 100, 100))

    def test_line_keeps_direction(self):
        cmd = one("tft.drawLine(20,180,220,100,TFT_RED); // L")
        self.assertEqual(cmd.geometry(), (20, 180, 200, -80))

    def test_negative_literals(self):
        cmd = one("tft.drawLine(-5,10,5,-10,TFT_WHITE);")
        self.assertEqual(cmd.geometry(), (-5, 10, 10, -20))

    def test_fast_lines(self):
        h = one("tft.drawFastHLine(10,20,100,TFT_RED); // H")
        v = one("tft.drawFastVLine(10,20,50,TFT_RED); // V")
        self.assertEqual(h.geometry(), (10, 20, 100, 2))
        self.assertEqual(v.geometry(), (10, 20, 2, 50))

    def test_pixel(self):
        cmd = one("tft.drawPixel(200,50,0xFFE0); // Star")
        self.assertEqual(cmd.geometry(), (200, 50, 0, 0))
        self.assertEqual(cmd.color, "#ffff00")

    def test_image(self):
        cmd = one("tft.pushImage(10,20,32,32,logo); // Logo")
        self.assertEqual(cmd.type, M.PUSH_IMAGE)
        self.assertEqual(cmd.asset, "logo")
        self.assertEqual(cmd.name, "Logo")

    def test_null_image(self):
        self.assertIsNone(one("tft.pushImage(0,0,8,8,nullptr); // I").asset)

    def test_other_receivers(self):
        self.assertEqual(one("display->drawPixel(1,2,0);").geometry(),
                         (1, 2, 0, 0))
        self.assertEqual(one("drawPixel(1,2,0);").geometry(), (1, 2, 0, 0))


class TestTextState(unittest.TestCase):

    def test_defaults(self):
        cmd = one('tft.drawString("A",1,2);')
        self.assertEqual(cmd.color, "#ffffff")
        self.assertEqual(cmd.h, DEFAULT_TEXT_SIZE)

    def test_state_applies_to_following_text(self):
        cmd = one('tft.setTextColor(0xF800); tft.setTextSize(3);\n'
                  'tft.drawString("Hi",10,20); // Hi')
        self.assertEqual(cmd.color, "#ff0000")
        self.assertEqual(cmd.geometry(), (10, 20, 0, 24))

    def test_state_statements_emit_nothing(self):
        self.assertEqual(parse_commands("tft.setTextSize(2);"), [])

    def test_background_color_argument_accepted(self):
        cmd = one('tft.setTextColor(TFT_GREEN, TFT_BLACK);\n'
                  'tft.drawString("A",1,2);')
        self.assertEqual(cmd.color, "#00ff00")

    def test_state_is_reset_per_body(self):
        parser = StatementParser()
        parser.parse("tft.setTextSize(4);")
        cmd = parser.parse('tft.drawString("A",1,2);')[0]
        self.assertEqual(cmd.h, DEFAULT_TEXT_SIZE)

    def test_literal_is_the_name(self):
        cmd = one('tft.drawString("Hi",1,2); // Other')
        self.assertEqual(cmd.name, "Hi")

    def test_escapes(self):
        cmd = one(r'tft.drawString("say \"hi\"",1,2);')
        self.assertEqual(cmd.name, 'say "hi"')

    def test_bound_text_named_by_comment(self):
        cmd = one("tft.drawCentreString(String(cpu).c_str(),120,8,2); // CPU")
        self.assertEqual(cmd.type, M.DRAW_CENTRE_STRING)
        self.assertEqual(cmd.name, "CPU")
        self.assertEqual((cmd.x, cmd.y), (120, 8))


class TestNamesAndSymbols(unittest.TestCase):

    def test_default_name(self):
        cmd = one("tft.fillRect(1,2,3,4,TFT_RED);")
        self.assertEqual(cmd.name, M.FILL_RECT)
        self.assertFalse(cmd.named)

    def test_comment_names_last_statement(self):
        commands = parse_commands(
            "tft.fillRect(0,0,1,1,0); tft.drawRect(0,0,2,2,0); // Frame")
        self.assertEqual([c.name for c in commands],
                         [M.FILL_RECT, "Frame"])

    def test_symbolic_arguments(self):
        cmd = one("tft.fillRect(x0, 10, barWidth(), 20, myColor); // Box")
        self.assertEqual(cmd.geometry(), (0, 10, 0, 20))
        self.assertEqual(cmd.color, "#ffffff")
        self.assertEqual(cmd.name, "Box")


class TestSkippedLines(unittest.TestCase):

    def test_unrecognised_lines_are_recorded(self):
        parser = StatementParser()
        body = parser.parse(
            "tft.fillRect(1,2,3,4,TFT_RED); // A\n"
            "foo(1);\n"
            "tft.fillRect(1,2,3);\n"
            "tft.fillRect(1,2,3,4,5\n"
            "int a = 5;\n")
        self.assertEqual(len(body), 1)
        self.assertEqual([n for n, _line in parser.skipped], [2, 3, 4, 5])

    def test_line_numbers_follow_source(self):
        parser = StatementParser()
        parser.parse_screen("// top\nvoid draw_A() {\n  bogus;\n}\n", "A")
        self.assertEqual(parser.skipped, [(3, "bogus;")])

    def test_commented_lines_are_not_recorded(self):
        parser = StatementParser()
        body = parser.parse("// tft.fillRect(1,2,3,4,0); // Old\n\n")
        self.assertEqual(len(body), 0)
        self.assertEqual(parser.skipped, [])

    def test_block_comment_across_lines(self):
        parser = StatementParser()
        body = parser.parse(
            "tft.drawPixel(1,1,0); /* start\n"
            "tft.fillRect(1,2,3,4,0); // Old\n"
            "still old */ tft.drawPixel(2,2,0); // After\n"
            "tft.drawPixel(3,3,0); // Live\n")
        self.assertEqual([c.name for c in body],
                         ["drawPixel", "After", "Live"])
        self.assertEqual(parser.skipped, [])

    def test_unclosed_block_comment(self):
        parser = StatementParser()
        body = parser.parse("/*\ntft.drawPixel(1,1,0); // Old\n")
        self.assertEqual(len(body), 0)
        self.assertEqual(parser.skipped, [])

    def test_unbalanced_arguments(self):
        parser = StatementParser()
        parser.parse("tft.drawPixel(1,2)(3);")
        self.assertEqual(len(parser.skipped), 1)


class TestParseScreen(unittest.TestCase):

    def test_missing_function(self):
        self.assertIsNone(parse_screen("void draw_A() {\n}\n", "B"))

    def test_fill_background(self):
        body = parse_screen(
            "void draw_Main() {\n"
            "  tft.fillScreen(TFT_BLUE);\n"
            "  tft.fillRect(0,0,1,1,TFT_RED); // A\n"
            "}\n", "Main")
        self.assertEqual(body.background.color, "#0000ff")
        self.assertEqual([c.name for c in body], ["A"])

    def test_inline_background_image(self):
        body = parse_screen(
            "void draw_Main() {\n"
            "  tft.pushImage(0,0,240,240,Main_bg);\n"
            "}\n", "Main")
        self.assertTrue(body.background.inline)
        self.assertEqual(len(body), 0)

    def test_asset_background_image(self):
        body = parse_screen(
            "void draw_Main() {\n"
            "  tft.pushImage(0,0,240,240,splash);\n"
            "  tft.pushImage(8,8,16,16,icon); // Icon\n"
            "}\n", "Main")
        self.assertEqual(body.background.asset, "splash")
        self.assertFalse(body.background.inline)
        self.assertEqual([c.asset for c in body], ["icon"])

    def test_body_ends_at_first_brace(self):
        body = parse_screen(
            "void draw_Main() {\n"
            "  tft.drawPixel(1,1,0); // P\n"
            "}\n"
            "  tft.drawPixel(2,2,0); // Outside\n", "Main")
        self.assertEqual([c.name for c in body], ["P"])


if __name__ == "__main__":
    unittest.main()
