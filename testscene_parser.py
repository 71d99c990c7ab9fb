import io
import os
import tempfile
import unittest
import numpy as np
from geometry import Sphere, Plane
from scene_parser import parse_scene, read_scene, load_scene, SceneParseError

MINIMAL = """[
  { "type": "camera", "width": 2, "height": 2 },
  { "type": "sphere", "position": [0,0,5], "radius": 1, "color": [1,0,0] }
]
"""


class TestParseValid(unittest.TestCase):

    def test_minimal(self):
        scene = parse_scene(MINIMAL)
        self.assertEqual(len(scene.surfs), 1)
        self.assertEqual(scene.view_width, 2.0)
        self.assertEqual(scene.view_height, 2.0)
        sphere = scene.surfs[0]
        self.assertIsInstance(sphere, Sphere)
        np.testing.assert_array_equal(sphere.position, [0, 0, 5])
        self.assertEqual(sphere.radius, 1.0)
        np.testing.assert_array_equal(sphere.color, [1, 0, 0])

    def test_order_and_count(self):
        scene = parse_scene("""[
          {"type": "sphere", "position": [0, 0, 5], "radius": 1, "color": [1, 0, 0]},
          {"type": "plane", "position": [0, -1, 0], "normal": [0, 1, 0], "color": [0, 1, 0]},
          {"type": "camera", "width": 3, "height": 1.5},
          {"type": "sphere", "position": [2, 0, 8], "radius": 0.5, "color": [0, 0, 1]}
        ]""")
        self.assertEqual(len(scene), 3)
        self.assertEqual([type(s) for s in scene.surfs], [Sphere, Plane, Sphere])
        np.testing.assert_array_equal(scene.surfs[1].normal, [0, 1, 0])
        np.testing.assert_array_equal(scene.surfs[2].color, [0, 0, 1])
        self.assertEqual((scene.view_width, scene.view_height), (3.0, 1.5))

    def test_compact_and_spacious_whitespace(self):
        compact = '[{"type":"sphere","position":[0,0,5],"radius":1,"color":[1,0,0]}]'
        spacious = '\n\t[ {\n "type" : "sphere" ,\n "position" : [ 0 , 0 , 5 ] , "radius" : 1 , "color" : [ 1 , 0 , 0 ] }\n ]\n\n'
        for text in (compact, spacious):
            scene = parse_scene(text)
            self.assertEqual(len(scene), 1)
            self.assertEqual(scene.surfs[0].radius, 1.0)

    def test_numbers(self):
        scene = parse_scene('[{"type": "sphere", "radius": -1.5e1, "position": [.5, +2, 3.], "color": [1E-1, 0.25, 10]}]')
        sphere = scene.surfs[0]
        self.assertEqual(sphere.radius, -15.0)
        np.testing.assert_array_equal(sphere.position, [0.5, 2.0, 3.0])
        np.testing.assert_array_equal(sphere.color, [0.1, 0.25, 10.0])

    def test_camera_only(self):
        scene = parse_scene('[{"type": "camera", "width": 1, "height": 1}]')
        self.assertEqual(len(scene), 0)

    def test_default_view(self):
        scene = parse_scene(MINIMAL.replace('{ "type": "camera", "width": 2, "height": 2 },', ''),
                            default_view_width=3.0, default_view_height=4.0)
        self.assertEqual((scene.view_width, scene.view_height), (3.0, 4.0))

    def test_unset_fields_default_to_zero(self):
        scene = parse_scene('[{"type": "plane", "color": [0, 0, 1]}, {"type": "sphere"}]')
        plane, sphere = scene.surfs
        np.testing.assert_array_equal(plane.position, [0, 0, 0])
        np.testing.assert_array_equal(plane.normal, [0, 0, 0])
        self.assertEqual(sphere.radius, 0.0)
        np.testing.assert_array_equal(sphere.color, [0, 0, 0])

    def test_last_camera_wins(self):
        scene = parse_scene("""[
          {"type": "camera", "width": 1, "height": 1},
          {"type": "camera", "width": 5, "height": 6}
        ]""")
        self.assertEqual((scene.view_width, scene.view_height), (5.0, 6.0))

    def test_camera_without_size_keeps_default(self):
        scene = parse_scene('[{"type": "camera", "width": 5}]', default_view_height=7.0)
        self.assertEqual((scene.view_width, scene.view_height), (5.0, 7.0))

    def test_read_scene_file_object(self):
        scene = read_scene(io.StringIO(MINIMAL))
        self.assertEqual(len(scene), 1)

    def test_load_scene(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "scene.json")
            with open(path, "w") as f:
                f.write(MINIMAL)
            scene = load_scene(path)
        self.assertEqual(len(scene), 1)

    def test_load_invalid_utf8(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "scene.json")
            with open(path, "wb") as f:
                f.write(b'[\n{"type": "sphere",\n "radius": \xff}]')
            with self.assertRaises(SceneParseError) as cm:
                load_scene(path)
        self.assertEqual(cm.exception.line, 3)
        self.assertIn("UTF-8", str(cm.exception))

    def test_load_missing_file(self):
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(OSError):
                load_scene(os.path.join(d, "missing.json"))

    def test_max_length_string(self):
        # a 128 character key is read fine and then rejected as unknown
        with self.assertRaises(SceneParseError) as cm:
            parse_scene('[{"type": "sphere", "%s": 1}]' % ("a" * 128))
        self.assertIn("Unknown property", str(cm.exception))


class TestParseErrors(unittest.TestCase):

    def assertParseError(self, text, fragment=None, line=None, **kwargs):
        with self.assertRaises(SceneParseError) as cm:
            parse_scene(text, **kwargs)
        if fragment is not None:
            self.assertIn(fragment, str(cm.exception))
        if line is not None:
            self.assertEqual(cm.exception.line, line)
        return cm.exception

    def test_ineligible_keys(self):
        self.assertParseError('[{"type": "plane", "radius": 1}]', "'radius'")
        self.assertParseError('[{"type": "sphere", "normal": [0, 1, 0]}]', "'normal'")
        self.assertParseError('[{"type": "sphere", "width": 1}]', "'width'")
        self.assertParseError('[{"type": "plane", "height": 1}]', "'height'")
        self.assertParseError('[{"type": "camera", "color": [1, 1, 1]}]', "'color'")
        self.assertParseError('[{"type": "camera", "position": [1, 1, 1]}]', "'position'")

    def test_error_line_number(self):
        text = """[
  {"type": "sphere", "position": [0, 0, 5], "radius": 1, "color": [1, 0, 0]},
  {"type": "plane",
   "radius": 2}
]"""
        err = self.assertParseError(text, "'radius'", line=4)
        self.assertIn("line 4", str(err))

    def test_unknown_key(self):
        self.assertParseError('[{"type": "sphere", "size": 1}]', "Unknown property")

    def test_unknown_type(self):
        self.assertParseError('[{"type": "cube"}]', "Unknown type")

    def test_type_must_come_first(self):
        self.assertParseError('[{"radius": 1, "type": "sphere"}]', '"type"')

    def test_empty_scene(self):
        self.assertParseError("[]", "Empty scene")
        self.assertParseError("  [ \n ]", "Empty scene", line=2)

    def test_trailing_comma(self):
        self.assertParseError('[{"type": "camera", "width": 1, "height": 1},]')

    def test_unterminated_string(self):
        self.assertParseError('[{"type": "sphere', "end of file")
        self.assertParseError('[{"type": "sphere\n}]', "printable")

    def test_long_string(self):
        self.assertParseError('[{"type": "%s"}]' % ("a" * 129), "128")

    def test_escape(self):
        self.assertParseError('[{"type": "sph\\"ere"}]', "escape")

    def test_non_ascii_string(self):
        self.assertParseError('[{"type": "sphére"}]', "ascii")

    def test_missing_open_bracket(self):
        self.assertParseError('{"type": "sphere"}', "'['")

    def test_missing_colon(self):
        self.assertParseError('[{"type" "sphere"}]', "':'")

    def test_missing_separator(self):
        self.assertParseError('[{"type": "sphere"} {"type": "plane"}]', "',' or ']'")
        self.assertParseError('[{"type": "sphere" "radius": 1}]', "',' or '}'")

    def test_unexpected_end(self):
        self.assertParseError('[{"type": "sphere"}', "end of file")
        self.assertParseError('', "end of file")

    def test_bad_numbers(self):
        self.assertParseError('[{"type": "sphere", "radius": abc}]', "Expected number")
        self.assertParseError('[{"type": "sphere", "radius": -}]', "Expected number")
        self.assertParseError('[{"type": "sphere", "radius": 1e}]', "exponent")

    def test_non_ascii_digits(self):
        self.assertParseError('[{"type": "sphere", "radius": 2\u00b2}]', "',' or '}'")
        self.assertParseError('[{"type": "sphere", "radius": \u0663}]', "Expected number")
        self.assertParseError('[{"type": "sphere", "position": [1, \u0662, 3]}]', "Expected number")

    def test_non_ascii_whitespace(self):
        self.assertParseError('[{"type":\u00a0"sphere"}]', "Expected string")
        self.assertParseError('\u3000[{"type": "sphere"}]', "'['")
        self.assertParseError('[{"type": "sphere"}]\u00a0', "after end of scene")

    def test_bad_vectors(self):
        self.assertParseError('[{"type": "sphere", "position": [1, 2]}]', "','")
        self.assertParseError('[{"type": "sphere", "position": [1, 2, 3, 4]}]', "']'")
        self.assertParseError('[{"type": "sphere", "position": 1}]', "'['")

    def test_non_string_key(self):
        self.assertParseError('[{type: "sphere"}]', "Expected string")

    def test_content_after_scene(self):
        self.assertParseError('[{"type": "sphere"}] x', "after end of scene")


class TestStrictMode(unittest.TestCase):

    def test_second_camera(self):
        text = '[{"type": "camera", "width": 1, "height": 1}, {"type": "camera", "width": 2, "height": 2}]'
        parse_scene(text)
        with self.assertRaises(SceneParseError):
            parse_scene(text, strict=True)

    def test_missing_fields(self):
        with self.assertRaises(SceneParseError) as cm:
            parse_scene('[{"type": "sphere", "position": [0, 0, 5]}]', strict=True)
        self.assertIn("radius", str(cm.exception))
        self.assertIn("color", str(cm.exception))

    def test_duplicate_key(self):
        text = '[{"type": "sphere", "position": [0, 0, 5], "radius": 1, "radius": 2, "color": [1, 0, 0]}]'
        self.assertEqual(parse_scene(text).surfs[0].radius, 2.0)
        with self.assertRaises(SceneParseError):
            parse_scene(text, strict=True)

    def test_complete_scene_passes(self):
        scene = parse_scene(MINIMAL, strict=True)
        self.assertEqual(len(scene), 1)


if __name__ == '__main__':
    unittest.main()
