import contextlib
import io
import os
import tempfile
import unittest
import numpy as np
from PIL import Image
from cli import main
from ppm import write_p3, write_image, to_rgb8

SCENE = """[
  { "type": "camera", "width": 2, "height": 2 },
  { "type": "sphere", "position": [0,0,5], "radius": 1, "color": [1,0,0] }
]
"""


def read_p3(path):
    with open(path) as f:
        lines = f.read().splitlines()
    nx, ny = (int(s) for s in lines[1].split())
    pixels = [[int(s) for s in line.split()] for line in lines[3:]]
    return lines[0], (nx, ny), int(lines[2]), pixels


class TestWriter(unittest.TestCase):

    def test_write_p3(self):
        pixels = np.array([[[255, 0, 0], [0, 255, 0]], [[0, 0, 255], [10, 20, 30]]])
        buf = io.StringIO()
        write_p3(buf, pixels, 255)
        self.assertEqual(buf.getvalue(), "P3\n2 2\n255\n255 0 0\n0 255 0\n0 0 255\n10 20 30\n")

    def test_write_p3_non_square(self):
        pixels = np.zeros((1, 3, 3), dtype=np.int64)
        buf = io.StringIO()
        write_p3(buf, pixels, 15)
        self.assertEqual(buf.getvalue().splitlines()[:3], ["P3", "3 1", "15"])
        self.assertEqual(len(buf.getvalue().splitlines()), 6)

    def test_write_image_p6(self):
        pixels = np.array([[[255, 0, 0], [0, 128, 255]]])
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "out.ppm")
            write_image(path, pixels, 255, fmt="P6")
            with open(path, "rb") as f:
                self.assertEqual(f.read(2), b"P6")
            with Image.open(path) as im:
                np.testing.assert_array_equal(np.asarray(im), pixels.astype(np.uint8))

    def test_to_rgb8(self):
        np.testing.assert_array_equal(to_rgb8(np.array([0, 15, 30, -3]), 30), [0, 128, 255, 0])

    def test_unknown_format(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "out.ppm")
            with self.assertRaises(ValueError):
                write_image(path, np.zeros((1, 1, 3)), 255, fmt="P7")
            self.assertFalse(os.path.exists(path))

    def test_unwritable_output(self):
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(OSError):
                write_image(os.path.join(d, "missing", "out.ppm"), np.zeros((1, 1, 3), dtype=np.int64))


class TestMain(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = self.tmp.name
        self.scene_path = os.path.join(self.dir, "scene.json")
        self.out_path = os.path.join(self.dir, "out.ppm")

    def tearDown(self):
        self.tmp.cleanup()

    def write_scene(self, text):
        with open(self.scene_path, "w") as f:
            f.write(text)

    def run_main(self, *argv):
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            status = main(list(argv))
        return status, err.getvalue()

    def test_render_single_pixel(self):
        self.write_scene(SCENE)
        status, err = self.run_main("1", "1", self.scene_path, self.out_path)
        self.assertEqual(status, 0)
        self.assertEqual(err, "")
        tag, size, max_value, pixels = read_p3(self.out_path)
        self.assertEqual((tag, size, max_value), ("P3", (1, 1), 255))
        self.assertEqual(pixels, [[255, 0, 0]])

    def test_render_size_and_background(self):
        self.write_scene(SCENE)
        status, _ = self.run_main("7", "5", self.scene_path, self.out_path, "--max-value", "100")
        self.assertEqual(status, 0)
        tag, size, max_value, pixels = read_p3(self.out_path)
        self.assertEqual(size, (7, 5))
        self.assertEqual(max_value, 100)
        self.assertEqual(len(pixels), 35)
        # corner misses the sphere, center hits it
        self.assertEqual(pixels[0], [100, 100, 100])
        self.assertEqual(pixels[2 * 7 + 3], [100, 0, 0])

    def test_view_defaults_without_camera(self):
        self.write_scene('[{"type": "sphere", "position": [0, 0, 5], "radius": 1, "color": [0, 1, 0]}]')
        status, _ = self.run_main("2", "2", self.scene_path, self.out_path, "--view-width", "0.1", "--view-height", "0.1")
        self.assertEqual(status, 0)
        _, _, _, pixels = read_p3(self.out_path)
        self.assertEqual(pixels, [[0, 255, 0]] * 4)

    def test_parse_error(self):
        self.write_scene('[\n{"type": "plane", "radius": 1}\n]')
        status, err = self.run_main("4", "4", self.scene_path, self.out_path)
        self.assertEqual(status, 1)
        self.assertIn("line 2", err)
        self.assertFalse(os.path.exists(self.out_path))

    def test_empty_scene_error(self):
        self.write_scene("[]")
        status, err = self.run_main("4", "4", self.scene_path, self.out_path)
        self.assertEqual(status, 1)
        self.assertIn("Empty scene", err)
        self.assertFalse(os.path.exists(self.out_path))

    def test_strict_flag(self):
        self.write_scene('[{"type": "sphere", "position": [0, 0, 5]}]')
        self.assertEqual(self.run_main("1", "1", self.scene_path, self.out_path)[0], 0)
        os.remove(self.out_path)
        status, err = self.run_main("1", "1", self.scene_path, self.out_path, "--strict")
        self.assertEqual(status, 1)
        self.assertIn("Missing", err)
        self.assertFalse(os.path.exists(self.out_path))

    def test_missing_input(self):
        status, err = self.run_main("4", "4", os.path.join(self.dir, "nope.json"), self.out_path)
        self.assertEqual(status, 1)
        self.assertTrue(err.startswith("Error:"))
        self.assertFalse(os.path.exists(self.out_path))

    def test_unwritable_output(self):
        self.write_scene(SCENE)
        status, err = self.run_main("1", "1", self.scene_path, os.path.join(self.dir, "no", "out.ppm"))
        self.assertEqual(status, 1)
        self.assertTrue(err.startswith("Error:"))

    def test_usage_errors(self):
        for argv in (("4", "4", self.scene_path), ("4", "4", "a", "b", "c"), ("0", "4", "a", "b"), ("x", "4", "a", "b")):
            with self.assertRaises(SystemExit) as cm:
                self.run_main(*argv)
            self.assertEqual(cm.exception.code, 2)


if __name__ == '__main__':
    unittest.main()
