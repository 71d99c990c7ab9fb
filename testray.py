import unittest
import numpy as np
from raycast import *
from geometry import sphere_intersection, plane_intersection
from utils import normalize, vec, length_squared

def assert_direction_matches(v, w):
    np.testing.assert_almost_equal(normalize(v), normalize(w))


class TestVectorUtils(unittest.TestCase):

    def test_normalize(self):
        np.testing.assert_almost_equal(normalize(vec([3, 0, 4])), vec([0.6, 0, 0.8]))
        self.assertAlmostEqual(np.linalg.norm(normalize(vec([1, 2, 3]))), 1.0)

    def test_length_squared(self):
        self.assertEqual(length_squared(vec([1, 2, 3])), 14.0)
        self.assertEqual(length_squared(vec([0, 0, 0])), 0.0)


class TestSphereIntersect(unittest.TestCase):

    def test_entry_point(self):
        # ray straight down +z hits the near side of the sphere
        t = sphere_intersection(vec([0, 0, 0]), vec([0, 0, 1]), vec([0, 0, 5]), 1.0)
        self.assertAlmostEqual(t, 4.0)

    def test_nonunit_direction(self):
        t = sphere_intersection(vec([0, 0, 0]), vec([0, 0, 2]), vec([0, 0, 5]), 1.0)
        self.assertAlmostEqual(t, 2.0)

    def test_origin_inside(self):
        # smaller root is negative, so the far side is reported
        t = sphere_intersection(vec([0, 0, 5]), vec([0, 0, 1]), vec([0, 0, 5]), 1.0)
        self.assertAlmostEqual(t, 1.0)

    def test_behind(self):
        t = sphere_intersection(vec([0, 0, 0]), vec([0, 0, 1]), vec([0, 0, -5]), 1.0)
        self.assertEqual(t, np.inf)

    def test_miss(self):
        t = sphere_intersection(vec([0, 0, 0]), vec([0, 0, 1]), vec([0, 3, 5]), 1.0)
        self.assertEqual(t, np.inf)

    def test_tangent(self):
        t = sphere_intersection(vec([0, 0, 0]), vec([0, 0, 1]), vec([1, 0, 5]), 1.0)
        self.assertAlmostEqual(t, 5.0)

    def test_hit_object(self):
        sphere = Sphere(vec([0, 0, 5]), 1.0, vec([1, 0, 0]))
        hit = sphere.intersect(Ray(vec([0, 0, 0]), vec([0, 0, 1])))
        self.assertAlmostEqual(hit.t, 4.0)
        self.assertIs(hit.surf, sphere)
        hit = sphere.intersect(Ray(vec([0, 0, 0]), vec([0, 1, 0])))
        self.assertEqual(hit.t, np.inf)
        self.assertIsNone(hit.surf)


class TestPlaneIntersect(unittest.TestCase):

    def test_floor(self):
        t = plane_intersection(vec([0, 0, 0]), normalize(vec([0, -1, 1])), vec([0, -1, 0]), vec([0, 1, 0]))
        self.assertAlmostEqual(t, np.sqrt(2))

    def test_nonunit_normal(self):
        t = plane_intersection(vec([0, 0, 0]), normalize(vec([0, -1, 1])), vec([0, -1, 0]), vec([0, 2, 0]))
        self.assertAlmostEqual(t, np.sqrt(2))

    def test_parallel(self):
        t = plane_intersection(vec([0, 0, 0]), vec([0, 0, 1]), vec([0, -1, 0]), vec([0, 1, 0]))
        self.assertEqual(t, np.inf)

    def test_behind(self):
        t = plane_intersection(vec([0, 0, 0]), vec([0, 1, 0]), vec([0, -1, 0]), vec([0, 1, 0]))
        self.assertEqual(t, np.inf)

    def test_origin_on_plane(self):
        t = plane_intersection(vec([0, 0, 0]), vec([0, 1, 1]), vec([0, 0, 0]), vec([0, 1, 0]))
        self.assertEqual(t, np.inf)

    def test_degenerate_normal(self):
        t = plane_intersection(vec([0, 0, 0]), vec([0, 0, 1]), vec([0, 0, 5]), vec([0, 0, 0]))
        self.assertEqual(t, np.inf)

    def test_hit_object(self):
        plane = Plane(vec([0, 0, 10]), vec([0, 0, -1]), vec([0, 0, 1]))
        hit = plane.intersect(Ray(vec([0, 0, 0]), vec([0, 0, 1])))
        self.assertAlmostEqual(hit.t, 10.0)
        self.assertIs(hit.surf, plane)


class TestCamera(unittest.TestCase):

    def test_center_ray(self):
        cam = Camera(2.0, 2.0)
        ray = cam.generate_ray(vec([0.5, 0.5]))
        np.testing.assert_almost_equal(ray.origin, vec([0, 0, 0]))
        np.testing.assert_almost_equal(ray.direction, vec([0, 0, 1]))

    def test_corners(self):
        # view plane at z = 1 spans [-1, 1] x [-1, 1]
        cam = Camera(2.0, 2.0)
        ray = cam.generate_ray(vec([0, 0]))
        assert_direction_matches(ray.direction, vec([-1, -1, 1]))
        ray = cam.generate_ray(vec([1, 0]))
        assert_direction_matches(ray.direction, vec([1, -1, 1]))
        ray = cam.generate_ray(vec([0, 1]))
        assert_direction_matches(ray.direction, vec([-1, 1, 1]))
        self.assertAlmostEqual(np.linalg.norm(ray.direction), 1.0)

    def test_aspect(self):
        cam = Camera(4.0, 1.0)
        ray = cam.generate_ray(vec([1, 1]))
        assert_direction_matches(ray.direction, vec([2, 0.5, 1]))


class TestSceneIntersect(unittest.TestCase):

    def test_nearest_wins(self):
        near = Sphere(vec([0, 0, 5]), 1.0, vec([1, 0, 0]))
        far = Sphere(vec([0, 0, 10]), 1.0, vec([0, 1, 0]))
        ray = Ray(vec([0, 0, 0]), vec([0, 0, 1]))
        self.assertIs(Scene([near, far]).intersect(ray).surf, near)
        self.assertIs(Scene([far, near]).intersect(ray).surf, near)

    def test_tie_goes_to_first(self):
        first = Sphere(vec([0, 0, 5]), 1.0, vec([1, 0, 0]))
        second = Sphere(vec([0, 0, 5]), 1.0, vec([0, 1, 0]))
        hit = Scene([first, second]).intersect(Ray(vec([0, 0, 0]), vec([0, 0, 1])))
        self.assertIs(hit.surf, first)

    def test_empty(self):
        hit = Scene([]).intersect(Ray(vec([0, 0, 0]), vec([0, 0, 1])))
        self.assertEqual(hit.t, np.inf)


class TestRender(unittest.TestCase):

    def render(self, surfs, nx, ny, view_width=1.0, view_height=1.0, **kwargs):
        scene = Scene(surfs, view_width, view_height)
        return render_image(scene.camera(), scene, nx, ny, **kwargs)

    def test_empty_scene_is_white(self):
        img = self.render([], 4, 3)
        self.assertEqual(img.shape, (3, 4, 3))
        self.assertTrue(np.all(img == 255))

    def test_background_follows_max_value(self):
        img = self.render([], 2, 2, max_value=15)
        self.assertTrue(np.all(img == 15))

    def test_single_pixel_sphere(self):
        img = self.render([Sphere(vec([0, 0, 5]), 1.0, vec([1, 0, 0]))], 1, 1, 2.0, 2.0)
        np.testing.assert_array_equal(img[0, 0], [255, 0, 0])

    def test_nearest_color(self):
        red = Sphere(vec([0, 0, 5]), 1.0, vec([1, 0, 0]))
        green = Sphere(vec([0, 0, 10]), 2.0, vec([0, 1, 0]))
        for surfs in ([red, green], [green, red]):
            img = self.render(surfs, 1, 1)
            np.testing.assert_array_equal(img[0, 0], [255, 0, 0])

    def test_plane_background(self):
        sphere = Sphere(vec([0, 0, 5]), 1.0, vec([1, 0, 0]))
        wall = Plane(vec([0, 0, 10]), vec([0, 0, -1]), vec([0, 0, 1]))
        img = self.render([sphere, wall], 3, 3, 4.0, 4.0)
        np.testing.assert_array_equal(img[1, 1], [255, 0, 0])
        np.testing.assert_array_equal(img[0, 0], [0, 0, 255])
        np.testing.assert_array_equal(img[2, 2], [0, 0, 255])

    def test_truncation(self):
        img = self.render([Sphere(vec([0, 0, 5]), 1.0, vec([0.5, 0.999, 0.1]))], 1, 1)
        np.testing.assert_array_equal(img[0, 0], [127, 254, 25])

    def test_unclamped_colors(self):
        sphere = Sphere(vec([0, 0, 5]), 1.0, vec([2.0, -0.5, 1.0]))
        img = self.render([sphere], 1, 1)
        np.testing.assert_array_equal(img[0, 0], [510, -127, 255])
        img = self.render([sphere], 1, 1, clamp=True)
        np.testing.assert_array_equal(img[0, 0], [255, 0, 255])

    def test_row_zero_is_negative_y(self):
        # rows run top to bottom with y increasing, so row 0 looks toward -y
        sphere = Sphere(vec([0, -1, 5]), 0.5, vec([0, 1, 0]))
        img = self.render([sphere], 1, 2, 1.0, 0.8)
        np.testing.assert_array_equal(img[0, 0], [0, 255, 0])
        np.testing.assert_array_equal(img[1, 0], [255, 255, 255])

    def test_invalid_size(self):
        with self.assertRaises(ValueError):
            self.render([], 0, 4)


if __name__ == '__main__':
    unittest.main()
