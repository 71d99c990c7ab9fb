import numpy as np
from geometry import Sphere, Plane, no_hit
from utils import vec, normalize

"""
Core implementation of the ray caster.
"""

MAX_VALUE = 255 # default maximum channel value of the output image


class Ray:

    def __init__(self, origin, direction):
        """Create a ray with the given origin and direction.
        """
        self.origin = np.array(origin, np.float64)
        self.direction = np.array(direction, np.float64)

class Camera:

    def __init__(self, view_width=1.0, view_height=1.0):
        """Create a camera at the origin looking down +z.

        The view plane sits at z = 1 and spans view_width x view_height,
        centered on the z axis.
        """
        self.eye = vec([0, 0, 0])
        self.view_width = view_width
        self.view_height = view_height

    def generate_ray(self, img_point):
        """Compute the ray corresponding to a point in the image.

        img_point is in normalized image coordinates: (0, 0) is the top-left
        corner and (1, 1) the bottom-right corner of the image.
        """
        alpha = -self.view_width / 2 + self.view_width * img_point[0]
        beta = -self.view_height / 2 + self.view_height * img_point[1]

        direction = vec([alpha, beta, 1.0])

        return Ray(self.eye, normalize(direction))


class Scene:

    def __init__(self, surfs=None, view_width=1.0, view_height=1.0):
        """Create a scene containing the given objects.

        Parameters:
          surfs : list of Sphere/Plane -- objects in declaration order
          view_width, view_height : float -- camera view plane size
        """
        self.surfs = list(surfs) if surfs is not None else []
        self.view_width = view_width
        self.view_height = view_height

    def camera(self):
        """Return the camera described by this scene's view dimensions."""
        return Camera(self.view_width, self.view_height)

    def intersect(self, ray):
        """Computes the first (smallest t) intersection between a ray and the scene.

        Ties go to the object declared first.
        """
        closest_hit = no_hit
        for surf in self.surfs:
            hit = surf.intersect(ray)
            if hit.t < closest_hit.t:
                closest_hit = hit
        return closest_hit

    def __len__(self):
        return len(self.surfs)


def shade(hit, max_value=MAX_VALUE, clamp=False):
    """Flat color of a hit scaled to [0, max_value], white on a miss."""
    if hit.t == np.inf:
        return np.full(3, max_value, dtype=np.int64)
    color = hit.surf.color * max_value
    if clamp:
        color = np.clip(color, 0, max_value)
    # int conversion truncates toward zero
    return np.trunc(color).astype(np.int64)


def render_image(camera, scene, nx, ny, max_value=MAX_VALUE, clamp=False, verbose=False):
    """
    render a ray cast image.

    Returns an (ny, nx, 3) integer array in row-major order, row 0 at the top.
    """
    if nx <= 0 or ny <= 0:
        raise ValueError(f"image size must be positive, got {nx}x{ny}")

    output_image = np.zeros((ny, nx, 3), np.int64)

    for i in range(ny):
        if verbose:
            print(f"rendering row {i+1}/{ny}...")
        v = (i + 0.5) / ny
        for j in range(nx):
            u = (j + 0.5) / nx
            ray = camera.generate_ray(np.array([u, v]))
            output_image[i, j] = shade(scene.intersect(ray), max_value, clamp)

    return output_image
