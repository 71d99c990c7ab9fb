import numpy as np
from utils import vec, length_squared

class Hit:
    def __init__(self, t, surf=None):
        """Create a Hit with the given data.

        Parameters:
          t : float -- the t value of the intersection along the ray
          surf : Sphere or Plane -- the surface that was hit
        """
        self.t = t
        self.surf = surf

# Value to represent absence of an intersection
no_hit = Hit(np.inf)


def sphere_intersection(origin, direction, center, radius):
    """Distance along the ray origin + t * direction to a sphere.

    Returns the smaller positive root of the ray/sphere quadratic, falling
    back to the larger one, or np.inf when neither root is positive.
    """
    sphere_vec = origin - center
    a = length_squared(direction)
    b = 2 * np.dot(direction, sphere_vec)
    c = length_squared(sphere_vec) - radius * radius
    discriminant = b * b - 4 * a * c
    if discriminant < 0:
        return np.inf

    disc_sqrt = np.sqrt(discriminant)
    minus = (-b - disc_sqrt) / (2 * a)
    if minus > 0:
        return float(minus)
    plus = (-b + disc_sqrt) / (2 * a)
    if plus > 0:
        return float(plus)
    return np.inf


def plane_intersection(origin, direction, position, normal):
    """Distance along the ray origin + t * direction to a plane.

    The plane passes through `position` with normal `normal`. Returns np.inf
    for rays parallel to the plane or hits at t <= 0.
    """
    denom = np.dot(normal, direction)
    if denom == 0:
        return np.inf
    d = -np.dot(normal, position)
    t = -(np.dot(normal, origin) + d) / denom
    if not np.isfinite(t) or t <= 0:
        return np.inf
    return float(t)


class Sphere:

    def __init__(self, position=vec([0, 0, 0]), radius=0., color=vec([0, 0, 0])):
        """Create a sphere with the given center and radius.

        Parameters:
          position : (3,) -- a 3D point specifying the sphere's center
          radius : float -- a Python float specifying the sphere's radius
          color : (3,) -- flat RGB color, components nominally in [0, 1]
        """
        self.position = vec(position)
        self.radius = float(radius)
        self.color = vec(color)

    def intersect(self, ray):
        """Computes the first (smallest positive t) intersection between a ray and this sphere.

        Parameters:
          ray : Ray -- the ray to intersect with the sphere
        Return:
          Hit -- the hit data
        """
        t = sphere_intersection(ray.origin, ray.direction, self.position, self.radius)
        if t == np.inf:
            return no_hit
        return Hit(t, self)

    def __repr__(self):
        return f"Sphere(position={self.position.tolist()}, radius={self.radius}, color={self.color.tolist()})"


class Plane:

    def __init__(self, position=vec([0, 0, 0]), normal=vec([0, 0, 0]), color=vec([0, 0, 0])):
        """Create a plane through a point with the given normal.

        Parameters:
          position : (3,) -- any 3D point on the plane
          normal : (3,) -- the plane normal; need not be unit length
          color : (3,) -- flat RGB color, components nominally in [0, 1]
        """
        self.position = vec(position)
        self.normal = vec(normal)
        self.color = vec(color)

    def intersect(self, ray):
        """Computes the intersection between a ray and this plane, if it exists.

        Parameters:
          ray : Ray -- the ray to intersect with the plane
        Return:
          Hit -- the hit data
        """
        t = plane_intersection(ray.origin, ray.direction, self.position, self.normal)
        if t == np.inf:
            return no_hit
        return Hit(t, self)

    def __repr__(self):
        return f"Plane(position={self.position.tolist()}, normal={self.normal.tolist()}, color={self.color.tolist()})"
