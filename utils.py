import numpy as np

def vec(list):
    """Handy shorthand to make a double-precision float array."""
    return np.array(list, dtype=np.float64)

def normalize(v):
    """Return a unit vector in the direction of the vector v."""
    return v / np.linalg.norm(v)

def length_squared(v):
    """Return the squared length of the vector v."""
    return float(np.dot(v, v))
