import io
import os
import numpy as np
from PIL import Image

"""
Writers for the PPM family of raster formats.
"""

FORMATS = ("P3", "P6")


def write_p3(f, pixels, max_value=255):
    """Write an image as plain-text PPM (P3).

    Parameters:
      f : text file -- destination
      pixels : (ny, nx, 3) -- integer channel values, row 0 at the top
      max_value : int -- maximum channel value written in the header
    """
    ny, nx, _ = pixels.shape
    f.write(f"P3\n{nx} {ny}\n{max_value}\n")
    for r, g, b in pixels.reshape(-1, 3):
        f.write(f"{r} {g} {b}\n")


def to_rgb8(pixels, max_value=255):
    """Rescale channel values in [0, max_value] to 8-bit."""
    scaled = np.asarray(pixels, dtype=np.float64) * (255.0 / max_value)
    return np.clip(np.round(scaled), 0, 255).astype(np.uint8)


def write_image(filename, pixels, max_value=255, fmt="P3"):
    """Write a complete image file.

    P3 is written as text by write_p3; P6 (binary PPM) goes through PIL.
    The file is only created once the full image is encoded; if writing
    fails, whatever was written is removed before the error propagates.
    """
    if fmt not in FORMATS:
        raise ValueError(f"unsupported image format {fmt!r}, expected one of {', '.join(FORMATS)}")
    if max_value <= 0:
        raise ValueError(f"max_value must be positive, got {max_value}")

    if fmt == "P3":
        buf = io.StringIO()
        write_p3(buf, pixels, max_value)
        data = buf.getvalue().encode("ascii")
    else:
        buf = io.BytesIO()
        Image.fromarray(to_rgb8(pixels, max_value)).save(buf, format="PPM")
        data = buf.getvalue()

    f = open(filename, "wb")
    try:
        with f:
            f.write(data)
    except OSError:
        os.remove(filename)
        raise
