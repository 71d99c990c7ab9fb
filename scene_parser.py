from geometry import Sphere, Plane
from raycast import Scene
from utils import vec

"""
Reader for scene description files.

A scene file is a restricted JSON array of flat objects, for example

    [
      { "type": "camera", "width": 2, "height": 2 },
      { "type": "sphere", "position": [0, 0, 5], "radius": 1, "color": [1, 0, 0] },
      { "type": "plane", "position": [0, -1, 0], "normal": [0, 1, 0], "color": [0, 0, 1] }
    ]

Strings are plain printable ASCII without escapes, values are numbers or
3-element numeric arrays. The first malformed token aborts the parse with a
SceneParseError naming the line it was found on.
"""

MAX_STRING_LENGTH = 128

# ASCII only; other Unicode spaces and digits are malformed input
WHITESPACE = " \t\n\r\v\f"
DIGITS = "0123456789"

# key -> (value kind, object types the key is valid on)
FIELDS = {
    "width": ("number", ("camera",)),
    "height": ("number", ("camera",)),
    "radius": ("number", ("sphere",)),
    "color": ("vector", ("sphere", "plane")),
    "position": ("vector", ("sphere", "plane")),
    "normal": ("vector", ("plane",)),
}

# fields that strict mode insists on
REQUIRED = {
    "camera": ("width", "height"),
    "sphere": ("position", "radius", "color"),
    "plane": ("position", "normal", "color"),
}


class SceneParseError(ValueError):

    def __init__(self, message, line):
        """A malformed scene file.

        Parameters:
          message : str -- what went wrong
          line : int -- 1-based line number where it was detected
        """
        super().__init__(message, line)
        self.message = message
        self.line = line

    def __str__(self):
        return f"{self.message} on line {self.line}."


class SceneReader:
    """Character cursor over scene text that keeps track of the line number."""

    def __init__(self, text):
        self.text = text
        self.pos = 0
        self.line = 1

    def error(self, message):
        return SceneParseError(message, self.line)

    def at_end(self):
        return self.pos >= len(self.text)

    def peek(self):
        if self.at_end():
            return ""
        return self.text[self.pos]

    def next_c(self):
        """Consume one character; running out of input is an error."""
        if self.at_end():
            raise self.error("Unexpected end of file")
        c = self.text[self.pos]
        self.pos += 1
        if c == "\n":
            self.line += 1
        return c

    def expect_c(self, d):
        c = self.next_c()
        if c != d:
            raise self.error(f"Expected '{d}' but found '{c}'")

    def skip_ws(self):
        while not self.at_end() and self.peek() in WHITESPACE:
            self.next_c()

    def next_string(self):
        """Read a double-quoted string."""
        if self.next_c() != '"':
            raise self.error("Expected string")
        chars = []
        c = self.next_c()
        while c != '"':
            if len(chars) >= MAX_STRING_LENGTH:
                raise self.error(f"Strings longer than {MAX_STRING_LENGTH} characters are not supported")
            if c == "\\":
                raise self.error("Strings with escape codes are not supported")
            if ord(c) < 32 or ord(c) > 126:
                raise self.error("Strings may contain only printable ascii characters")
            chars.append(c)
            c = self.next_c()
        return "".join(chars)

    def next_number(self):
        """Read a decimal number with optional sign, fraction and exponent."""
        start = self.pos
        if self.peek() in ("+", "-"):
            self.next_c()
        digits = self._digits()
        if self.peek() == ".":
            self.next_c()
            digits += self._digits()
        if digits == 0:
            raise self.error("Expected number")
        if self.peek() in ("e", "E"):
            self.next_c()
            if self.peek() in ("+", "-"):
                self.next_c()
            if self._digits() == 0:
                raise self.error("Malformed exponent in number")
        return float(self.text[start:self.pos])

    def _digits(self):
        count = 0
        while not self.at_end() and self.peek() in DIGITS:
            self.next_c()
            count += 1
        return count

    def next_vector(self):
        """Read a 3-element numeric array."""
        v = []
        self.expect_c("[")
        for i in range(3):
            self.skip_ws()
            v.append(self.next_number())
            self.skip_ws()
            self.expect_c("," if i < 2 else "]")
        return vec(v)


class SceneParser:

    def __init__(self, text, default_view_width=1.0, default_view_height=1.0, strict=False):
        """Parse scene text into a Scene.

        Parameters:
          text : str -- the scene description
          default_view_width, default_view_height : float -- camera view size
            used when the scene declares no camera
          strict : bool -- also reject repeated cameras, repeated keys and
            objects with unset fields
        """
        self.reader = SceneReader(text)
        self.strict = strict
        self.view_width = default_view_width
        self.view_height = default_view_height
        self.surfs = []
        self.num_cameras = 0

    def parse(self):
        r = self.reader
        r.skip_ws()
        r.expect_c("[")
        r.skip_ws()
        if r.peek() == "]":
            raise r.error("Empty scene, expected at least one object")

        while True:
            r.skip_ws()
            c = r.next_c()
            if c == "]":
                raise r.error("Expected object after ','")
            if c != "{":
                raise r.error(f"Expected '{{' but found '{c}'")
            self.parse_object()

            r.skip_ws()
            c = r.next_c()
            if c == "]":
                break
            if c != ",":
                raise r.error(f"Expected ',' or ']' but found '{c}'")

        r.skip_ws()
        if not r.at_end():
            raise r.error("Unexpected content after end of scene")

        return Scene(self.surfs, self.view_width, self.view_height)

    def parse_object(self):
        """Parse one object after its opening brace."""
        r = self.reader
        r.skip_ws()
        key = r.next_string()
        if key != "type":
            raise r.error(f"Expected \"type\" key but found \"{key}\"")
        r.skip_ws()
        r.expect_c(":")
        r.skip_ws()
        kind = r.next_string()
        if kind not in REQUIRED:
            raise r.error(f"Unknown type, \"{kind}\"")

        fields = {}
        r.skip_ws()
        while True:
            c = r.next_c()
            if c == "}":
                break
            if c != ",":
                raise r.error(f"Expected ',' or '}}' but found '{c}'")
            r.skip_ws()
            key = r.next_string()
            r.skip_ws()
            r.expect_c(":")
            r.skip_ws()
            if key not in FIELDS:
                raise r.error(f"Unknown property, \"{key}\"")
            value_kind, valid_on = FIELDS[key]
            if kind not in valid_on:
                raise r.error(f"Unexpected '{key}' attribute on {kind}")
            if self.strict and key in fields:
                raise r.error(f"Duplicate '{key}' attribute")
            if value_kind == "number":
                fields[key] = r.next_number()
            else:
                fields[key] = r.next_vector()
            r.skip_ws()

        if self.strict:
            missing = [k for k in REQUIRED[kind] if k not in fields]
            if missing:
                raise r.error(f"Missing {', '.join(missing)} on {kind}")
        self.add_object(kind, fields)

    def add_object(self, kind, fields):
        r = self.reader
        if kind == "camera":
            self.num_cameras += 1
            if self.strict and self.num_cameras > 1:
                raise r.error("Only one camera may be declared")
            self.view_width = fields.get("width", self.view_width)
            self.view_height = fields.get("height", self.view_height)
        elif kind == "sphere":
            self.surfs.append(Sphere(**fields))
        else:
            self.surfs.append(Plane(**fields))


def parse_scene(text, default_view_width=1.0, default_view_height=1.0, strict=False):
    """Parse scene description text and return a Scene."""
    return SceneParser(text, default_view_width, default_view_height, strict).parse()


def read_scene(f, default_view_width=1.0, default_view_height=1.0, strict=False):
    """Read a scene from an open text file."""
    return parse_scene(f.read(), default_view_width, default_view_height, strict)


def load_scene(filename, default_view_width=1.0, default_view_height=1.0, strict=False):
    """Read a scene from the named file."""
    with open(filename, "rb") as f:
        data = f.read()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        line = data.count(b"\n", 0, e.start) + 1
        raise SceneParseError("File is not valid UTF-8 text", line) from e
    return parse_scene(text, default_view_width, default_view_height, strict)
