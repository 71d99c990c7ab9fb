import argparse
import sys

from raycast import render_image, MAX_VALUE
from scene_parser import load_scene, SceneParseError
from ppm import write_image, FORMATS


def positive_int(text):
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text}")
    return value


def build_parser():
    parser = argparse.ArgumentParser(
        prog="raycast",
        description="Ray cast a scene of spheres and planes into a PPM image.",
    )
    parser.add_argument('width', type=positive_int, help='Image width in pixels')
    parser.add_argument('height', type=positive_int, help='Image height in pixels')
    parser.add_argument('input', help='Scene description file (.json)')
    parser.add_argument('output', help='Output image file (.ppm)')
    parser.add_argument('--max-value', type=positive_int, default=MAX_VALUE, help='Maximum channel value')
    parser.add_argument('--format', choices=FORMATS, default="P3", help='PPM variant to write')
    parser.add_argument('--view-width', type=float, default=1.0, help='View plane width when the scene has no camera')
    parser.add_argument('--view-height', type=float, default=1.0, help='View plane height when the scene has no camera')
    parser.add_argument('--strict', action='store_true', help='Reject repeated cameras, repeated keys and unset fields')
    parser.add_argument('--clamp', action='store_true', help='Clamp object colors to [0, 1] before scaling')
    parser.add_argument('--verbose', action='store_true', help='Print rendering progress')
    return parser


def render(scene, width, height, output_path, max_value=MAX_VALUE, fmt="P3", clamp=False, verbose=False):
    """Ray cast a parsed scene and write the image to output_path."""
    pixels = render_image(scene.camera(), scene, width, height, max_value, clamp=clamp, verbose=verbose)
    write_image(output_path, pixels, max_value, fmt)
    if verbose:
        print(f"wrote {width}x{height} image to {output_path}")
    return pixels


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        scene = load_scene(args.input, args.view_width, args.view_height, strict=args.strict)
        if args.verbose:
            print(f"read {len(scene)} objects from {args.input}")
        render(scene, args.width, args.height, args.output,
               max_value=args.max_value, fmt=args.format, clamp=args.clamp, verbose=args.verbose)
    except SceneParseError as e:
        print(f"Error: {args.input}: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def run():
    sys.exit(main())


if __name__ == '__main__':
    run()
