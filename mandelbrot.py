import os
import sys
import time
import warnings

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

from argparse import ArgumentParser, ArgumentTypeError

from multibrot import MultibrotError, Pixel, RenderRequest, render
from multibrot import codec
from multibrot.renderer import DEFAULT_DEVICE, INTERIOR_COLOR

DEFAULT_FILE = "mandelbrot.png"
DEFAULT_WIDTH = 1000
DEFAULT_HEIGHT = 1000
DEFAULT_ITERATIONS = 100
DEFAULT_EXPONENT = 2
DEFAULT_BOUNDS = (-2.0, 2.0, -2.0, 2.0)
DEFAULT_RADIUS = 2.0


def parse_color(value: str) -> Pixel:
    """Parse ``#RRGGBB`` into a :class:`Pixel`."""

    hex_color = value.lstrip('#')
    if len(hex_color) != 6:
        raise ArgumentTypeError(f"color must be in the form #RRGGBB, got '{value}'")
    try:
        return Pixel(*(int(hex_color[i:i + 2], 16) for i in (0, 2, 4)))
    except ValueError as exc:
        raise ArgumentTypeError(f"color must contain only hexadecimal digits, got '{value}'") from exc


def build_parser():
    parser = ArgumentParser(
        description='Render a Multibrot set (z -> z^exponent + c, seeded at z = c) to a PNG image.')

    parser.add_argument('path', nargs='?', default=DEFAULT_FILE,
                        help='path of the file to save the image to (default: %(default)s)')
    parser.add_argument('width', nargs='?', type=int, default=DEFAULT_WIDTH,
                        help='width of the image in pixels (default: %(default)s)')
    parser.add_argument('height', nargs='?', type=int, default=DEFAULT_HEIGHT,
                        help='height of the image in pixels (default: %(default)s)')
    parser.add_argument('iterations', nargs='?', type=int, default=DEFAULT_ITERATIONS,
                        help='number of iterations to use per point (default: %(default)s)')
    parser.add_argument('exponent', nargs='?', type=int, default=DEFAULT_EXPONENT,
                        help='exponent of the set; 2 gives the Mandelbrot set (default: %(default)s)')

    xmin, xmax, ymin, ymax = DEFAULT_BOUNDS
    parser.add_argument('--xmin', type=float, default=xmin, metavar='XMIN',
                        help='left edge of the plane window (default: %(default)s)')
    parser.add_argument('--xmax', type=float, default=xmax, metavar='XMAX',
                        help='right edge of the plane window (default: %(default)s)')
    parser.add_argument('--ymin', type=float, default=ymin, metavar='YMIN',
                        help='lower edge of the plane window, mapped to the first image row (default: %(default)s)')
    parser.add_argument('--ymax', type=float, default=ymax, metavar='YMAX',
                        help='upper edge of the plane window (default: %(default)s)')
    parser.add_argument('--radius', type=float, default=DEFAULT_RADIUS, dest='escape_radius', metavar='RADIUS',
                        help='escape radius of the set (default: %(default)s)')

    parser.add_argument('--interior-color', type=parse_color, default=INTERIOR_COLOR, dest='interior_color',
                        metavar='#RRGGBB', help='color of points inside the set (default: #0000ff)')
    parser.add_argument('--workers', type=int, default=None, metavar='WORKERS',
                        help='number of row bands rendered concurrently (default: one per CPU)')
    parser.add_argument('--device', type=str, default=None, metavar='DEVICE',
                        help=f'TensorFlow device to render on (default: {DEFAULT_DEVICE})')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow diagnostics.')

    return parser


def request_from_options(opt) -> RenderRequest:
    return RenderRequest(
        width=opt.width,
        height=opt.height,
        iterations=opt.iterations,
        exponent=opt.exponent,
        xmin=opt.xmin,
        xmax=opt.xmax,
        ymin=opt.ymin,
        ymax=opt.ymax,
        escape_radius=opt.escape_radius,
        interior_color=opt.interior_color,
    )


def print_configuration(path, request: RenderRequest) -> None:
    print("Configuration")
    print(f"\tFile: {path}")
    print(f"\tSize (Width x Height): {request.width} x {request.height} px")
    print(f"\tIterations: {request.iterations}")
    print(f"\tExponent: {request.exponent}")
    print(f"\tPlane: [{request.xmin:g}, {request.xmax:g}] x [{request.ymin:g}, {request.ymax:g}]")
    print(f"\tEscape Radius: {request.escape_radius:g}")


def main(argv=None) -> int:
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    log("TensorFlow version: %s" % tf.__version__)
    device = opt.device or DEFAULT_DEVICE
    log("Rendering on %s" % device)

    request = request_from_options(opt)
    print_configuration(opt.path, request)

    start = time.perf_counter()
    try:
        image = render(request, workers=opt.workers, device=device)
    except MultibrotError as exc:
        print(f"Error rendering the set: {exc}", file=sys.stderr)
        return 1
    log("Rendered in %.2f seconds" % (time.perf_counter() - start))

    try:
        codec.save(image, opt.path)
    except MultibrotError as exc:
        print(f"Error saving to file {opt.path}: {exc}", file=sys.stderr)
        return 1
    log("Saved %s" % opt.path)

    return 0


if __name__ == '__main__':
    sys.exit(main())
