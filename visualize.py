import os
import sys
from argparse import ArgumentParser
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

import PIL.Image

from mandelview import compute_image, viewport_from_scale


def select_device() -> str:
    """Place the computation on the first visible GPU, falling back to the CPU."""

    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return '/CPU:0'
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        log(e)
        return '/CPU:0'
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'


def build_parser():
    parser = ArgumentParser(
        prog='mandelview',
        description='Render a view of the Mandelbrot set to a PNG image.',
    )

    parser.add_argument('x_topleft', type=float, metavar='X-TOPLEFT',
                        help='real component of the top left of the image')
    parser.add_argument('y_topleft', type=float, metavar='Y-TOPLEFT',
                        help='imaginary component of the top left of the image')
    parser.add_argument('scale', type=float, metavar='SCALE',
                        help='total width of the view in the complex plane')
    parser.add_argument('xres', type=int, metavar='XRES',
                        help='horizontal resolution of the output image')
    parser.add_argument('yres', type=int, metavar='YRES',
                        help='vertical resolution of the output image')
    parser.add_argument('file', type=str, metavar='FILE',
                        help='name of the output file, suffix should be .png')

    parser.add_argument('-c', '--color', action='store_true',
                        help='use 256 colors instead of grayscale')
    parser.add_argument('--workers', type=int, default=None, metavar='WORKERS',
                        help='number of parallel evaluation tasks (default: number of CPUs)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def resolve_output_path(path_str: str, parser: ArgumentParser) -> Path:
    output_path = Path(path_str).expanduser()
    if path_str.endswith(tuple(filter(None, {os.sep, os.altsep}))):
        parser.error("FILE must be a file path, not a directory.")
    if output_path.exists() and output_path.is_dir():
        parser.error("FILE must point to a file, not a directory.")
    if output_path.suffix:
        if output_path.suffix.lower() != ".png":
            parser.error(f"Output files must end with .png, got {output_path.suffix}.")
    else:
        output_path = output_path.with_suffix(".png")
    return output_path.resolve()


def write_single_image(image: PIL.Image.Image, output_path: Path) -> None:
    """Write ``image`` to ``output_path`` as a PNG file."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format="PNG")


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    if opt.xres < 1 or opt.yres < 1:
        parser.error(f"XRES and YRES must be positive, got {opt.xres}x{opt.yres}.")
    if opt.workers is not None and opt.workers < 1:
        parser.error("--workers must be at least 1.")

    output_path = resolve_output_path(opt.file, parser)

    try:
        viewport = viewport_from_scale(opt.x_topleft, opt.y_topleft, opt.scale, opt.xres, opt.yres)
    except ValueError as exc:
        parser.error(str(exc))

    log("TensorFlow version: %s" % tf.__version__)
    log("Viewport: top left ({0}, {1}), bottom right ({2}, {3}), {4}x{5} pixels".format(
        viewport.topleft.re, viewport.topleft.im,
        viewport.bottomright.re, viewport.bottomright.im,
        viewport.width, viewport.height,
    ))

    device = select_device()
    buffer = compute_image(viewport, opt.color, workers=opt.workers, device=device)
    write_single_image(buffer.to_image(), output_path)
    log("Wrote %s (%s, %dx%d)" % (output_path, buffer.mode, buffer.width, buffer.height))


if __name__ == '__main__':
    main()
