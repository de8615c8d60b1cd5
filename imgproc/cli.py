"""
imgproc command line entry point.

Reads an 8-bit image, runs one operator on it and writes the result:

    imgproc blur in.png out.png --size 5 --sigma 1.5

Operators that work on floating images run on a float copy of the input,
which is rounded back to 8-bit before writing.
"""

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional

from imgproc import __version__
from imgproc.constants import Refl, Scale, Tone
from imgproc.core.config import GlobalConfig, LoggingConfig, load_config, set_current_config
from imgproc.core.exceptions import ImgProcError
from imgproc.core.image import Image
from imgproc.io import read, write
from imgproc.processing import bilateral, colorspace, edge, filters, median, morphology, tone, transform

logger = logging.getLogger("imgproc.cli")


def _on_float(f: Callable[[Image], Image]) -> Callable[[Image], Image]:
    def run(image: Image) -> Image:
        return f(image.to_float()).to_u8()
    return run


def _grayscale(args):
    return colorspace.rgb_to_grayscale


def _blur(args):
    return _on_float(lambda image: filters.gaussian_blur(image, args.size, args.sigma))


def _median(args):
    return lambda image: median.median_filter(image, args.radius)


def _bilateral(args):
    return lambda image: bilateral.bilateral_filter(image, args.range, args.spatial)


def _brightness(args):
    return lambda image: tone.brightness(image, args.bias, Tone(args.method))


def _contrast(args):
    return lambda image: tone.contrast(image, args.gain, Tone(args.method))


def _equalize(args):
    return lambda image: tone.histogram_equalization(image, args.alpha)


def _rotate(args):
    return lambda image: transform.rotate(image, args.degrees)


def _scale(args):
    y_factor = args.factor if args.y_factor is None else args.y_factor
    return _on_float(lambda image: transform.scale(image, args.factor, y_factor, Scale(args.method)))


def _reflect(args):
    return lambda image: transform.reflect(image, Refl(args.axis))


def _erode(args):
    return lambda image: morphology.erode(image, args.radius)


def _dilate(args):
    return lambda image: morphology.dilate(image, args.radius)


def _sobel(args):
    return lambda image: edge.normalize_laplacian(edge.sobel(colorspace.rgb_to_grayscale_f(image.to_float())))


COMMANDS: Dict[str, Callable] = {
    "grayscale": _grayscale,
    "blur": _blur,
    "median": _median,
    "bilateral": _bilateral,
    "brightness": _brightness,
    "contrast": _contrast,
    "equalize": _equalize,
    "rotate": _rotate,
    "scale": _scale,
    "reflect": _reflect,
    "erode": _erode,
    "dilate": _dilate,
    "sobel": _sobel,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imgproc",
        description="Apply an imgproc operator to an 8-bit PNG, JPEG or TIFF image"
    )
    parser.add_argument("--version", action="version", version=f"imgproc {__version__}")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML configuration file (processing and logging sections)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override the configured log level (DEBUG, INFO, WARNING, ...)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_command(name: str, help_text: str) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("input", help="Input image path")
        sub.add_argument("output", help="Output image path")
        return sub

    add_command("grayscale", "Convert RGB to grayscale")

    sub = add_command("blur", "Gaussian blur")
    sub.add_argument("--size", type=int, default=3, help="Odd kernel size")
    sub.add_argument("--sigma", type=float, default=1.0, help="Standard deviation")

    sub = add_command("median", "Median filter")
    sub.add_argument("--radius", type=int, default=1, help="Window radius")

    sub = add_command("bilateral", "Edge-preserving bilateral filter (RGB)")
    sub.add_argument("--range", type=float, default=10.0, help="Range sigma in CIELAB units")
    sub.add_argument("--spatial", type=float, default=1.0, help="Spatial sigma in pixels")

    sub = add_command("brightness", "Shift brightness")
    sub.add_argument("--bias", type=int, required=True, help="Bias in [-255, 255]")
    sub.add_argument("--method", choices=[t.value for t in Tone], default=Tone.RGB.value)

    sub = add_command("contrast", "Scale contrast")
    sub.add_argument("--gain", type=float, required=True, help="Non-negative gain")
    sub.add_argument("--method", choices=[t.value for t in Tone], default=Tone.RGB.value)

    sub = add_command("equalize", "Histogram equalization of L* (RGB)")
    sub.add_argument("--alpha", type=float, default=1.0, help="Amount of equalization in [0, 1]")

    sub = add_command("rotate", "Rotate counterclockwise")
    sub.add_argument("--degrees", type=float, required=True)

    sub = add_command("scale", "Resize")
    sub.add_argument("--factor", type=float, required=True, help="Horizontal (and default vertical) factor")
    sub.add_argument("--y-factor", type=float, default=None, help="Vertical factor")
    sub.add_argument("--method", choices=[s.value for s in Scale], default=Scale.BILINEAR.value)

    sub = add_command("reflect", "Flip rows or columns")
    sub.add_argument("--axis", choices=[r.value for r in Refl], default=Refl.VERTICAL.value)

    sub = add_command("erode", "Binary erosion")
    sub.add_argument("--radius", type=int, default=1)

    sub = add_command("dilate", "Binary dilation")
    sub.add_argument("--radius", type=int, default=1)

    add_command("sobel", "Sobel edge magnitude, rescaled to 8-bit")

    return parser


def _setup_logging(config: LoggingConfig, level_override: Optional[str]) -> None:
    level_name = (level_override or config.level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ImgProcError(f"unknown log level: {level_name}")

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(config.format))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    logging.getLogger("imgproc").setLevel(level)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line tool; returns the process exit code."""
    args = _build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else GlobalConfig()
        _setup_logging(config.logging, args.log_level)
        set_current_config(config)

        operator = COMMANDS[args.command](args)
        image = read(args.input)
        logger.info(f"Running {args.command} on {args.input}")
        write(operator(image), args.output)
    except (ImgProcError, OSError) as e:
        print(f"imgproc: error: {e}", file=sys.stderr)
        return 1
    finally:
        set_current_config(None)

    return 0


if __name__ == "__main__":
    sys.exit(main())
