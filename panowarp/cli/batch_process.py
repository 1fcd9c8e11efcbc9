import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from ..exceptions import PanowarpError
from ..models.color_adjustments import ColorAdjustments
from ..pipeline.color_adjuster import adjust_gallery
from ..pipeline.panorama_projector import project_panorama_file
from ..services.image_service import ImageService
from ..services.pixel_transform_service import PixelTransformService

# Load environment variables first
load_dotenv()

LOG_FORMAT = '%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s'

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt='%H:%M:%S'
    )


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="panowarp",
        description="Color adjustments and importance-weighted panorama dewarping.")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    adj = sub.add_parser("adjust", help="apply color adjustments to an image or a folder")
    adj.add_argument("input", help="image file or directory of images")
    adj.add_argument("-o", "--output", help="output file (single input) or directory")
    adj.add_argument("--brightness", type=int, default=0)
    adj.add_argument("--contrast", type=float, default=1.0)
    adj.add_argument("--saturation", type=float, default=1.0)
    adj.add_argument("--temperature", type=int, default=0)
    adj.add_argument("--grayscale", action="store_true")
    adj.add_argument("--blur", type=int, default=0, metavar="RADIUS")
    adj.add_argument("--invert", action="store_true")
    adj.add_argument("--quality", type=int, default=None, help="JPEG quality 1..100")

    proj = sub.add_parser("project", help="dewarp a panorama to the fixed-aspect canvas")
    proj.add_argument("panorama")
    proj.add_argument("--mask", help="importance mask (defaults to WARP_MASK_PATH)")
    proj.add_argument("-o", "--output-dir", default=None)
    proj.add_argument("--quality", type=int, default=None, help="JPEG quality 1..100")
    return ap


def _run_adjust(args, image_service: ImageService) -> None:
    transform_service = PixelTransformService()
    adjustments = ColorAdjustments(
        brightness=args.brightness,
        contrast=args.contrast,
        saturation=args.saturation,
        temperature=args.temperature,
    )
    if adjustments.is_identity() and not (args.grayscale or args.blur > 0 or args.invert):
        raise ValueError("No adjustment requested")

    src = Path(args.input)
    gallery = image_service.stream_gallery(src) if src.is_dir() else iter([image_service.load(src)])
    if not adjustments.is_identity():
        gallery = adjust_gallery(gallery, adjustments, transform_service=transform_service)

    for img in gallery:
        if args.grayscale:
            img = transform_service.apply_grayscale(img)
        if args.blur > 0:
            img = transform_service.apply_blur(img, args.blur)
        if args.invert:
            img = transform_service.apply_invert(img)

        out_path = img.path
        if args.output:
            out = Path(args.output)
            if src.is_dir():
                out.mkdir(parents=True, exist_ok=True)
                out_path = out / img.path.name
            else:
                out_path = out
        image_service.save(img, out_path, args.quality)


def _run_project(args, image_service: ImageService) -> None:
    kwargs = {"quality": args.quality, "image_service": image_service}
    if args.output_dir:
        kwargs["output_dir"] = args.output_dir
    out_path = project_panorama_file(args.panorama, args.mask, **kwargs)
    print(f"Projected panorama saved to {out_path}")


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    image_service = ImageService()
    try:
        if args.command == "adjust":
            _run_adjust(args, image_service)
        else:
            _run_project(args, image_service)
    except (PanowarpError, ValueError, OSError) as err:
        logger.error("%s failed: %s", args.command, err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
