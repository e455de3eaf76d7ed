#!/usr/bin/env python3
"""
Read an image, run it through a filter pipeline, and write the result.

PPM files are read and written with pixpipe.ppm; other formats (JPEG, PNG)
go through OpenCV. Exit status is 0 on success and 1 on any read, write,
format or configuration error.
"""

import os
import sys
import logging
import argparse

import yaml

from .constants import C
from .config import PipelineConfig, load_config
from .errors import ImageError
from .pipeline import SingleThreadedPipeline, MultiThreadedPipeline
from . import ppm
from . import codec

logger = logging.getLogger(__name__)


def is_ppm(path):
    return os.path.splitext(os.fspath(path))[1].lower() in C.PPM_EXTENSIONS


def read_grid(path):
    if is_ppm(path):
        (grid, _) = ppm.load(path)
        return grid
    return codec.load_grid(path)


def write_grid(grid, path, quality):
    if is_ppm(path):
        ppm.save(grid, path)
    else:
        codec.save_grid(grid, path, quality)


def run(config, verbose=False, debug=False, out=sys.stdout):
    """Run the pipeline described by config. Returns the filtered grid."""
    grid = read_grid(config.input)
    logger.info("read %s", grid)
    if config.workers > 1:
        p = MultiThreadedPipeline(config.filters, workers=config.workers,
                                  verbose=verbose, debug=debug, out=out)
    else:
        p = SingleThreadedPipeline(config.filters, verbose=verbose, debug=debug, out=out)
    with p:
        p.apply(grid)
    write_grid(grid, config.output, config.quality)
    logger.info("wrote %s", grid)
    return grid


def get_parser():
    parser = argparse.ArgumentParser(description="Apply a pipeline of filters to a PPM (or JPEG/PNG) image",
                                     formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument("input", nargs="?", help="Input image. Defaults to the config file's input")
    parser.add_argument("output", nargs="?", help="Output image. Defaults to the config file's output")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--workers", type=int, help="Number of threads per filter (default 1)")
    parser.add_argument("--filter", dest="filters", action="append",
                        help="Filter to apply, e.g. blur or brightness:50. May be repeated; replaces the config file's filters")
    parser.add_argument("--quality", type=int, help="JPEG quality for non-PPM output")
    parser.add_argument("--verbose", help="Print progress and per-filter timing", action="store_true")
    parser.add_argument("--debug", help="Print debugging information", action="store_true")
    return parser


def main(argv=None):
    args = get_parser().parse_args(argv)
    logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s',
                        level=logging.DEBUG if args.debug else logging.INFO if args.verbose else logging.WARNING)
    try:
        config = load_config(args.config) if args.config else PipelineConfig()
        config.update(input=args.input, output=args.output, workers=args.workers,
                      filters=args.filters, quality=args.quality)
        if config.input is None or config.output is None:
            logger.error("an input and an output image are required")
            return 1
        config.validate()
        run(config, verbose=args.verbose, debug=args.debug)
    except (ImageError, OSError, ValueError, yaml.YAMLError) as e:
        logger.error("%s: %s", e.__class__.__name__, e)
        return 1
    return 0


if __name__=="__main__":
    sys.exit(main())
