"""
Filter implementations.

A filter is a named, stateless operation with bound parameters. apply()
mutates rows [start_row, end_row) of a PixelGrid in place; whole-grid
callers pass nothing and get [0, height). All arithmetic is done in a wide
integer or float type and saturated to [0,255]; nothing wraps.

Filters come in two kinds:

POINT        - output pixel (r,c) depends only on input pixel (r,c). Running
               them on disjoint row ranges from several threads is safe.
NEIGHBORHOOD - output pixel (r,c) depends on adjacent pixels. They read from
               a read-only snapshot of the whole grid taken before any writes
               and only write the live grid. Border pixels are left unchanged.

Every new filter must declare its kind; the executor relies on it to decide
whether a snapshot is needed.
"""

import logging
from abc import ABC,abstractmethod

import numpy as np

from .constants import C

logger = logging.getLogger(__name__)

POINT = 'point'
NEIGHBORHOOD = 'neighborhood'

MAXV = C.PPM_MAX_VALUE

def saturate(values):
    """Clamp to [0,255] and return as uint8"""
    return np.clip(values, 0, MAXV).astype(np.uint8)

def round_half_up(values):
    return np.floor(values + 0.5)

def whole_number(value):
    """int(value), but only for values that are already whole numbers: 50, "50", 50.0.
    1.5 and "1.5" are rejected instead of truncated."""
    if isinstance(value, bool):
        raise ValueError(f"expected an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"expected an integer, got {value!r}")
    if isinstance(value, str):
        value = value.strip()
    return int(value)

def gray_of(block):
    """floor((r+g+b)/3) of an integer block of shape (..., 3)"""
    return block.sum(axis=-1) // 3


class Filter(ABC):
    """Abstract base class for filters"""
    kind = POINT
    name = None
    param_type = None           # type of the single bound parameter, if any

    def __init__(self, param=None):
        if self.param_type is not None:
            if param is None:
                raise ValueError(f"{self.name} requires a {self.param_type.__name__} parameter")
            try:
                param = self.param_type(param)
            except (TypeError, ValueError) as e:
                raise ValueError(f"bad {self.name} parameter {param!r}: {e}") from e
        elif param is not None:
            raise ValueError(f"{self.name} takes no parameter")
        self.param = param

    def __eq__(self, b):
        return type(self) is type(b) and self.param == b.param

    def __hash__(self):
        return hash((self.name, self.param))

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.describe()}>"

    def describe(self):
        """Short form used in grid history and on the command line, e.g. brightness:50"""
        return self.name if self.param is None else f"{self.name}:{self.param}"

    @property
    def needs_snapshot(self):
        return self.kind == NEIGHBORHOOD

    def __call__(self, grid, start_row=0, end_row=None, snapshot=None):
        return self.apply(grid, start_row, end_row, snapshot)

    def apply(self, grid, start_row=0, end_row=None, snapshot=None):
        """Filter rows [start_row, end_row) of grid in place."""
        if end_row is None:
            end_row = grid.height
        view = grid.rows(start_row, end_row)   # validates the range
        if start_row == end_row:
            return grid
        self._apply(grid, view, start_row, end_row, snapshot)
        return grid

    @abstractmethod
    def _apply(self, grid, view, start_row, end_row, snapshot):
        """Subclasses do the work here."""


class PointFilter(Filter):
    """A filter whose output pixel depends only on the same input pixel"""
    kind = POINT

    def _apply(self, grid, view, start_row, end_row, snapshot):
        view[...] = self.transform(view.astype(np.int32))

    @abstractmethod
    def transform(self, block):
        """Given an int32 block of shape (rows, width, 3), return the new uint8 block"""


class NeighborhoodFilter(Filter):
    """A 3x3 filter that reads a snapshot and writes only interior pixels"""
    kind = NEIGHBORHOOD

    def _apply(self, grid, view, start_row, end_row, snapshot):
        if snapshot is None:
            logger.debug("%s taking its own snapshot", self.name)
            snapshot = grid.snapshot()
        (height, width) = snapshot.shape[:2]
        r0 = max(start_row, 1)
        r1 = min(end_row, height - 1)
        if r0 >= r1 or width < 3:
            return
        # rows r0-1 .. r1 inclusive of the snapshot, as a wide type
        src = snapshot[r0-1:r1+1].astype(np.int32)
        grid.img[r0:r1, 1:width-1] = self.compute(src)

    @staticmethod
    def shifted(src, dr, dc):
        """The (rows-2, width-2) window of src offset by (dr, dc) from the centre"""
        (h, w) = src.shape[:2]
        return src[1+dr:h-1+dr, 1+dc:w-1+dc]

    @abstractmethod
    def compute(self, src):
        """Given int32 rows r0-1..r1 of the snapshot, return uint8 values for the interior of r0..r1-1"""


class Grayscale(PointFilter):
    name = 'grayscale'
    def transform(self, block):
        gray = gray_of(block)
        return saturate(np.repeat(gray[..., np.newaxis], C.CHANNELS, axis=-1))


class Invert(PointFilter):
    name = 'invert'
    def transform(self, block):
        return saturate(MAXV - block)


class Brightness(PointFilter):
    """Add delta to every channel. Negative deltas darken."""
    name = 'brightness'
    param_type = staticmethod(whole_number)
    def transform(self, block):
        return saturate(block + self.param)


class Contrast(PointFilter):
    """Stretch every channel away from (or towards) mid-grey 128."""
    name = 'contrast'
    param_type = float
    def transform(self, block):
        return saturate(round_half_up((block - 128) * self.param + 128))


class Threshold(PointFilter):
    """White where the grey level is above level, black elsewhere."""
    name = 'threshold'
    param_type = staticmethod(whole_number)
    def transform(self, block):
        on = gray_of(block) > self.param
        out = np.where(on, MAXV, 0)
        return saturate(np.repeat(out[..., np.newaxis], C.CHANNELS, axis=-1))


class Sepia(PointFilter):
    name = 'sepia'
    MATRIX = np.array([[0.393, 0.769, 0.189],
                       [0.349, 0.686, 0.168],
                       [0.272, 0.534, 0.131]])
    def transform(self, block):
        return saturate(np.floor(block @ self.MATRIX.T))


class Saturation(PointFilter):
    """Scale each channel's distance from the pixel's grey level.
    0 gives grey, 1 leaves the pixel alone, >1 makes colours more vivid."""
    name = 'saturation'
    param_type = float
    def transform(self, block):
        gray = (block.sum(axis=-1) / 3.0)[..., np.newaxis]
        return saturate(round_half_up(gray + (block - gray) * self.param))


class Blur(NeighborhoodFilter):
    """3x3 box average"""
    name = 'blur'
    def compute(self, src):
        total = sum(self.shifted(src, dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1))
        return saturate(total // 9)


class Sharpen(NeighborhoodFilter):
    name = 'sharpen'
    def compute(self, src):
        s = self.shifted
        return saturate(5 * s(src, 0, 0) - s(src, -1, 0) - s(src, 1, 0) - s(src, 0, -1) - s(src, 0, 1))


class EdgeDetect(NeighborhoodFilter):
    """Sobel gradient magnitude of the grey level, written to all three channels."""
    name = 'edge'
    SOBEL_X = ((-1, 0, 1), (-2, 0, 2), (-1, 0, 1))
    SOBEL_Y = ((-1, -2, -1), (0, 0, 0), (1, 2, 1))
    def compute(self, src):
        gray = gray_of(src)
        gx = sum(self.SOBEL_X[dr+1][dc+1] * self.shifted(gray, dr, dc)
                 for dr in (-1, 0, 1) for dc in (-1, 0, 1))
        gy = sum(self.SOBEL_Y[dr+1][dc+1] * self.shifted(gray, dr, dc)
                 for dr in (-1, 0, 1) for dc in (-1, 0, 1))
        mag = np.floor(np.sqrt(gx.astype(np.float64)**2 + gy.astype(np.float64)**2))
        return saturate(np.repeat(mag[..., np.newaxis], C.CHANNELS, axis=-1))


FILTERS = {cls.name: cls for cls in (Grayscale, Invert, Brightness, Contrast, Threshold,
                                     Blur, Sharpen, Sepia, Saturation, EdgeDetect)}


def make_filter(entry):
    """Build a filter from a config entry.
    Accepts a Filter, a name ("blur"), "name:param" ("brightness:50")
    or a single-entry mapping ({"contrast": 1.5})."""
    if isinstance(entry, Filter):
        return entry
    if isinstance(entry, dict):
        if len(entry) != 1:
            raise ValueError(f"filter entry must have exactly one key: {entry!r}")
        ((name, param),) = entry.items()
    elif isinstance(entry, str):
        (name, _, param) = entry.partition(':')
        param = param if param else None
    else:
        raise ValueError(f"cannot make a filter from {entry!r}")
    name = name.strip().lower()
    if name not in FILTERS:
        raise ValueError(f"unknown filter '{name}'. Must be one of " + " ".join(sorted(FILTERS)))
    return FILTERS[name](param)
