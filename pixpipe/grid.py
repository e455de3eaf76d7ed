"""This module provides the following classes:

Pixel - A single (r, g, b) value.

PixelGrid - Holds an image as a numpy array of shape (height, width, 3) and
            the logic for reading and writing pixels and row ranges.

Grids are exclusively owned. Every operation that produces another grid
(copy, snapshot, resize) allocates new storage, so that no two grids
ever share a buffer.
"""

import copy
import logging
from collections import namedtuple

import numpy as np

from .constants import C

P_PATH = 'path'
P_FILTER = 'filter'

Pixel = namedtuple('Pixel', ['r', 'g', 'b'])


class PixelGrid:
    """A width x height grid of RGB pixels in row-major order.
    Pixel (row, col) is at index row*width+col of the flattened buffer."""

    def __init__(self, width, height, *, img=None, history=None):
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
        if img is None:
            img = np.zeros((height, width, C.CHANNELS), dtype=np.uint8)
        else:
            img = np.array(img, dtype=np.uint8, copy=True)
            if img.shape != (height, width, C.CHANNELS):
                raise ValueError(f"img shape {img.shape} does not match {width}x{height}")
        self._img = img
        self.history = history if history is not None else []

    @classmethod
    def from_bytes(cls, width, height, data, history=None):
        """Create a grid from width*height*3 raw bytes"""
        buf = np.frombuffer(data, dtype=np.uint8)
        if buf.size != width * height * C.CHANNELS:
            raise ValueError(f"need {width*height*C.CHANNELS} bytes, got {buf.size}")
        return cls(width, height, img=buf.reshape((height, width, C.CHANNELS)), history=history)

    @property
    def width(self):
        return self._img.shape[1]

    @property
    def height(self):
        return self._img.shape[0]

    @property
    def shape(self):
        """Returns shape. note: shape[0] = height, shape[1]=width, shape[2]==depth"""
        return tuple(self._img.shape)

    @property
    def img(self):
        """The live pixel array. Writes go straight into the grid."""
        return self._img

    def __len__(self):
        return self.width * self.height

    def __getitem__(self, rc):
        (row, col) = rc
        return Pixel(*(int(v) for v in self._img[row, col]))

    def __setitem__(self, rc, pixel):
        (row, col) = rc
        self._img[row, col] = np.clip(np.asarray(pixel, dtype=np.int64), 0, C.PPM_MAX_VALUE)

    def __eq__(self, b):
        if not isinstance(b, PixelGrid):
            return NotImplemented
        return self.shape == b.shape and np.array_equal(self._img, b._img)

    def __repr__(self):
        return f"<PixelGrid {self.width}x{self.height} history={self.history}>"

    def rows(self, start_row, end_row):
        """Return a writable view of rows [start_row, end_row)"""
        if not 0 <= start_row <= end_row <= self.height:
            raise IndexError(f"row range [{start_row},{end_row}) outside [0,{self.height})")
        return self._img[start_row:end_row]

    def pixels(self):
        """Generate every pixel in row-major order"""
        for row in range(self.height):
            for col in range(self.width):
                yield self[row, col]

    def tobytes(self):
        """Raw R,G,B bytes in row-major order with no padding"""
        return np.ascontiguousarray(self._img).tobytes()

    def copy(self):
        """Returns a writable copy with its own storage and its own history."""
        return PixelGrid(self.width, self.height, img=self._img,
                         history=copy.deepcopy(self.history))

    def snapshot(self):
        """Returns a read-only copy of the pixels, for filters that read
        neighbouring pixels while the live grid is being written."""
        snap = self._img.copy()
        snap.flags.writeable = False
        return snap

    def resize(self, width, height):
        """Reallocate the grid at a new size. Pixels are reset to black."""
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
        logging.debug("resize %s to %sx%s", self, width, height)
        self._img = np.zeros((height, width, C.CHANNELS), dtype=np.uint8)

    def add_history(self, kind, value):
        self.history.append([kind, value])
