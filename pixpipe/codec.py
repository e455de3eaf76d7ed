"""
Wrapper around OpenCV for image formats other than PPM (JPEG, PNG, ...).
The codec is a black box: load() gives back a pixel buffer and its
dimensions, save() takes them and writes an encoded file. Any failure is
reported as a CodecError carrying the reason.

Buffers are numpy uint8 arrays of shape (height, width, channels) in RGB order.
"""

import os
import logging

import cv2
import numpy as np

from .constants import C
from .errors import CodecError
from .grid import PixelGrid, P_PATH
from .storage import storage_load, storage_save

logger = logging.getLogger(__name__)


def load(path):
    """Returns (buffer, width, height, channel_count)"""
    data = storage_load(path)
    img = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_ANYCOLOR)
    if img is None:
        raise CodecError(f"cannot decode '{path}'")
    if len(img.shape)==2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
    elif img.shape[2]==4:
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2RGB)
    else:
        img = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    (height, width, channels) = img.shape
    logger.debug("loaded %s: %sx%sx%s", path, width, height, channels)
    return img, width, height, channels


def save(path, buf, width, height, channel_count, quality=C.DEFAULT_JPEG_QUALITY):
    """Encode buf according to the extension of path and write it."""
    ext = os.path.splitext(os.fspath(path))[1].lower()
    img = np.asarray(buf, dtype=np.uint8).reshape((height, width, channel_count))
    if channel_count == C.CHANNELS:
        img = cv2.cvtColor(img, cv2.COLOR_RGB2BGR)
    params = []
    if ext in C.JPEG_EXTENSIONS:
        params = [cv2.IMWRITE_JPEG_QUALITY, int(quality)]
    try:
        ok, encoded = cv2.imencode(ext, img, params)
    except cv2.error as e: # pylint: disable=catching-non-exception
        raise CodecError(f"cannot encode '{path}': {e}") from e
    if not ok:
        raise CodecError(f"cannot encode '{path}'")
    storage_save(path, encoded.tobytes())
    logger.debug("saved %s: %sx%sx%s quality=%s", path, width, height, channel_count, quality)


def load_grid(path):
    (img, width, height, _) = load(path)
    grid = PixelGrid(width, height, img=img)
    grid.add_history(P_PATH, str(path))
    return grid


def save_grid(grid, path, quality=C.DEFAULT_JPEG_QUALITY):
    save(path, grid.img, grid.width, grid.height, C.CHANNELS, quality)
    grid.add_history(P_PATH, str(path))
