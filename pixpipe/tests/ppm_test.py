"""
Tests for the PPM codec
"""

import pytest
import sys
import io
import os
import tempfile

from os.path import abspath, dirname, join

import numpy as np

sys.path.append(join(dirname(dirname(dirname(abspath(__file__))))))

from pixpipe import ppm
from pixpipe.ppm import PpmHeader
from pixpipe.grid import PixelGrid, Pixel, P_PATH
from pixpipe.filters import Grayscale
from pixpipe.errors import (ImageError, UnsupportedFormat, MalformedHeader,
                            TruncatedData, ImageIOError)

TWO_BY_TWO = b"P6\n2 2\n255\n" + bytes([10,20,30, 40,50,60, 70,80,90, 100,110,120])

def random_grid(width, height, seed=0):
    rng = np.random.default_rng(seed)
    return PixelGrid(width, height, img=rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8))

def test_decode():
    grid, header = ppm.decode(io.BytesIO(TWO_BY_TWO))
    assert header == PpmHeader(2, 2, 255, 'P6')
    assert list(grid.pixels()) == [Pixel(10,20,30), Pixel(40,50,60), Pixel(70,80,90), Pixel(100,110,120)]

def test_grayscale_scenario():
    grid, header = ppm.decode(io.BytesIO(TWO_BY_TWO))
    Grayscale().apply(grid)
    expected = [Pixel(20,20,20), Pixel(50,50,50), Pixel(80,80,80), Pixel(110,110,110)]
    assert list(grid.pixels()) == expected

    out = io.BytesIO()
    n = ppm.encode(grid, header, out)
    assert n == len(out.getvalue())
    grid2, header2 = ppm.decode(io.BytesIO(out.getvalue()))
    assert header2 == header
    assert list(grid2.pixels()) == expected

def test_encode_layout():
    grid, header = ppm.decode(io.BytesIO(TWO_BY_TWO))
    out = io.BytesIO()
    assert ppm.encode(grid, header, out) == len(TWO_BY_TWO)
    assert out.getvalue() == TWO_BY_TWO

@pytest.mark.parametrize("width,height", [(1,1), (3,1), (1,4), (17,9)])
def test_round_trip(width, height):
    grid = random_grid(width, height, seed=width*100+height)
    out = io.BytesIO()
    ppm.encode(grid, PpmHeader.for_grid(grid), out)
    grid2, header2 = ppm.decode(io.BytesIO(out.getvalue()))
    assert grid2 == grid
    assert header2 == PpmHeader(width, height)

def test_header_comments_and_whitespace():
    data = b"P6 # made by hand\n# another comment\n2\t1\r\n255\n" + bytes(range(6))
    grid, header = ppm.decode(io.BytesIO(data))
    assert (header.width, header.height) == (2, 1)
    assert grid[0, 1] == Pixel(3, 4, 5)

def test_exactly_one_whitespace_byte_after_header():
    # the pixel data starts with a byte that happens to be whitespace
    data = b"P6\n1 1\n255\n" + b"\n\t "
    grid, _ = ppm.decode(io.BytesIO(data))
    assert grid[0, 0] == Pixel(10, 9, 32)

@pytest.mark.parametrize("data", [
    b"P3\n2 2\n255\n" + bytes(12),
    b"P5\n2 2\n255\n" + bytes(12),
    b"",
    b"JFIF garbage",
    b"P6\n2 2\n65535\n" + bytes(24),
    b"P6\n2 2\n15\n" + bytes(12),
    b"X" * 30,
    b"P6" * 12 + b"\n1 1\n255\n" + bytes(3),
])
def test_unsupported(data):
    with pytest.raises(UnsupportedFormat):
        ppm.decode(io.BytesIO(data))

@pytest.mark.parametrize("data", [
    b"P6\n",
    b"P6\n2\n",
    b"P6\n2 2\n",
    b"P6\n0 2\n255\n",
    b"P6\n2 0\n255\n",
    b"P6\n2 -2\n255\n",
    b"P6\nwide 2\n255\n",
    b"P6\n2 2\n0\n",
    b"P6\n" + b"1" * 22 + b" 1\n255\n",
    b"P6\n1 " + b"1" * 22 + b"\n255\n",
    b"P6\n1 1\n" + b"2" * 22 + b"\n",
])
def test_malformed_header(data):
    with pytest.raises(MalformedHeader):
        ppm.decode(io.BytesIO(data))

def test_truncated():
    data = TWO_BY_TWO[:-4]
    with pytest.raises(TruncatedData) as e:
        ppm.decode(io.BytesIO(data))
    assert e.value.expected == 12
    assert e.value.actual == 8

def test_truncated_is_not_a_format_error():
    with pytest.raises(TruncatedData) as e:
        ppm.decode(io.BytesIO(b"P6\n2 2\n255"))
    assert not isinstance(e.value, (UnsupportedFormat, MalformedHeader))
    assert isinstance(e.value, ImageError)

def test_encode_rejects_mismatched_header():
    grid = PixelGrid(2, 2)
    with pytest.raises(ValueError):
        ppm.encode(grid, PpmHeader(3, 2), io.BytesIO())
    with pytest.raises(UnsupportedFormat):
        ppm.encode(grid, PpmHeader(2, 2, 65535), io.BytesIO())

class FailingStream:
    def __init__(self, limit):
        self.limit = limit
        self.data = b''
    def write(self, data):
        if len(self.data) + len(data) > self.limit:
            raise OSError(28, "No space left on device")
        self.data += data
        return len(data)

def test_encode_write_failure():
    grid = random_grid(4, 4)
    s = FailingStream(20)
    with pytest.raises(ImageIOError) as e:
        ppm.encode(grid, None, s)
    assert isinstance(e.value, OSError)
    # the header made it out before the failure
    assert s.data == b"P6\n4 4\n255\n"

def test_load_and_save():
    grid = random_grid(5, 3)
    with tempfile.TemporaryDirectory() as tmpdir:
        path = join(tmpdir, 'sub', 'image.ppm')
        n = ppm.save(grid, path)
        assert os.path.getsize(path) == n
        grid2, header = ppm.load(path)
        assert grid2 == grid
        assert header == PpmHeader(5, 3)
        assert grid2.history == [[P_PATH, path]]

def test_load_missing_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ImageIOError):
            ppm.load(join(tmpdir, 'nope.ppm'))
