"""
Tests for the pixel grid
"""

import pytest
import sys

from os.path import abspath, dirname, join

import numpy as np

sys.path.append(join(dirname(dirname(dirname(abspath(__file__))))))

from pixpipe.grid import PixelGrid, Pixel, P_PATH

def test_new_grid_is_black():
    g = PixelGrid(4, 3)
    assert g.width == 4
    assert g.height == 3
    assert g.shape == (3, 4, 3)
    assert len(g) == 12
    assert all(p == Pixel(0, 0, 0) for p in g.pixels())

def test_bad_dimensions():
    with pytest.raises(ValueError):
        PixelGrid(0, 3)
    with pytest.raises(ValueError):
        PixelGrid(3, -1)
    with pytest.raises(ValueError):
        PixelGrid(2, 2, img=np.zeros((3, 2, 3), dtype=np.uint8))

def test_row_major_layout():
    data = bytes(range(2 * 3 * 3))
    g = PixelGrid.from_bytes(2, 3, data)
    # pixel (row, col) lives at index row*width+col
    assert g[0, 0] == Pixel(0, 1, 2)
    assert g[0, 1] == Pixel(3, 4, 5)
    assert g[1, 0] == Pixel(6, 7, 8)
    assert g[2, 1] == Pixel(15, 16, 17)
    assert g.tobytes() == data

def test_setitem_saturates():
    g = PixelGrid(1, 1)
    g[0, 0] = (300, -5, 7)
    assert g[0, 0] == Pixel(255, 0, 7)

def test_copies_do_not_share_storage():
    img = np.full((2, 2, 3), 9, dtype=np.uint8)
    g = PixelGrid(2, 2, img=img)
    img[0, 0] = 0
    assert g[0, 0] == Pixel(9, 9, 9)

    g.add_history(P_PATH, 'a.ppm')
    c = g.copy()
    assert c == g
    c[1, 1] = (1, 2, 3)
    c.add_history(P_PATH, 'b.ppm')
    assert c != g
    assert g[1, 1] == Pixel(9, 9, 9)
    assert g.history == [[P_PATH, 'a.ppm']]

def test_snapshot_is_read_only():
    g = PixelGrid(3, 3)
    snap = g.snapshot()
    with pytest.raises(ValueError):
        snap[0, 0] = 1
    g[0, 0] = (5, 5, 5)
    assert snap[0, 0].tolist() == [0, 0, 0]

def test_resize_reallocates():
    g = PixelGrid(2, 2)
    g[0, 0] = (1, 1, 1)
    old = g.img
    g.resize(5, 4)
    assert g.shape == (4, 5, 3)
    assert g.img is not old
    assert not np.shares_memory(g.img, old)
    assert g[0, 0] == Pixel(0, 0, 0)

def test_rows():
    g = PixelGrid(2, 4)
    g.rows(1, 3)[...] = 7
    assert g[0, 0] == Pixel(0, 0, 0)
    assert g[1, 0] == Pixel(7, 7, 7)
    assert g[2, 1] == Pixel(7, 7, 7)
    assert g[3, 1] == Pixel(0, 0, 0)
    with pytest.raises(IndexError):
        g.rows(2, 5)
