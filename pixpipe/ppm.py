"""
Reading and writing binary ("P6") PPM images.

File layout:

    P6\\n
    <width> <height>\\n
    <max-value>\\n
    <width*height pixels, each 3 raw bytes R,G,B, row-major, no padding>

Only max-value 255 is supported. Other values are reported as
UnsupportedFormat rather than rescaled.
"""

import logging
from collections import namedtuple

from .constants import C
from .errors import UnsupportedFormat, MalformedHeader, TruncatedData, ImageIOError
from .grid import PixelGrid, P_PATH
from .storage import storage_open

logger = logging.getLogger(__name__)

WHITESPACE = b' \t\n\r\v\f'
COMMENT = b'#'
MAX_TOKEN_LEN = 20
READ_CHUNK = 1024 * 1024


class PpmHeader(namedtuple('PpmHeader', ['width', 'height', 'max_value', 'magic'])):
    __slots__ = ()

    def __new__(cls, width, height, max_value=C.PPM_MAX_VALUE, magic=C.PPM_MAGIC):
        return super().__new__(cls, width, height, max_value, magic)

    @classmethod
    def for_grid(cls, grid):
        return cls(grid.width, grid.height)

    def validate(self):
        """Raise if this header describes something we cannot read or write."""
        if self.magic != C.PPM_MAGIC:
            raise UnsupportedFormat(f"magic {self.magic!r} is not {C.PPM_MAGIC!r}")
        for (name, value) in (('width', self.width), ('height', self.height),
                              ('max value', self.max_value)):
            if not isinstance(value, int) or value <= 0:
                raise MalformedHeader(f"{name} must be a positive integer, got {value!r}")
        if self.max_value != C.PPM_MAX_VALUE:
            raise UnsupportedFormat(f"max value {self.max_value} is not {C.PPM_MAX_VALUE}")
        return self

    @property
    def pixel_bytes(self):
        return self.width * self.height * C.CHANNELS

    def tobytes(self):
        return f"{self.magic}\n{self.width} {self.height}\n{self.max_value}\n".encode('ascii')


def _read(stream, n):
    try:
        return stream.read(n)
    except OSError as e:
        raise ImageIOError(f"read failed: {e}") from e


def _next_token(stream, name, too_long=MalformedHeader):
    """Return the next whitespace-delimited header token, or None at end of stream.
    The single whitespace byte that ends the token is consumed with it.
    Comments run from '#' to the end of the line and are skipped.
    A token longer than MAX_TOKEN_LEN raises too_long."""
    token = b''
    while True:
        ch = _read(stream, 1)
        if not ch:
            return token.decode('ascii', 'replace') if token else None
        if ch == COMMENT and not token:
            while ch not in (b'', b'\n', b'\r'):
                ch = _read(stream, 1)
            continue
        if ch in WHITESPACE:
            if token:
                return token.decode('ascii', 'replace')
            continue
        token += ch
        if len(token) > MAX_TOKEN_LEN:
            raise too_long(f"{name} is longer than {MAX_TOKEN_LEN} characters: {token.decode('ascii', 'replace')!r}...")


def _header_int(stream, name):
    token = _next_token(stream, name)
    if token is None:
        raise MalformedHeader(f"missing {name}")
    if not token.isdigit() or not token.isascii():
        raise MalformedHeader(f"{name} is not a number: {token!r}")
    value = int(token)
    if value <= 0:
        raise MalformedHeader(f"{name} must be positive, got {value}")
    return value


def read_header(stream):
    """Read and validate a PPM header, leaving the stream at the first pixel byte."""
    magic = _next_token(stream, "magic", too_long=UnsupportedFormat)
    if magic != C.PPM_MAGIC:
        raise UnsupportedFormat(f"not a binary PPM: magic is {magic!r}")
    width  = _header_int(stream, 'width')
    height = _header_int(stream, 'height')
    max_value = _header_int(stream, 'max value')
    return PpmHeader(width, height, max_value, magic).validate()


def decode(stream):
    """Decode a binary PPM stream. Returns (PixelGrid, PpmHeader)."""
    header = read_header(stream)
    need = header.pixel_bytes
    chunks = []
    got = 0
    while got < need:
        data = _read(stream, min(need - got, READ_CHUNK))
        if not data:
            break
        chunks.append(data)
        got += len(data)
    if got < need:
        raise TruncatedData(need, got)
    logger.debug("decoded %s", header)
    return PixelGrid.from_bytes(header.width, header.height, b''.join(chunks)), header


def encode(grid, header, stream):
    """Write grid to stream as a binary PPM. Returns the number of bytes written.
    On a write failure the stream may hold a partial image."""
    if header is None:
        header = PpmHeader.for_grid(grid)
    header.validate()
    if (header.width, header.height) != (grid.width, grid.height):
        raise ValueError(f"header {header.width}x{header.height} does not match grid {grid.width}x{grid.height}")
    written = 0
    try:
        for data in (header.tobytes(), grid.tobytes()):
            stream.write(data)
            written += len(data)
    except OSError as e:
        raise ImageIOError(f"write failed after {written} bytes: {e}") from e
    logger.debug("encoded %s: %s bytes", header, written)
    return written


def load(path):
    """Read the PPM file at path. Returns (PixelGrid, PpmHeader)."""
    with storage_open(path, 'rb') as f:
        grid, header = decode(f)
    grid.add_history(P_PATH, str(path))
    return grid, header


def save(grid, path, header=None):
    """Write grid to path as a PPM file. Returns the number of bytes written."""
    with storage_open(path, 'wb') as f:
        written = encode(grid, header, f)
    grid.add_history(P_PATH, str(path))
    return written
