"""
Errors reported by the codec, the storage layer and the executor.
All of them derive from ImageError so that a driver can report any of them
with a single except clause.
"""

class ImageError(RuntimeError):
    """Base class for everything pixpipe reports"""


class UnsupportedFormat(ImageError):
    """Wrong magic token or an unsupported max value"""


class MalformedHeader(ImageError):
    """A header field is missing, not a number, or not positive"""


class TruncatedData(ImageError):
    """The stream ended before width*height pixels were read"""
    def __init__(self, expected, actual):
        super().__init__(f"expected {expected} bytes of pixel data, got {actual}")
        self.expected = expected
        self.actual   = actual


class ImageIOError(ImageError, OSError):
    """open, read or write failed at the storage boundary"""


class CodecError(ImageError):
    """The external image codec could not load or save an image"""


class InvalidPartition(ImageError, ValueError):
    """worker_count cannot partition the rows of a grid"""
    def __init__(self, height, worker_count):
        super().__init__(f"cannot split {height} rows among {worker_count} workers")
        self.height = height
        self.worker_count = worker_count
