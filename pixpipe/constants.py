"""Constants"""

# pylint: disable=too-few-public-methods
class C:
    """Constants"""
    PPM_MAGIC = 'P6'
    PPM_MAX_VALUE = 255
    CHANNELS = 3
    DEFAULT_WORKERS = 4
    DEFAULT_JPEG_QUALITY = 100
    PPM_EXTENSIONS = set(['.ppm'])
    JPEG_EXTENSIONS = set(['.jpg','.jpeg'])
