"""
Run configuration for the pixpipe driver.

A configuration file is YAML:

    input: images/apollo.ppm
    output: out/apollo_filtered.ppm
    workers: 4
    quality: 100
    filters:
      - grayscale
      - invert
      - brightness: 50
      - contrast: 1.5
      - threshold: 128
      - blur
      - sharpen
      - sepia

Values given on the command line override the file.
"""

import json
import logging

import yaml

from .constants import C
from .filters import make_filter
from .storage import storage_open

logger = logging.getLogger(__name__)

class PipelineConfig:
    __slots__=('input','output','workers','filters','quality')
    def __init__(self,**kwargs):
        self.input = None
        self.output = None
        self.workers = 1
        self.filters = []
        self.quality = C.DEFAULT_JPEG_QUALITY
        self.update(**kwargs)

    def __repr__(self):
        return f"<PipelineConfig {json.dumps(self.dict(), default=str)}>"

    def dict(self):
        return {k:getattr(self,k) for k in self.__slots__}

    def update(self, **kwargs):
        """Set every option that is not None"""
        for (k,v) in kwargs.items():
            if k not in self.__slots__:
                raise ValueError(f"unknown configuration option '{k}'")
            if v is not None:
                setattr(self,k,v)
        return self

    def validate(self):
        if not isinstance(self.workers, int) or self.workers < 1:
            raise ValueError(f"workers must be a positive integer, got {self.workers!r}")
        if not isinstance(self.filters, list):
            raise ValueError(f"filters must be a list, got {self.filters!r}")
        if not 0 <= int(self.quality) <= 100:
            raise ValueError(f"quality must be between 0 and 100, got {self.quality!r}")
        self.filters = [make_filter(f) for f in self.filters]
        return self


def load_config(path):
    """Read a YAML configuration file"""
    with storage_open(path, 'rb') as f:
        config = yaml.safe_load(f)
    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ValueError(f"{path}: configuration must be a mapping")
    logger.debug("config %s: %s", path, json.dumps(config, indent=4, default=str))
    return PipelineConfig(**config)
