"""
Storage layer for pixpipe.
Handles all open, get and put operations in a single place, so that every
storage failure is reported the same way.
"""

import urllib.parse
import os
import functools
import logging
from os.path import dirname

from .errors import ImageIOError

logger = logging.getLogger(__name__)

@functools.lru_cache(maxsize=4)
def mkdirs(path):
    logger.debug("mkdirs %s",path)
    os.makedirs(path, exist_ok = True)


def local_path(url):
    """Return the filesystem path for a plain path or a file:// url"""
    url = os.fspath(url)
    o = urllib.parse.urlparse(url)
    if o.scheme=='file':
        return urllib.parse.unquote(o.path)
    if o.scheme=='' or (len(o.scheme)==1 and os.name=='nt'):
        return url
    raise ValueError(f"unknown scheme {o.scheme} in url {url}")


def storage_open(url, mode='rb'):
    """Open url for binary reading or writing. Parent directories are created on write."""
    path = local_path(url)
    logger.debug("open url=%s path=%s mode=%s",url,path,mode)
    try:
        if 'w' in mode and dirname(path):
            mkdirs( dirname(path))
        return open(path, mode)
    except OSError as e:
        raise ImageIOError(f"cannot open '{url}': {e}") from e


def storage_save(url, data):
    with storage_open(url, 'wb') as f:
        try:
            f.write(data)
        except OSError as e:
            raise ImageIOError(f"cannot write '{url}': {e}") from e


def storage_load(url):
    with storage_open(url, 'rb') as f:
        try:
            return f.read()
        except OSError as e:
            raise ImageIOError(f"cannot read '{url}': {e}") from e
