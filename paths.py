"""
Single handy place for paths.
"""

from os.path import dirname, abspath, join

ROOT_DIR         = dirname(abspath(__file__))
ETC_DIR          = join(ROOT_DIR, 'etc')
PACKAGE_DIR      = join(ROOT_DIR, 'pixpipe')
TEST_DIR         = join(PACKAGE_DIR, 'tests')
DEFAULT_CONFIG_FILE = join(ETC_DIR, 'pipeline.yml')
