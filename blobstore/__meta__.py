# -*- coding: utf-8 -*-
"""Define project metadata
"""

__title__ = "blobstore"
__summary__ = "A time-addressed blob storage layer for local filesystems."
__url__ = "https://github.com/kiloe/blobstore"

__version__ = "0.1.0"

__install_requires__ = ["fs>=2.4.16", "setuptools<81"]
__tests_require__ = ["pytest", "tox"]

__author__ = "Blobstore Developers"
__email__ = "dev@kiloe.net"

__license__ = "MIT License"
