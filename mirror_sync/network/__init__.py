"""
Network Layer.

This package fetches the remote manifest and downloads the files it lists.
"""

from .downloader import Downloader
from .manifest import (
    FileManifestSource,
    HttpManifestSource,
    ManifestSource,
    create_manifest_source,
)

__all__ = [
    "Downloader",
    "FileManifestSource",
    "HttpManifestSource",
    "ManifestSource",
    "create_manifest_source",
]
