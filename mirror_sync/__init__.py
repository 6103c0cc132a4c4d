"""
mirror-sync: keeps a local directory mirroring a remote file manifest.
"""

__version__ = "1.0.0"
