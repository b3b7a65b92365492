"""
embedres: pack a directory tree into a Python module and read it back as
a read-only embedded filesystem.
"""

__version__ = "0.1.0"
