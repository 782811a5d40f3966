"""
Version module for ddlogship.

Kept in a standalone module so the build backend can read it without
importing the package.
"""

__version__ = "0.3.0"
