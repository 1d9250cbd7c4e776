"""Merge a packwiz child pack with its remote parent into a standalone pack."""
__version__ = "0.1.0"
