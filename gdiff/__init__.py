"""
gdiff - a terminal git client built around a diff and patch engine.
"""

__version__ = "0.1.0"
