"""
Request models for gdiff.
"""
from .selection import LineSelection, CharacterSelection
