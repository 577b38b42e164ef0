"""
Exceptions for the diff_utils package.
"""


class PatchApplicationError(Exception):
    """Exception raised when a synthesized patch cannot be applied."""
    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details or {}
