"""
Errors Module
Exception types raised by the matrix layout reconstructor.
"""


class InvalidInputError(ValueError):
    """Raised when the children handed to the reconstructor are malformed."""


class MatrixConsistencyError(RuntimeError):
    """Raised when a fixed-point pass runs past its iteration bound."""
