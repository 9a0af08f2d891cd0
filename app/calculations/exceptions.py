"""
Calculation errors.
"""


class InvalidParameterError(ValueError):
    """Raised when a calculation is invoked with parameters it cannot honour."""
