"""
Exception types for the Creator Signals engine.

Only genuinely invalid input raises. Insufficient samples and degenerate
distributions are expected states and are answered with documented neutral
values by the services instead of exceptions.
"""


class InvalidInput(ValueError):
    """
    Raised when input cannot be analyzed at all.

    Examples: negative or non-finite view counts, timestamps that cannot be
    parsed, a negative iteration budget or an unknown scoring method. The
    check happens before any statistic is computed.
    """
