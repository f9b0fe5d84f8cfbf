"""
Error taxonomy for the simulation engine.

Hard failures (bad prices, bad ranges) raise. Degenerate computations such as a
single-sided deposit that implies zero liquidity are NOT errors: the engine
returns a zero/neutral result and flags it instead.

All errors subclass ValueError so callers that only know about ValueError keep
working.
"""


class CLMMError(ValueError):
    """Base class for every simulator error."""


class InvalidInputError(CLMMError):
    """Non-positive price, non-positive tick spacing, tick out of bounds, negative liquidity."""


class InvalidPriceError(InvalidInputError):
    """A price that must be strictly positive was not."""


class InvalidRangeError(CLMMError):
    """Range lower bound is not strictly below the upper bound."""


class DegenerateRangeError(InvalidRangeError):
    """Zero-width range: regime formulas would divide by zero."""
