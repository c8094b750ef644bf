"""Exception taxonomy shared by the graph model, sampler, and estimator."""


class GWishartError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(GWishartError, ValueError):
    """Raised when inputs are malformed: wrong dimensions, bad indices, b <= 2,
    asymmetric matrices, or unknown parametrization names."""


class NumericalFailure(GWishartError, ArithmeticError):
    """Raised when a factorization or solve fails on a non positive-definite
    matrix, or when a Monte Carlo estimate has no usable draws."""
