"""Window / sigma checks shared by every kernel generator.

:func:`validate` raises :class:`InvalidParameter`; :func:`check_params` is
the non-raising form and returns ``(ok, error)``.  For a whole kernel
without exceptions use :func:`gaussian_kernels.make_kernel`.
"""

import numbers
import operator
from enum import Enum


class ParamError(Enum):
    """Reason a ``(window, sigma)`` pair was rejected."""

    EVEN_WINDOW = "Window isn't an odd number."
    NON_POSITIVE_WINDOW = "Window is negative or zero."
    NON_POSITIVE_SIGMA = "Sigma of the gaussian is zero or negative."


class InvalidParameter(ValueError):
    """Raised when a kernel is requested with an unusable window or sigma."""

    def __init__(self, kind, window=None, sigma=None):
        super().__init__(kind.value)
        self.kind = kind
        self.window = window
        self.sigma = sigma


def _as_window(window):
    if isinstance(window, bool):
        raise TypeError("window must be an integer, got bool")
    try:
        return operator.index(window)
    except TypeError:
        raise TypeError(
            f"window must be an integer, got {type(window).__name__}") from None


def _as_sigma(sigma):
    if isinstance(sigma, bool) or not isinstance(sigma, numbers.Real):
        raise TypeError(
            f"sigma must be a real number, got {type(sigma).__name__}")
    return float(sigma)


def check_params(window, sigma):
    """Return ``(ok, error)`` for a ``(window, sigma)`` pair.

    ``error`` is a :class:`ParamError` or ``None``.  When several
    conditions hold the first one in this order is reported: even window,
    non-positive window, non-positive sigma.
    """
    window = _as_window(window)
    sigma = _as_sigma(sigma)

    if window % 2 == 0:
        return False, ParamError.EVEN_WINDOW
    if window <= 0:
        return False, ParamError.NON_POSITIVE_WINDOW
    if sigma <= 0:
        return False, ParamError.NON_POSITIVE_SIGMA
    return True, None


def validate(window, sigma):
    """Raise :class:`InvalidParameter` unless *window* / *sigma* are usable."""
    ok, err = check_params(window, sigma)
    if not ok:
        raise InvalidParameter(err, window=window, sigma=sigma)
