"""Discrete Gaussian-family kernels on an odd square window.

Produces flat, row-major ``float32`` kernels (rows follow the ``dy``
offset, columns the ``dx`` offset) ready to be handed to a convolution
engine.  Pure NumPy.

The generators raise :class:`validation.InvalidParameter` on a bad window
or sigma; :func:`make_kernel` is the non-raising entry point and returns
``(kernel, error)`` instead.
"""

import math
import operator
from types import MappingProxyType

import numpy as np

from validation import check_params, validate


def _checked(window, sigma):
    validate(window, sigma)
    return operator.index(window), float(sigma)


def _offsets(window):
    """Integer ``(dy, dx)`` offset grids spanning ``[-aperture, aperture]``."""
    half = window // 2
    return np.mgrid[-half:half + 1, -half:half + 1]


def _exponent(r, two_s2):
    """``-r / (2 sigma^2)``, pinned to 0 at the centre.

    Keeps the centre cell finite when ``sigma^2`` underflows to zero; every
    other cell then goes to ``-inf`` and its Gaussian weight to 0.
    """
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return np.where(r == 0, 0, -r / two_s2).astype(r.dtype)


def gaussian_kernel(window, sigma):
    """Isotropic Gaussian normalized to unit sum.

    g(x, y) = exp(-(x^2 + y^2) / (2 * sigma^2)) / sum(g)

    Parameters
    ----------
    window : int
        Side length of the square kernel (positive, odd).
    sigma : float
        Standard deviation of the Gaussian (positive).

    Returns
    -------
    ndarray, float32, shape (window * window,)
    """
    window, sigma = _checked(window, sigma)
    yy, xx = _offsets(window)
    r = (xx * xx + yy * yy).astype(np.float32)
    s = np.float32(sigma)

    gauss = np.exp(_exponent(r, np.float32(2.0) * s * s)).astype(np.float32)
    total = gauss.sum(dtype=np.float32)
    return (gauss / total).ravel()


def log_kernel(window, sigma):
    """Laplacian of a unit-sum Gaussian with its DC component removed.

    LoG(x, y) = g(x, y) * (x^2 + y^2 - 2 * sigma^2) / sigma^4

    The Gaussian is normalized first, then ``sum(LoG) / window^2`` is
    subtracted from every cell so the kernel does not respond to a flat
    image.  Computed in double precision, returned as ``float32``.

    Parameters
    ----------
    window : int
        Side length of the square kernel (positive, odd).
    sigma : float
        Standard deviation of the Gaussian (positive).

    Returns
    -------
    ndarray, float32, shape (window * window,)
    """
    window, sigma = _checked(window, sigma)
    yy, xx = _offsets(window)
    r = (xx * xx + yy * yy).astype(np.float64)

    s2 = sigma * sigma

    gauss = np.exp(_exponent(r, 2.0 * s2))
    gauss /= gauss.sum()

    # g * (r - 2 s^2) / s^4 split as (g * (r / s^2 - 2)) / s^2 so the DC
    # removal happens on finite values even when s^2 underflows
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        ratio = np.where(r == 0, 0.0, r / s2)
        lap = np.where(gauss > 0, gauss * (ratio - 2.0), 0.0)
        lap -= lap.sum() / (window * window)
        lap = np.where(lap == 0, 0.0, lap / s2)
        return lap.astype(np.float32).ravel()


def _drog(window, sigma, axis):
    window, sigma = _checked(window, sigma)
    yy, xx = _offsets(window)
    yy = yy.astype(np.float32)
    xx = xx.astype(np.float32)
    s2 = np.float32(sigma) ** 2

    offset = yy if axis == "x" else xx
    envelope = np.exp(_exponent(xx * xx + yy * yy, np.float32(2.0) * s2))
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        front = np.where(offset == 0, 0, -offset / s2).astype(np.float32)
        drog = np.where(envelope > 0, front * envelope, 0).astype(np.float32)

    bias = drog.sum(dtype=np.float32) / np.float32(window * window)
    return (drog - bias).ravel()


def drog_x(window, sigma):
    """Derivative-of-Gaussian kernel for the X gradient, DC removed.

    DroGX(x, y) = (-y / sigma^2) * exp(-(x^2 + y^2) / (2 * sigma^2))

    The directional factor follows the row (``dy``) offset, so the kernel
    varies down the rows; it is the transpose of :func:`drog_y`.

    Returns
    -------
    ndarray, float32, shape (window * window,)
    """
    return _drog(window, sigma, "x")


def drog_y(window, sigma):
    """Derivative-of-Gaussian kernel for the Y gradient, DC removed.

    DroGY(x, y) = (-x / sigma^2) * exp(-(x^2 + y^2) / (2 * sigma^2))

    Returns
    -------
    ndarray, float32, shape (window * window,)
    """
    return _drog(window, sigma, "y")


GENERATORS = MappingProxyType({
    "gaussian": gaussian_kernel,
    "log": log_kernel,
    "drog_x": drog_x,
    "drog_y": drog_y,
})


def make_kernel(name, window, sigma):
    """Build the kernel *name* without raising on bad parameters.

    Returns ``(kernel, None)`` on success and ``(None, ParamError)`` when
    *window* / *sigma* are rejected.  An unknown *name* raises ``KeyError``.
    """
    generator = GENERATORS[name]
    ok, err = check_params(window, sigma)
    if not ok:
        return None, err
    return generator(window, sigma), None


def as_matrix(kernel):
    """Reshape a flat square kernel to ``(window, window)``."""
    kernel = np.asarray(kernel)
    side = math.isqrt(kernel.size)
    if kernel.ndim != 1 or side * side != kernel.size:
        raise ValueError(
            f"expected a flat square kernel, got shape {kernel.shape}")
    return kernel.reshape(side, side)
