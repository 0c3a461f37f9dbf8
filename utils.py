"""Grayscale byte copy, kernel persistence, JSON kernel logger."""

import json
import os
from datetime import datetime

import numpy as np


# ---------------------------------------------------------------------------
# Grayscale byte copy
# ---------------------------------------------------------------------------

def to_byte_image(image):
    """Copy a single-channel image into a new ``uint8`` array.

    *image* is either a 2-D array (height x width) or an object exposing
    ``width()``, ``height()`` and ``getPixel(x, y)``.  Intensities are
    copied unchanged and stored as their low byte, like an 8-bit buffer.

    Returns
    -------
    ndarray, uint8, shape (height, width)
    """
    if isinstance(image, np.ndarray):
        if image.ndim != 2:
            raise ValueError(
                f"expected a single-channel 2-D image, got shape {image.shape}")
        return (image.astype(np.int64) & 0xFF).astype(np.uint8)

    if not all(hasattr(image, a) for a in ("width", "height", "getPixel")):
        raise TypeError(
            f"cannot read pixels from {type(image).__name__}; expected an "
            "ndarray or an object with width(), height() and getPixel()")

    width, height = image.width(), image.height()
    out = np.empty((height, width), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            out[y, x] = int(image.getPixel(x, y)) & 0xFF
    return out


# ---------------------------------------------------------------------------
# Kernel persistence
# ---------------------------------------------------------------------------

def save_kernels(path, **kernels):
    """Write named kernels to a compressed ``.npz`` at *path*.

    Returns the path actually written (NumPy appends ``.npz`` if missing).
    """
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    np.savez_compressed(path, **kernels)
    return path if path.endswith(".npz") else path + ".npz"


def load_kernels(path):
    """Load every array stored by :func:`save_kernels` into a dict."""
    with np.load(path) as data:
        return {name: data[name] for name in data.files}


# ---------------------------------------------------------------------------
# Kernel JSON logger
# ---------------------------------------------------------------------------

class KernelLogger:
    """Collect generated kernels with their parameters and dump them as JSON.

    The file holds the run ``config``, a ``summary`` over all logged kernels
    (count, distinct windows and sigmas, largest absolute sum) and one entry
    per kernel under ``kernels``.
    """

    def __init__(self, save_dir, args=None):
        self.save_dir = save_dir
        self.config = vars(args) if args is not None else {}
        self.kernels = {}

    def log_kernel(self, name, kernel, window=None, sigma=None):
        """Record one kernel with summary stats."""
        kernel = np.asarray(kernel, dtype=np.float64)
        self.kernels[name] = {
            "window": window,
            "sigma": sigma,
            "sum": round(float(kernel.sum()), 6),
            "min": round(float(kernel.min()), 6),
            "max": round(float(kernel.max()), 6),
            "values": [round(float(v), 6) for v in kernel],
        }

    def summary(self):
        entries = self.kernels.values()
        return {
            "n_kernels": len(self.kernels),
            "windows": sorted({e["window"] for e in entries if e["window"] is not None}),
            "sigmas": sorted({e["sigma"] for e in entries if e["sigma"] is not None}),
            "max_abs_sum": max((abs(e["sum"]) for e in entries), default=0.0),
        }

    def to_dict(self):
        return {
            "config": self.config,
            "summary": self.summary(),
            "kernels": self.kernels,
        }

    def save(self, filename=None):
        """Write :meth:`to_dict` to *filename* (timestamped by default)."""
        if filename is None:
            filename = datetime.now().strftime("kernels_%Y%m%d_%H%M%S.json")
        os.makedirs(self.save_dir, exist_ok=True)
        path = os.path.join(self.save_dir, filename)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)
        print(f"Kernel log saved -> {path}")
        return path
