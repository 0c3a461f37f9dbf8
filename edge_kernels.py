"""Fixed 3x3 Sobel and Prewitt kernels, flattened row-major.

The arrays are read-only; copy them before modifying.
"""

from types import MappingProxyType

import numpy as np


def _frozen(values):
    arr = np.array(values, dtype=np.float32)
    arr.flags.writeable = False
    return arr


SOBEL_X = _frozen([-1, -2, -1,
                    0,  0,  0,
                    1,  2,  1])

SOBEL_Y = _frozen([-1, 0, 1,
                   -2, 0, 2,
                   -1, 0, 1])

PREWITT_X = _frozen([-1, -1, -1,
                      0,  0,  0,
                      1,  1,  1])

PREWITT_Y = _frozen([-1, 0, 1,
                     -1, 0, 1,
                     -1, 0, 1])

EDGE_KERNELS = MappingProxyType({
    "sobel_x": SOBEL_X,
    "sobel_y": SOBEL_Y,
    "prewitt_x": PREWITT_X,
    "prewitt_y": PREWITT_Y,
})
