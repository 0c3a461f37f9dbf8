"""PyTorch convolution banks initialized with the generated kernels.

The kernels from :mod:`gaussian_kernels` and :mod:`edge_kernels` are loaded
into ``nn.Conv2d`` weights so PyTorch does the actual filtering.  Banks are
frozen by default; pass ``learnable=True`` to fine-tune them.
"""

import numpy as np
import torch
import torch.nn as nn

from gaussian_kernels import GENERATORS, as_matrix
from validation import validate


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

class KernelConv(nn.Module):
    """Single-channel Conv2d bank with one output filter per kernel.

    For an input of shape ``[B, 1, H, W]`` the output is ``[B, K, H, W]``
    where ``K = len(kernels)``; zero padding keeps the spatial size.

    Parameters
    ----------
    kernels : sequence of array-like
        Flat row-major square kernels, all with the same odd side length.
    learnable : bool
        If *False*, the weights are frozen.
    """

    def __init__(self, kernels, learnable=False):
        super().__init__()
        mats = [as_matrix(np.asarray(k, dtype=np.float32)) for k in kernels]
        if not mats:
            raise ValueError("KernelConv needs at least one kernel")
        shape = mats[0].shape
        if any(m.shape != shape for m in mats):
            raise ValueError(
                f"all kernels must share one size, got "
                f"{sorted({m.shape[0] for m in mats})}")
        if shape[0] % 2 == 0:
            raise ValueError(f"kernel size must be odd, got {shape[0]}")

        self.kernel_size = shape[0]
        self.n_kernels = len(mats)
        self.conv = nn.Conv2d(1, self.n_kernels, self.kernel_size,
                              padding=self.kernel_size // 2, bias=False)
        self._init_weights(mats)

        if not learnable:
            self.freeze()

    @classmethod
    def from_names(cls, names, window, sigma, learnable=False):
        """Build a bank from generator names (``'gaussian'``, ``'log'``, ...)."""
        validate(window, sigma)
        kernels = [GENERATORS[name](window, sigma) for name in names]
        return cls(kernels, learnable=learnable)

    def _init_weights(self, mats):
        with torch.no_grad():
            for i, m in enumerate(mats):
                self.conv.weight[i, 0] = torch.from_numpy(np.array(m))

    def forward(self, x):
        return self.conv(x)

    # -- freeze / unfreeze helpers -----------------------------------------

    def freeze(self):
        for p in self.parameters():
            p.requires_grad = False

    def unfreeze(self):
        for p in self.parameters():
            p.requires_grad = True


class GradientBlock(nn.Module):
    """Gradient magnitude from a DroG-X / DroG-Y pair.

    ``|g| = sqrt(gx^2 + gy^2 + eps)``, shape ``[B, 1, H, W]`` for an input
    of shape ``[B, 1, H, W]``.
    """

    def __init__(self, window=5, sigma=1.0, eps=1e-8, learnable=False):
        super().__init__()
        self.eps = eps
        self.bank = KernelConv.from_names(("drog_x", "drog_y"), window, sigma,
                                          learnable=learnable)

    def forward(self, x):
        g = self.bank(x)                                    # [B, 2, H, W]
        gx, gy = g[:, 0:1], g[:, 1:2]
        return torch.sqrt(gx * gx + gy * gy + self.eps)     # [B, 1, H, W]
