"""Generate, print and save Gaussian-family convolution kernels.

Usage examples
--------------
# 5x5 Gaussian and LoG at sigma=1, printed to stdout:
    python export_kernels.py --kernel gaussian log --window 5 --sigma 1.0

# Every kernel plus the Sobel / Prewitt tables, saved with a JSON log:
    python export_kernels.py --window 7 --sigma 1.5 --include-edges --save-dir runs/k7

# Also write a figure of all kernels:
    python export_kernels.py --window 9 --sigma 2.0 --save-dir runs/k9 --plot
"""

import argparse
import math
import os
import warnings

import matplotlib.pyplot as plt
import numpy as np

from edge_kernels import EDGE_KERNELS
from gaussian_kernels import GENERATORS, as_matrix
from utils import KernelLogger, save_kernels
from validation import InvalidParameter, validate


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Export convolution kernels")

    p.add_argument("--kernel", nargs="+", default=list(GENERATORS),
                   choices=list(GENERATORS), help="kernels to generate")
    p.add_argument("--window", default=5, type=int, help="kernel side length (odd)")
    p.add_argument("--sigma", default=1.0, type=float, help="gaussian std deviation")
    p.add_argument("--include-edges", action="store_true",
                   help="also export the fixed 3x3 Sobel / Prewitt kernels")

    p.add_argument("--save-dir", default=None,
                   help="write kernels.npz and a JSON log here")
    p.add_argument("--plot", action="store_true",
                   help="write kernels.png (requires --save-dir)")
    p.add_argument("--precision", default=4, type=int, help="printed decimals")

    args = p.parse_args(argv)
    try:
        validate(args.window, args.sigma)
    except InvalidParameter as e:
        p.error(f"window={args.window}, sigma={args.sigma}: {e}")
    if args.plot and args.save_dir is None:
        p.error("--plot requires --save-dir")
    return args


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def format_kernel(name, kernel, precision=4):
    mat = as_matrix(kernel)
    width = precision + 4
    lines = [f"{name}  ({mat.shape[0]}x{mat.shape[1]}, sum={kernel.sum():.{precision}e})"]
    for row in mat:
        lines.append("  " + " ".join(f"{v:>{width}.{precision}f}" for v in row))
    return "\n".join(lines)


def plot_kernels(kernels, path):
    """Draw each kernel as a heat map in one row of panels."""
    names = list(kernels)
    fig, axes = plt.subplots(1, len(names), figsize=(3 * len(names), 3),
                             squeeze=False)
    for ax, name in zip(axes[0], names):
        mat = as_matrix(kernels[name])
        lim = float(np.abs(mat).max()) or 1.0
        im = ax.imshow(mat, cmap="RdBu_r", vmin=-lim, vmax=lim)
        ax.set_title(name)
        ax.set_xticks([])
        ax.set_yticks([])
        fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def run(args):
    """Generate, print and optionally save the kernels selected by *args*."""
    support = 2 * math.ceil(3 * args.sigma) + 1
    if args.window < support:
        warnings.warn(
            f"window={args.window} cuts the gaussian off before 3 sigma "
            f"(need {support}); kernel tails will be truncated.")
    if args.window > 1 and args.sigma < 0.5:
        warnings.warn(
            f"sigma={args.sigma} is below half a pixel; kernels will be "
            f"dominated by the centre cell.")

    kernels = {name: GENERATORS[name](args.window, args.sigma)
               for name in args.kernel}
    if args.include_edges:
        kernels.update(EDGE_KERNELS)

    print(f"Kernels: window={args.window}, sigma={args.sigma}\n")
    for name, kernel in kernels.items():
        print(format_kernel(name, kernel, args.precision))
        print()

    if args.save_dir is None:
        return kernels

    path = save_kernels(os.path.join(args.save_dir, "kernels.npz"), **kernels)
    print(f"Kernels saved -> {path}")

    logger = KernelLogger(args.save_dir, args)
    for name, kernel in kernels.items():
        if name in GENERATORS:
            logger.log_kernel(name, kernel, args.window, args.sigma)
        else:
            logger.log_kernel(name, kernel, window=3)
    logger.save()

    if args.plot:
        fig_path = plot_kernels(kernels, os.path.join(args.save_dir, "kernels.png"))
        print(f"Figure saved -> {fig_path}")

    return kernels


def main(argv=None):
    run(parse_args(argv))


if __name__ == "__main__":
    main()
