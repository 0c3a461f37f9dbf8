import numpy as np
import pytest
import torch

from filter_bank import GradientBlock, KernelConv
from gaussian_kernels import as_matrix, drog_x, gaussian_kernel, log_kernel
from edge_kernels import SOBEL_X, SOBEL_Y
from validation import InvalidParameter, ParamError


def _interior(t, pad):
    return t[..., pad:-pad, pad:-pad]


def test_bank_shapes_and_weights() -> None:
    bank = KernelConv.from_names(["gaussian", "log"], 5, 1.0)
    out = bank(torch.rand(2, 1, 16, 16))
    assert out.shape == (2, 2, 16, 16)
    assert bank.kernel_size == 5
    assert bank.n_kernels == 2
    np.testing.assert_allclose(bank.conv.weight[1, 0].numpy(),
                               as_matrix(log_kernel(5, 1.0)))


def test_bank_is_frozen_by_default() -> None:
    bank = KernelConv([SOBEL_X, SOBEL_Y])
    assert all(not p.requires_grad for p in bank.parameters())
    bank.unfreeze()
    assert all(p.requires_grad for p in bank.parameters())
    bank.freeze()
    assert all(not p.requires_grad for p in bank.parameters())

    learnable = KernelConv([SOBEL_X], learnable=True)
    assert all(p.requires_grad for p in learnable.parameters())


def test_constant_input_response() -> None:
    bank = KernelConv([gaussian_kernel(5, 1.0), log_kernel(5, 1.0), drog_x(5, 1.0)])
    with torch.no_grad():
        out = _interior(bank(torch.full((1, 1, 12, 12), 3.0)), 2)
    torch.testing.assert_close(out[:, 0], torch.full_like(out[:, 0], 3.0),
                               atol=1e-4, rtol=0)
    torch.testing.assert_close(out[:, 1:], torch.zeros_like(out[:, 1:]),
                               atol=1e-4, rtol=0)


def test_bank_rejects_bad_kernels() -> None:
    with pytest.raises(ValueError):
        KernelConv([])
    with pytest.raises(ValueError):
        KernelConv([gaussian_kernel(3, 1.0), gaussian_kernel(5, 1.0)])
    with pytest.raises(ValueError):
        KernelConv([np.ones(4)])
    with pytest.raises(ValueError):
        KernelConv([np.ones(7)])


def test_from_names_validates() -> None:
    with pytest.raises(InvalidParameter) as excinfo:
        KernelConv.from_names(["gaussian"], 4, 1.0)
    assert excinfo.value.kind is ParamError.EVEN_WINDOW


def test_gradient_block_on_ramp() -> None:
    block = GradientBlock(window=5, sigma=1.0)
    ramp = torch.arange(16, dtype=torch.float32).repeat(16, 1)[None, None]
    with torch.no_grad():
        mag = _interior(block(ramp), 2)
        g = _interior(block.bank(ramp), 2)
    assert mag.shape == (1, 1, 12, 12)
    assert torch.all(mag > 0.1)
    # columns change, rows do not: only the dx-weighted kernel responds
    torch.testing.assert_close(g[:, 0], torch.zeros_like(g[:, 0]), atol=1e-4, rtol=0)


def test_gradient_block_flat_image() -> None:
    block = GradientBlock(window=3, sigma=1.0)
    with torch.no_grad():
        mag = _interior(block(torch.ones(1, 1, 8, 8)), 1)
    assert torch.all(mag < 1e-3)
