import glob
import json
import os

import numpy as np
import pytest

from export_kernels import format_kernel, main, parse_args, run
from gaussian_kernels import gaussian_kernel


def test_prints_requested_kernels(capsys) -> None:
    kernels = run(parse_args(["--kernel", "gaussian", "log", "--window", "7", "--sigma", "1.0"]))
    assert list(kernels) == ["gaussian", "log"]
    out = capsys.readouterr().out
    assert "window=7, sigma=1.0" in out
    assert "gaussian  (7x7" in out
    assert "log  (7x7" in out


def test_format_kernel_grid() -> None:
    text = format_kernel("gaussian", gaussian_kernel(3, 1.0), precision=4)
    lines = text.splitlines()
    assert len(lines) == 4
    assert lines[2].split() == ["0.1238", "0.2042", "0.1238"]


def test_saves_npz_json_and_plot(tmp_path) -> None:
    save_dir = str(tmp_path / "run")
    main(["--window", "7", "--sigma", "1.0", "--include-edges",
          "--save-dir", save_dir, "--plot"])

    assert os.path.isfile(os.path.join(save_dir, "kernels.npz"))
    assert os.path.isfile(os.path.join(save_dir, "kernels.png"))

    with np.load(os.path.join(save_dir, "kernels.npz")) as data:
        assert set(data.files) == {"gaussian", "log", "drog_x", "drog_y",
                                   "sobel_x", "sobel_y", "prewitt_x", "prewitt_y"}
        assert data["drog_x"].shape == (49,)

    [log_path] = glob.glob(os.path.join(save_dir, "kernels_*.json"))
    with open(log_path) as f:
        payload = json.load(f)
    assert payload["config"]["window"] == 7
    assert payload["kernels"]["sobel_x"]["window"] == 3
    assert payload["kernels"]["gaussian"]["sigma"] == 1.0


def test_warns_on_truncating_window() -> None:
    with pytest.warns(UserWarning, match="cuts the gaussian off"):
        main(["--kernel", "gaussian", "--window", "3", "--sigma", "2.0"])


@pytest.mark.parametrize("argv", [
    ["--window", "4"],
    ["--window", "-3"],
    ["--sigma", "0"],
    ["--plot"],
])
def test_invalid_arguments_exit(argv, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    assert excinfo.value.code == 2
