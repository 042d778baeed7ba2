from argparse import Namespace

import numpy as np

from twolqr.eval.run_robustness_sweep import build_argparser, flip_pixels, run_sweep
from twolqr.utils.seeding import seed_all


def test_flip_pixels_leaves_the_margin_untouched():
    rng = seed_all(3)
    image = np.full((20, 20), 255, dtype=np.uint8)
    noisy = flip_pixels(image, 1.0, 5, rng)
    assert (noisy[5:15, 5:15] == 0).all()
    assert (noisy[:5] == 255).all()
    assert (image == 255).all()


def test_sweep_writes_table_and_plot(tmp_path):
    args = Namespace(
        text="HELLO WORLD",
        secret="hidden",
        key="shared-key",
        ecc="medium",
        private_ecc=2,
        p_lo=0.0,
        p_hi=0.0,
        p_step=0,
        trials=2,
        seed=1234,
        out_dir=str(tmp_path / "results"),
        plot_dir=str(tmp_path / "plots"),
    )
    results = run_sweep(args)
    assert results == [{"p_flip": 0.0, "public_rate": 1.0, "private_rate": 1.0}]

    csv_path = tmp_path / "results" / "robustness.csv"
    assert csv_path.exists()
    assert (tmp_path / "plots" / "robustness.png").exists()
    with csv_path.open() as f:
        header = f.readline().strip().split(",")
        assert header == ["p_flip", "public_rate", "private_rate"]
        row = f.readline().strip().split(",")
        assert len(row) == len(header)


def test_argparser_defaults():
    args = build_argparser().parse_args(["--p_hi", "0.05", "--trials", "3"])
    assert args.p_hi == 0.05
    assert args.trials == 3
    assert args.private_ecc == 2
