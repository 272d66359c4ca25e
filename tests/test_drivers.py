import logging

import numpy as np
import pytest

from core.errors import DegenerateScaleError
from core.scaler_config import ScalerConfig
from data.generate_sample_data import generate
from drivers import run_comparison, run_streaming


def test_run_stream_whole_stream_is_standardised():
    result = run_streaming.run_stream(
        run_streaming.random_batches(5, 40, seed=3),
        config=ScalerConfig(),
        print_every=0,
        keep_history=True,
    )
    assert result["n_batches"] == 5
    assert result["optimizer"].n_samples == 200
    assert result["whole_after"] == pytest.approx(0.0, abs=1e-9)
    assert result["whole_std_after"] == pytest.approx(1.0, rel=1e-9)


def test_run_stream_prints_one_line_per_batch(capsys):
    run_streaming.run_stream(run_streaming.random_batches(3, 10), print_every=1)
    lines = [ln for ln in capsys.readouterr().out.splitlines() if "batch" in ln]
    assert len(lines) == 3


def test_run_stream_constant_data_is_degenerate():
    with pytest.raises(DegenerateScaleError):
        run_streaming.run_stream([np.full(4, 2.0)], print_every=1, keep_history=True)


def test_run_stream_reports_undefined_scale_and_recovers(capsys):
    result = run_streaming.run_stream([np.full(4, 2.0), np.arange(4.0)], print_every=1)
    lines = [ln for ln in capsys.readouterr().out.splitlines() if "batch" in ln]
    assert len(lines) == 2
    assert "scale undefined" in lines[0]
    assert "after=" in lines[1]
    assert not result["scaler"].is_degenerate


def test_run_stream_single_sample_batches(textbook_batch, capsys):
    result = run_streaming.run_stream([[v] for v in textbook_batch], keep_history=True)
    assert result["n_batches"] == 8
    assert result["scaler"].n_samples == 8
    assert result["whole_std_after"] == pytest.approx(1.0, rel=1e-9)
    lines = [ln for ln in capsys.readouterr().out.splitlines() if "batch" in ln]
    assert len(lines) == 7


def test_check_reports_means(textbook_batch):
    from core.online_optimizer import OnlineOptimizer

    scaler = OnlineOptimizer().fit(textbook_batch, ScalerConfig())
    before, after = run_streaming.check(scaler, textbook_batch)
    assert before == pytest.approx(5.0)
    assert after == pytest.approx(0.0, abs=1e-12)


def test_streaming_main_random(capsys):
    assert run_streaming.main(["--n-batches", "3", "--n-samples", "15"]) == 0
    out = capsys.readouterr().out
    assert "DONE" in out
    assert "whole stream" in out


def test_streaming_main_csv(tmp_path, capsys):
    path = tmp_path / "basic.csv"
    generate(path, n_samples=120, seed=5)
    assert run_streaming.main(["--csv", str(path), "--batch-size", "50", "--ddof", "0"]) == 0
    assert "n_samples=120" in capsys.readouterr().out


def test_streaming_main_missing_csv(tmp_path, capsys):
    assert run_streaming.main(["--csv", str(tmp_path / "nope.csv")]) == 1
    assert "not found" in capsys.readouterr().err


def test_streaming_main_reports_scaling_errors(tmp_path, capsys):
    path = tmp_path / "one.csv"
    path.write_text("value\n1.0\n")
    assert run_streaming.main(["--csv", str(path)]) == 1
    assert "ERROR" in capsys.readouterr().err


def test_comparison_main_saves_plot(tmp_path, capsys):
    path = tmp_path / "shifted.csv"
    generate(path, n_samples=400, shift=5.0, seed=2)
    out_dir = tmp_path / "plots"

    code = run_comparison.main([
        "--csv", str(path), "--batch-size", "50",
        "--save-plots", "--output-dir", str(out_dir),
    ])
    assert code == 0
    assert (out_dir / "shifted_b50_ddof1.png").exists()
    out = capsys.readouterr().out
    assert "COMPARISON SUMMARY" in out
    assert "matches the batch answer" in out


def test_comparison_main_no_plots_and_missing_csv(tmp_path, capsys):
    path = tmp_path / "basic.csv"
    generate(path, n_samples=100, seed=2)
    assert run_comparison.main(["--csv", str(path), "--no-plots"]) == 0
    assert run_comparison.main(["--csv", str(tmp_path / "nope.csv")]) == 1


def test_streaming_main_constant_first_batch(tmp_path, capsys):
    path = tmp_path / "flat_start.csv"
    path.write_text("value\n" + "1.0\n" * 4 + "".join(f"{v}\n" for v in range(10)))
    assert run_streaming.main(["--csv", str(path), "--batch-size", "4"]) == 0
    out = capsys.readouterr().out
    assert "scale undefined" in out
    assert "n_samples=14" in out


def test_streaming_main_batch_size_one(tmp_path, capsys):
    path = tmp_path / "basic.csv"
    generate(path, n_samples=20, seed=6)
    assert run_streaming.main(["--csv", str(path), "--batch-size", "1"]) == 0
    assert "n_samples=20" in capsys.readouterr().out


def test_comparison_main_batch_size_one(tmp_path, capsys):
    path = tmp_path / "basic.csv"
    generate(path, n_samples=50, seed=3)
    assert run_comparison.main(["--csv", str(path), "--batch-size", "1", "--no-plots"]) == 0
    assert "matches the batch answer" in capsys.readouterr().out


def test_comparison_main_reports_scaling_errors(tmp_path, capsys):
    path = tmp_path / "one.csv"
    path.write_text("value\n1.0\n")
    assert run_comparison.main(["--csv", str(path), "--no-plots"]) == 1
    assert "ERROR" in capsys.readouterr().err


@pytest.fixture
def restore_log_levels():
    names = ("drivers.run_streaming", "core.online_optimizer", "evaluation.batch_vs_online")
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_streaming_main_unknown_log_level_falls_back(restore_log_levels):
    assert run_streaming.main(["--n-batches", "2", "--log-level", "bogus"]) == 0
    assert logging.getLogger("core.online_optimizer").level == logging.INFO


def test_log_level_reaches_engine_loggers(restore_log_levels):
    assert run_streaming.main(["--n-batches", "2", "--log-level", "debug"]) == 0
    assert logging.getLogger("core.online_optimizer").level == logging.DEBUG
    assert logging.getLogger("drivers.run_streaming").level == logging.DEBUG


def test_comparison_log_level_reaches_engine_loggers(tmp_path, restore_log_levels):
    path = tmp_path / "basic.csv"
    generate(path, n_samples=40, seed=1)
    assert run_comparison.main(["--csv", str(path), "--no-plots", "--log-level", "WARNING"]) == 0
    assert logging.getLogger("evaluation.batch_vs_online").level == logging.WARNING
