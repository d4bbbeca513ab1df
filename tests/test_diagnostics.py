import json

import numpy as np
import pytest

from alias_sampler import build
from diagnostics import (
    convergence_check,
    empirical_frequencies,
    get_logger,
    implied_weights,
    simulate,
    tv_distance,
    )

COLOUR_WEIGHTS = [0.125, 0.2, 0.1, 0.25, 0.1, 0.1, 0.125]


def test_logger_writes_json_lines(tmp_path, capsys):
    path = tmp_path / "logs" / "run.json"
    log_fn = get_logger(str(path), print_to_console=True)
    log_fn({"event": "one", "value": 1})
    log_fn({"event": "two", "value": 2})

    lines = path.read_text().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["event"] == "one"
    assert "timestamp" in first
    assert capsys.readouterr().out.count("\n") == 2


def test_logger_console_only(capsys):
    log_fn = get_logger()
    log_fn({"event": "x"})
    assert json.loads(capsys.readouterr().out)["event"] == "x"


def test_implied_weights():
    table = build(range(7), COLOUR_WEIGHTS)
    assert implied_weights(table) == pytest.approx(COLOUR_WEIGHTS)


def test_empirical_frequencies():
    freq = empirical_frequencies([0, 0, 1, 3], 5)
    assert freq.tolist() == [0.5, 0.25, 0.0, 0.25, 0.0]
    assert empirical_frequencies([], 2).tolist() == [0.0, 0.0]


def test_tv_distance():
    assert tv_distance([0.5, 0.5], [0.5, 0.5]) == 0.0
    assert tv_distance([1.0, 0.0], [0.0, 1.0]) == 1.0


def test_convergence_check_detects_wrong_weights():
    table = build(range(4), [0.25, 0.25, 0.25, 0.25])
    report = convergence_check(
        table, [0.4, 0.1, 0.25, 0.25], 100000, np.random.default_rng(0)
        )
    assert not report["passed"]
    assert report["worst_bucket"] in (0, 1)
    assert report["max_abs_error"] == pytest.approx(0.15, abs=0.01)
    with pytest.raises(ValueError):
        convergence_check(table, [0.25] * 4, 0, np.random.default_rng(0))


def test_simulate_logs_report():
    records = []
    report = simulate(n=30, num_samples=100000, seed=0, log_fn=records.append)
    assert report["passed"], report
    assert report["n"] == 30
    assert records[0]["event"] == "simulate"
    assert "event" not in report
