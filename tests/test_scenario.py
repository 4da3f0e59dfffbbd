import random
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError

from anneal import AnnealingSolver, Point
from app.config import AnnealConfig, HarnessConfig, get_anneal_config, get_harness_config
from app.tools.schema import validate_scenario
from app.tools.scenario import (
    ProgressRecorder,
    generate_scenario,
    run_scenario_safe,
    submit_solve,
)


SQUARE = [[0, 0], [10, 0], [10, 10], [0, 10]]


def _square_configs(decay=0.999):
    return (
        AnnealConfig(width=20, height=20, decay=decay, floor=1.0),
        HarnessConfig(point_count=4, margin=0, redraw_delay=0.0, max_workers=2),
    )


def test_generate_scenario_respects_margin():
    points, priority = generate_scenario(200, 900, 500, margin=20, rng=random.Random(1))
    assert len(points) == 200
    assert priority in points
    for p in points:
        assert 20 <= p.x < 880
        assert 20 <= p.y < 480


def test_generate_scenario_is_reproducible():
    a = generate_scenario(10, 100, 100, rng=random.Random(8))
    b = generate_scenario(10, 100, 100, rng=random.Random(8))
    assert a == b


@pytest.mark.parametrize("count,width,height,margin", [(0, 100, 100, 10), (5, 40, 100, 20)])
def test_generate_scenario_rejects_bad_sizes(count, width, height, margin):
    with pytest.raises(ValueError):
        generate_scenario(count, width, height, margin=margin)


def test_validate_scenario():
    data = validate_scenario({"points": SQUARE, "priority": [0, 0]})
    assert data["points"][1] == (10, 0)
    assert data["priority"] == (0, 0)
    assert validate_scenario({"points": [[1, 2]]})["priority"] is None


@pytest.mark.parametrize("scenario", [{"points": []}, {"points": [[1, 2, 3]]}, {}])
def test_validate_scenario_rejects_malformed(scenario):
    with pytest.raises(ValidationError):
        validate_scenario(scenario)


def test_progress_recorder_keeps_latest_snapshot():
    seen = []
    recorder = ProgressRecorder(cost_fn=len, listener=seen.append)
    recorder((Point(0, 0), Point(1, 1)))
    recorder([Point(2, 2)])

    snapshot, cost = recorder.latest()
    assert snapshot == (Point(2, 2),)
    assert cost == 1
    assert recorder.count == 2
    assert seen[-1] == (Point(2, 2),)


def test_submit_solve_runs_on_worker_thread():
    solver = AnnealingSolver(20, 20, decay=0.999)
    points = [Point(x, y) for x, y in SQUARE]
    recorder = ProgressRecorder(cost_fn=lambda path: solver.cost(path, points[0]))

    with ThreadPoolExecutor(max_workers=1) as pool:
        future, cancel = submit_solve(
            solver, points, points[0], recorder, rng=random.Random(6), executor=pool
        )
        assert future.result(timeout=30) is None

    assert not cancel.is_set()
    snapshot, cost = recorder.latest()
    if snapshot is not None:
        assert Counter(snapshot) == Counter(points)
        assert cost == pytest.approx(30.0)


def test_run_scenario_safe_success():
    cfg, hcfg = _square_configs()
    result = run_scenario_safe(
        {"points": SQUARE, "priority": [0, 0]}, cfg, hcfg, seed=3, timeout=30
    )
    assert result["success"] is True
    assert result["cancelled"] is False
    if result["best_path"] is not None:
        assert result["best_path"][0] == [0, 0]
        assert result["best_cost"] == pytest.approx(30.0)
        assert result["improvements"] >= 1


def test_run_scenario_safe_reports_validation_error():
    cfg, hcfg = _square_configs()
    result = run_scenario_safe({"points": []}, cfg, hcfg)
    assert result["success"] is False
    assert "error" in result


def test_run_scenario_safe_reports_bad_config():
    _, hcfg = _square_configs()
    bad = AnnealConfig(width=20, height=20, decay=1.5, floor=1.0)
    result = run_scenario_safe({"points": SQUARE}, bad, hcfg)
    assert result["success"] is False


def test_run_scenario_safe_cancels_on_timeout():
    cfg, hcfg = _square_configs(decay=0.99999999)
    result = run_scenario_safe(
        {"points": SQUARE, "priority": [0, 0]}, cfg, hcfg, seed=1, timeout=0.2
    )
    assert result["success"] is True
    assert result["cancelled"] is True


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("ANNEAL_WIDTH", "123")
    monkeypatch.setenv("ANNEAL_DECAY", "0.5")
    monkeypatch.setenv("ANNEAL_POINT_COUNT", "7")
    monkeypatch.delenv("ANNEAL_HEIGHT", raising=False)
    cfg = get_anneal_config()
    assert cfg.width == 123
    assert cfg.decay == 0.5
    assert cfg.height == 500
    assert get_harness_config().point_count == 7
