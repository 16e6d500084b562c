import json
import sys

import pytest
from conftest import SERVICE_ACCOUNT

import report_benchmark


@pytest.fixture
def workspace(tmp_path):
    secret = tmp_path / "secret.json"
    secret.write_text(json.dumps(SERVICE_ACCOUNT))
    env_file = tmp_path / ".env"
    env_file.write_text(
        f"CLOUD_PROJECT_ID=angular-perf\nCLOUD_DATASET_ID=benchmarks\nCLOUD_SECRET_PATH={secret}\n"
    )
    results = tmp_path / "results.json"
    results.write_text(
        json.dumps({
            "params": [{"name": "param1", "value": 10}],
            "metrics": ["metric1"],
            "samples": [
                {"forceGc": False, "values": {"metric1": 1.5}},
                {"forceGc": True, "values": {}},
            ],
        })
    )
    return env_file, results


def test_main_reports_all_samples_as_one_batch(monkeypatch, workspace):
    env_file, results = workspace
    captured = {}

    def fake_run(config, table_id, batches):
        captured["config"] = config
        captured["table_id"] = table_id
        captured["batches"] = list(batches)

    monkeypatch.setattr(report_benchmark, "run", fake_run)
    monkeypatch.setattr(
        sys,
        "argv",
        ["report_benchmark.py", str(results), "--env-file", str(env_file), "--table", "test"],
    )

    report_benchmark.main()

    config = captured["config"]
    assert captured["table_id"] == "test"
    assert [param.name for param in config.params] == ["param1"]
    assert config.metrics == ["metric1"]
    (rows,) = captured["batches"]
    assert [row["index"] for row in rows] == [0, 1]
    assert rows[0]["m_metric1"] == 1.5
    assert "m_metric1" not in rows[1]
    assert rows[1]["forceGc"] is True
    assert rows[0]["runId"] == rows[1]["runId"]


def test_main_exits_non_zero_on_failure(monkeypatch, workspace):
    env_file, results = workspace

    def failing_run(config, table_id, batches):
        raise RuntimeError("boom")

    monkeypatch.setattr(report_benchmark, "run", failing_run)
    monkeypatch.setattr(
        sys, "argv", ["report_benchmark.py", str(results), "--env-file", str(env_file)]
    )

    with pytest.raises(SystemExit) as excinfo:
        report_benchmark.main()

    assert excinfo.value.code == 1


def test_results_without_samples(tmp_path):
    results = tmp_path / "results.json"
    results.write_text(json.dumps({"params": [], "metrics": [], "samples": []}))

    with pytest.raises(ValueError, match="No samples"):
        report_benchmark.load_results(results)


def test_main_exits_130_when_interrupted(monkeypatch, workspace):
    env_file, results = workspace

    def interrupted_run(config, table_id, batches):
        raise KeyboardInterrupt

    monkeypatch.setattr(report_benchmark, "run", interrupted_run)
    monkeypatch.setattr(
        sys, "argv", ["report_benchmark.py", str(results), "--env-file", str(env_file)]
    )

    with pytest.raises(SystemExit) as excinfo:
        report_benchmark.main()

    assert excinfo.value.code == 130


def test_main_rejects_unnamed_param(monkeypatch, workspace):
    env_file, results = workspace
    results.write_text(
        json.dumps({"params": [{"value": 10}], "metrics": [], "samples": [{"values": {}}]})
    )
    monkeypatch.setattr(report_benchmark, "run", lambda *args: pytest.fail("run was called"))
    monkeypatch.setattr(
        sys, "argv", ["report_benchmark.py", str(results), "--env-file", str(env_file)]
    )

    with pytest.raises(SystemExit) as excinfo:
        report_benchmark.main()

    assert excinfo.value.code == 1
