import csv
import json

import pytest

from policynet.reporting import CsvSink, JsonlSink, MetricsCapture, PlotAdapter, write_manifest
from policynet.reporting.summary import build_summary, compute_auc


def test_jsonl_sink_records(tmp_path):
    sink = JsonlSink(tmp_path / "metrics.jsonl", split="train", seed=3, sha="abc")
    sink.on_epoch(1, {"loss": 0.5, "accuracy": 0.0})
    sink(2, {"loss": 0.25, "accuracy": 0.5})
    lines = (tmp_path / "metrics.jsonl").read_text().splitlines()
    assert len(lines) == 2
    record = json.loads(lines[1])
    assert record == {
        "epoch": 2,
        "split": "train",
        "seed": 3,
        "sha": "abc",
        "loss": 0.25,
        "accuracy": 0.5,
    }


def test_csv_sink_sorted_header(tmp_path):
    sink = CsvSink(tmp_path / "metrics.csv")
    sink.on_epoch(1, {"loss": 1.0, "accuracy": 0.0})
    sink.on_epoch(2, {"loss": 0.5, "accuracy": 1.0})
    with (tmp_path / "metrics.csv").open() as handle:
        rows = list(csv.reader(handle))
    assert rows[0] == ["accuracy", "epoch", "loss", "split"]
    assert len(rows) == 3


def test_metrics_capture():
    capture = MetricsCapture()
    capture.on_epoch(1, {"loss": 1.0})
    capture.on_epoch(2, {"loss": 0.5})
    assert capture.last == {"loss": 0.5}
    assert [epoch for epoch, _ in capture.history] == [1, 2]


def test_manifest_contents(tmp_path):
    path = write_manifest(
        tmp_path / "manifest.json",
        config={"train": {"seed": 1}},
        dataset_provenance={"name": "baseline"},
        layer_sizes=[8, 12, 4],
        parameter_count=160,
    )
    manifest = json.loads(open(path).read())
    assert manifest["network"] == {"layer_sizes": [8, 12, 4], "parameters": 160}
    assert manifest["dataset"]["name"] == "baseline"
    assert "git_sha" in manifest


def test_summary_statistics():
    records = [
        {"epoch": 1, "split": "train", "seed": 0, "loss": 0.9, "accuracy": 0.0},
        {"epoch": 2, "split": "train", "seed": 0, "loss": 0.3, "accuracy": 0.5},
        {"epoch": 3, "split": "train", "seed": 0, "loss": 0.6, "accuracy": 0.5},
    ]
    summary = build_summary(records, tail=2)
    assert summary["epochs"] == 3
    assert summary["best_epoch"] == 2
    assert summary["tail_window"] == 2
    loss = summary["metrics"]["loss"]
    assert loss["min"] == 0.3
    assert loss["last"] == 0.6
    assert loss["tail_auc"] == pytest.approx(0.45)
    assert "seed" not in summary["metrics"]


def test_compute_auc_empty():
    assert compute_auc([]) == 0.0
    assert compute_auc([1.0, 1.0, 1.0]) == pytest.approx(2.0)


def test_plot_adapter_headless(tmp_path):
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter.on_epoch(1, {"loss": 1.0, "accuracy": 0.0})
    adapter.on_epoch(2, {"loss": 0.5, "accuracy": 0.5})
    path = adapter.close()
    assert path == tmp_path / "loss.png"
    assert path.exists()


def test_plot_adapter_disabled(tmp_path):
    adapter = PlotAdapter(tmp_path / "off")
    adapter.on_epoch(1, {"loss": 1.0})
    assert adapter.close() is None
    assert not (tmp_path / "off").exists()
