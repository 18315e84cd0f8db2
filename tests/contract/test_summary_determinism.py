from pathlib import Path

from policynet.training import pipelines


def test_summary_outputs_are_deterministic(tmp_path):
    config = {
        "data": {
            "name": "synthetic",
            "options": {"n_examples": 12, "input_size": 3, "output_size": 1, "seed": 123},
        },
        "model": {"hidden": [4], "activation": "tanh"},
        "train": {
            "epochs": 8,
            "batch_size": 4,
            "seed": 55,
            "lr": 0.05,
            "metrics": ["mae", "rmse"],
            "run_dir": str(tmp_path / "run_a"),
            "enable_plots": False,
        },
    }

    first = pipelines.run_pipeline(config)
    summary_a = Path(first.summary_path).read_bytes()
    metrics_a = Path(first.metrics_path).read_bytes()

    config["train"]["run_dir"] = str(tmp_path / "run_b")
    second = pipelines.run_pipeline(config)
    summary_b = Path(second.summary_path).read_bytes()
    metrics_b = Path(second.metrics_path).read_bytes()

    assert metrics_a == metrics_b
    assert summary_a == summary_b
