"""Config-driven training runs with metrics, manifests and checkpoints."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence

from ..core.errors import ConfigurationError
from ..core.types import NetworkArchitecture, RunResult, TrainingConfig
from ..data import registry
from ..data.scenarios import SCENARIO_NAMES
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .checkpoint import save_weights
from .session import SessionState, TrainingSession


def _scenario_preset(name: str) -> Mapping[str, object]:
    return {
        "data": {"name": name, "options": {}},
        "model": {"hidden": [12, 8], "activation": "relu", "init": "uniform"},
        "train": {
            "epochs": 100,
            "batch_size": 5,
            "lr": 0.01,
            "seed": 0,
            "loss": "mse",
            "run_dir": f"runs/{name.replace('_', '-')}",
            "enable_plots": False,
        },
    }


_PRESETS: Dict[str, Mapping[str, object]] = {
    name: _scenario_preset(name) for name in (*SCENARIO_NAMES, "combined")
}
_PRESETS["synthetic-min"] = {
    "data": {
        "name": "synthetic",
        "options": {"n_examples": 16, "input_size": 3, "output_size": 1, "seed": 0},
    },
    "model": {"hidden": [4], "activation": "tanh", "init": "uniform"},
    "train": {
        "epochs": 50,
        "batch_size": 4,
        "lr": 0.1,
        "seed": 7,
        "loss": "mse",
        "metrics": ["mae"],
        "run_dir": "runs/synthetic-min",
        "enable_plots": False,
    },
}
_PRESETS["activation-sweep"] = {
    "sweep": {"activations": ["relu", "leaky_relu", "sigmoid", "tanh"], "seeds": [0, 1]},
    "data": {"name": "baseline", "options": {}},
    "model": {"hidden": [12, 8], "init": "uniform"},
    "train": {
        "epochs": 50,
        "batch_size": 5,
        "lr": 0.05,
        "loss": "mse",
        "run_dir": "runs/activation-sweep",
        "enable_plots": False,
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        presets: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = _read_preset_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                presets[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = presets
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        available = ", ".join(sorted(presets()))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}") from exc


def run_pipeline(config: Mapping[str, object]) -> RunResult | List[RunResult]:
    if "sweep" in config:
        return _run_sweep(config)
    return _train_single(config)


def _run_sweep(config: Mapping[str, object]) -> List[RunResult]:
    sweep_cfg = config["sweep"]
    base_dir = Path(str(config.get("train", {}).get("run_dir", "runs/sweep")))
    results: List[RunResult] = []
    for activation in sweep_cfg.get("activations", ["relu"]):
        for seed in sweep_cfg.get("seeds", [0]):
            cfg = deepcopy(dict(config))
            cfg.pop("sweep", None)
            cfg.setdefault("model", {})["activation"] = activation
            train_cfg = cfg.setdefault("train", {})
            train_cfg["seed"] = seed
            train_cfg["run_dir"] = str(base_dir / f"{activation}-seed{seed}")
            results.append(_train_single(cfg))
    return results


def _train_single(config: Mapping[str, object]) -> RunResult:
    data_cfg = dict(config["data"])
    model_cfg = dict(config.get("model", {}))
    train_cfg = dict(config.get("train", {}))

    dataset = registry.get_dataset(data_cfg["name"], **data_cfg.get("options", {}))
    hidden_dims = _build_hidden(model_cfg)
    dims = _build_dims(model_cfg, hidden_dims, dataset)
    architecture = NetworkArchitecture.from_layer_sizes(dims)

    seed = int(train_cfg.get("seed", 0))
    training_config = TrainingConfig(
        learning_rate=float(train_cfg.get("lr", 0.01)),
        batch_size=int(train_cfg.get("batch_size", min(5, len(dataset)))),
        epochs=int(train_cfg.get("epochs", 1)),
        activation=str(model_cfg.get("activation", "relu")),
        loss=str(train_cfg.get("loss", "mse")),
    )
    metric_names = _parse_metrics(train_cfg.get("metrics", ()))
    patience = train_cfg.get("early_stopping_patience")
    patience = int(patience) if patience is not None else None

    run_dir = _resolve_run_dir(train_cfg, dataset.name, training_config.activation.value)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        examples=len(dataset),
        dims=dims,
        activation=training_config.activation.value,
        loss=training_config.loss,
        learning_rate=training_config.learning_rate,
        batch_size=training_config.batch_size,
        epochs=training_config.epochs,
    )

    train_jsonl = JsonlSink(run_dir / "metrics_train.jsonl", split="train", seed=seed)
    train_csv = CsvSink(run_dir / "metrics_train.csv", split="train")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))

    session = TrainingSession(
        architecture,
        training_config,
        dataset,
        seed=seed,
        callbacks=[train_jsonl, train_csv, plots],
        metric_names=metric_names,
        init_distribution=str(model_cfg.get("init", "uniform")),
    )
    session.initialize()
    session.start()

    best_loss = float("inf")
    epochs_no_improve = 0
    try:
        while session.state is SessionState.TRAINING:
            metrics = session.step_epoch()
            if metrics is None:  # pragma: no cover - guardrail
                break
            if metrics.loss < best_loss - 1e-12:
                best_loss = metrics.loss
                epochs_no_improve = 0
                save_weights(run_dir / "best.npz", session.weights)
            else:
                epochs_no_improve += 1
                if patience and epochs_no_improve >= patience:
                    session.stop()
    finally:
        plots.close()

    last_path = save_weights(run_dir / "last.npz", session.weights)
    safe_config = _safe_config(config, hidden_dims)
    provenance = {"name": dataset.name, "examples": len(dataset), **dataset.provenance}
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=provenance,
        layer_sizes=dims,
        parameter_count=session.weights.parameter_count(),
    )
    summary_tail = int(train_cfg.get("summary_tail", 32))
    summary_path = write_summary(train_jsonl.path, run_dir / "summary.json", tail=summary_tail)

    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))
    (run_dir / "metrics.jsonl").write_text(train_jsonl.path.read_text())
    (run_dir / "metrics.csv").write_text(train_csv.path.read_text())

    return RunResult(
        epochs=len(session.history),
        metrics_path=str(train_jsonl.path),
        manifest_path=manifest,
        summary_path=str(summary_path),
        checkpoint_path=str(last_path),
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str, activation: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset / activation


def _build_hidden(config: Mapping[str, object]) -> List[int]:
    if "hidden" in config:
        return [int(h) for h in config["hidden"]]  # type: ignore[union-attr]
    hidden_dim = int(config.get("hidden_dim", 8))
    depth = int(config.get("depth", 1))
    return [hidden_dim for _ in range(depth)]


def _build_dims(
    model_cfg: Mapping[str, object], hidden: Sequence[int], dataset: registry.Dataset
) -> List[int]:
    d_in = int(model_cfg.get("d_in", dataset.input_size))
    d_out = int(model_cfg.get("d_out", dataset.output_size))
    if d_in != dataset.input_size:
        raise ConfigurationError(
            f"Configured d_in={d_in} but dataset {dataset.name} has {dataset.input_size} inputs"
        )
    if d_out != dataset.output_size:
        raise ConfigurationError(
            f"Configured d_out={d_out} but dataset {dataset.name} has {dataset.output_size} outputs"
        )
    return [d_in, *hidden, d_out]


def _parse_metrics(value: object) -> List[str]:
    if isinstance(value, str):
        return [m.strip() for m in value.split(",") if m.strip()]
    return [str(m) for m in value]  # type: ignore[union-attr]


def _safe_config(config: Mapping[str, object], hidden_dims: Iterable[int]) -> Mapping[str, object]:
    copied = json.loads(json.dumps(config))
    copied.setdefault("model", {})["hidden"] = list(hidden_dims)
    return copied


def _print_startup_summary(
    *,
    dataset_name: str,
    examples: int,
    dims: Sequence[int],
    activation: str,
    loss: str,
    learning_rate: float,
    batch_size: int,
    epochs: int,
) -> None:
    print("=== policynet run ===")
    print(f"Dataset       : {dataset_name} ({examples} examples)")
    print(f"Layers        : {list(dims)}")
    print(f"Activation    : {activation} (output: sigmoid)")
    print(f"Loss          : {loss}")
    print(f"Learning rate : {learning_rate}")
    print(f"Batch size    : {batch_size}")
    print(f"Epochs        : {epochs}")
    print("=====================")


__all__ = ["run_pipeline", "load_preset", "presets"]
