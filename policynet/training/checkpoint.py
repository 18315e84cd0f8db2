"""Compressed ``.npz`` checkpoints for network parameters."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from ..core.types import NetworkWeights


def save_weights(path: str | Path, weights: NetworkWeights) -> Path:
    """Write ``weights`` using the ``W0, b0, W1, b1, ...`` layout."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as handle:
        np.savez_compressed(handle, **weights.state_dict())
    return path


def load_weights(path: str | Path) -> NetworkWeights:
    with np.load(Path(path)) as payload:
        state = {name: payload[name] for name in payload.files}
    return NetworkWeights.from_state_dict(state)


__all__ = ["save_weights", "load_weights"]
