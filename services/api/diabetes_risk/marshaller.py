import logging
import math
from typing import Any, Dict, Sequence

import numpy as np

from .metrics import OUTPUT_ANOMALIES
from .schemas import specs

log = logging.getLogger(__name__)


def to_tensors(vector: Sequence[float]) -> Dict[str, np.ndarray]:
    """
    Build the model feeds: one float32 tensor of shape (1, 1) per feature,
    keyed by the model's input names in schema order.

    Names and shapes are the contract with the exported artifact.
    """
    schema = specs()
    if len(vector) != len(schema):
        raise ValueError(f"expected {len(schema)} features, got {len(vector)}")
    return {
        spec.name: np.array([[value]], dtype=np.float32)
        for spec, value in zip(schema, vector)
    }


def decode(raw_output: Any) -> int:
    """
    Map the first element of the model output to a class label.

    Values other than exactly 0 or 1 are logged and resolved by rounding half up
    and clamping to {0, 1}.
    """
    flat = np.asarray(raw_output).ravel()
    if flat.size == 0:
        raise ValueError("model returned an empty output tensor")
    value = float(flat[0])
    if math.isnan(value):
        raise ValueError("model returned NaN")
    if value not in (0.0, 1.0):
        OUTPUT_ANOMALIES.inc()
        log.warning(f"Unexpected model output: {value}, rounding to nearest class")
    return int(math.floor(min(1.0, max(0.0, value)) + 0.5))
