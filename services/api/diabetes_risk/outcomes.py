"""
Typed results of a prediction request.

Every path through PredictionService.predict ends in exactly one of these;
callers branch on the type instead of catching exceptions.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

MODEL_LOAD_FAILED = "model_load_failed"
INFERENCE_FAILED = "inference_failed"
TIMEOUT = "timeout"

LABEL_TEXT = {0: "No Diabetes", 1: "Diabetes"}


@dataclass(frozen=True)
class Success:
    label: int

    @property
    def label_text(self) -> str:
        return LABEL_TEXT[self.label]


@dataclass(frozen=True)
class ValidationFailure:
    field_errors: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class InferenceFailure:
    reason: str
    detail: Optional[str] = None


PredictionOutcome = Union[Success, ValidationFailure, InferenceFailure]
