import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from .schemas import FeatureSpec, specs

# Eight floats in FEATURE_SCHEMA order.
FeatureVector = Tuple[float, ...]


@dataclass(frozen=True)
class ValidationResult:
    vector: Optional[FeatureVector] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def _fmt(bound: float) -> str:
    return f"{bound:g}"


def _raw_value(raw: Mapping[str, Any], spec: FeatureSpec) -> Any:
    value = raw.get(spec.field)
    if value is None:
        value = raw.get(spec.name)
    return value


def check_field(spec: FeatureSpec, value: Any) -> Tuple[Optional[float], Optional[str]]:
    """Return (number, None) when value is acceptable for spec, else (None, message)."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None, f"{spec.label} is required"
    if isinstance(value, bool) or (isinstance(value, str) and "_" in value):
        return None, f"{spec.label} must be a valid number"
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return None, f"{spec.label} must be a valid number"
    if not math.isfinite(number):
        return None, f"{spec.label} must be a valid number"
    if spec.integer_only and not number.is_integer():
        return None, f"{spec.label} must be a whole number"
    if number < spec.min or number > spec.max:
        return None, f"{spec.label} must be between {_fmt(spec.min)} and {_fmt(spec.max)}"
    return number, None


def validate(raw: Mapping[str, Any]) -> ValidationResult:
    """
    Check every schema field of a raw form submission.

    All fields are checked; errors are keyed by the raw field name. A vector is
    returned only when no field failed.
    """
    values = []
    errors: Dict[str, str] = {}
    for spec in specs():
        number, error = check_field(spec, _raw_value(raw, spec))
        if error is not None:
            errors[spec.field] = error
        else:
            values.append(number)
    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(vector=tuple(values))
