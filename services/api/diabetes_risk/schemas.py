from typing import Any, Dict, Optional, Tuple
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, create_model


class FeatureSpec(BaseModel):
    """One accepted measurement. Order in FEATURE_SCHEMA is the tensor order."""

    model_config = ConfigDict(frozen=True)

    name: str
    field: str
    label: str
    min: float
    max: float
    integer_only: bool = False
    unit: str = ""
    step: float = 1.0


FEATURE_SCHEMA: Tuple[FeatureSpec, ...] = (
    FeatureSpec(name="Pregnancies", field="pregnancies", label="Pregnancies",
                min=0, max=17, integer_only=True),
    FeatureSpec(name="Glucose", field="glucose", label="Glucose",
                min=0, max=199, unit="mg/dL"),
    FeatureSpec(name="BloodPressure", field="bloodPressure", label="Blood Pressure",
                min=0, max=122, unit="mmHg"),
    FeatureSpec(name="SkinThickness", field="skinThickness", label="Skin Thickness",
                min=0, max=99, unit="mm"),
    FeatureSpec(name="Insulin", field="insulin", label="Insulin",
                min=0, max=846, unit="mIU/L"),
    FeatureSpec(name="BMI", field="bmi", label="BMI",
                min=0, max=67.1, unit="kg/m2", step=0.1),
    FeatureSpec(name="DiabetesPedigreeFunction", field="diabetesPedigreeFunction",
                label="Diabetes Pedigree Function", min=0.08, max=2.42, step=0.01),
    FeatureSpec(name="Age", field="age", label="Age",
                min=21, max=81, unit="years"),
)

_BY_KEY: Dict[str, FeatureSpec] = {
    **{s.name: s for s in FEATURE_SCHEMA},
    **{s.field: s for s in FEATURE_SCHEMA},
}


def specs() -> Tuple[FeatureSpec, ...]:
    return FEATURE_SCHEMA


def get_spec(key: str) -> FeatureSpec:
    """Look up a spec by model input name or raw field key."""
    try:
        return _BY_KEY[key]
    except KeyError:
        raise KeyError(f"unknown feature: {key}") from None


# Request body: one optional field per feature, keyed by form field or model
# input name. Values are left untyped so the validator sees exactly what was sent.
RawFields = create_model(
    "RawFields",
    __config__=ConfigDict(extra="ignore"),
    **{
        s.field: (Optional[Any], Field(None, validation_alias=AliasChoices(s.field, s.name)))
        for s in FEATURE_SCHEMA
    },
)


class PredictionResponse(BaseModel):
    status: str = Field(..., pattern=r"^(success|validation_failure|inference_failure)$")
    label: Optional[int] = None
    label_text: Optional[str] = None
    field_errors: Dict[str, str] = Field(default_factory=dict)
    reason: Optional[str] = None
    detail: Optional[str] = None
    corr_id: str
    latency_ms: int = 0


class ModelStatus(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    status: str
    model_path: str
    model_tag: str
    load_attempts: int
    reason: Optional[str] = None
    detail: Optional[str] = None
