import os
from typing import List, Optional

SERVICE_NAME = os.getenv("SERVICE_NAME", "Diabetes Risk API")
SERVICE_VERSION = "1.0.0"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

MODEL_PATH = os.getenv("MODEL_PATH", "models/diabetes_model.onnx")
MODEL_TAG = os.getenv("MODEL_TAG", "diabetes_svm@1")

WARMUP_ON_STARTUP = os.getenv(
    "WARMUP_ON_STARTUP", "true").lower() in ("1", "true", "yes")


def _providers(raw: str) -> List[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


ORT_PROVIDERS = _providers(os.getenv("ORT_PROVIDERS", "CPUExecutionProvider"))


def _timeout(raw: str) -> Optional[float]:
    if not raw.strip():
        return None
    value = float(raw)
    return value if value > 0 else None


PREDICT_TIMEOUT_S = _timeout(os.getenv("PREDICT_TIMEOUT_S", ""))
