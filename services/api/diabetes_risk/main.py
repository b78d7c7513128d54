import logging
import time
import uuid
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from . import config
from .backend import OnnxRuntimeBackend
from .outcomes import Success, ValidationFailure
from .schemas import FeatureSpec, ModelStatus, PredictionResponse, RawFields, specs
from .service import PredictionService
from .session import ModelSessionManager

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO))
log = logging.getLogger("api")


def build_service() -> PredictionService:
    backend = OnnxRuntimeBackend(config.MODEL_PATH, providers=config.ORT_PROVIDERS)
    return PredictionService(ModelSessionManager(backend), timeout_s=config.PREDICT_TIMEOUT_S)


def create_app(service: Optional[PredictionService] = None, warmup: Optional[bool] = None) -> FastAPI:
    app = FastAPI(title=config.SERVICE_NAME, version=config.SERVICE_VERSION)
    app.state.service = service or build_service()
    do_warmup = config.WARMUP_ON_STARTUP if warmup is None else warmup

    @app.on_event("startup")
    async def _startup():
        if not do_warmup:
            return
        failure = await app.state.service.initialize()
        if failure is None:
            log.info("Model warmup succeeded")
        else:
            log.warning(f"Model warmup failed (continuing): {failure.detail}")

    @app.on_event("shutdown")
    async def _shutdown():
        await app.state.service.sessions.close()

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    @app.get("/metrics")
    async def metrics():
        return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/v1/schema", response_model=List[FeatureSpec])
    async def schema():
        return list(specs())

    def _model_status() -> ModelStatus:
        sessions = app.state.service.sessions
        failure = sessions.failure
        return ModelStatus(
            status=sessions.status.value, model_path=config.MODEL_PATH,
            model_tag=config.MODEL_TAG, load_attempts=sessions.load_attempts,
            reason=failure.reason if failure else None,
            detail=failure.detail if failure else None,
        )

    @app.get("/v1/model", response_model=ModelStatus)
    async def model_status():
        return _model_status()

    @app.post("/v1/model/reload", response_model=ModelStatus)
    async def model_reload():
        await app.state.service.sessions.retry()
        return _model_status()

    @app.post("/v1/predict", response_model=PredictionResponse)
    async def predict(payload: RawFields, request: Request):
        corr_id = request.headers.get("x-corr-id", str(uuid.uuid4()))
        t0 = time.perf_counter()

        raw: Dict[str, Any] = payload.model_dump()
        outcome = await app.state.service.predict(raw)
        latency_ms = int((time.perf_counter() - t0) * 1000)

        if isinstance(outcome, Success):
            log.debug(f"corr_id={corr_id} label={outcome.label}")
            return PredictionResponse(status="success", label=outcome.label,
                                      label_text=outcome.label_text,
                                      corr_id=corr_id, latency_ms=latency_ms)
        if isinstance(outcome, ValidationFailure):
            return PredictionResponse(status="validation_failure",
                                      field_errors=outcome.field_errors,
                                      corr_id=corr_id, latency_ms=latency_ms)
        log.info(f"corr_id={corr_id} inference_failure reason={outcome.reason}")
        return PredictionResponse(status="inference_failure", reason=outcome.reason,
                                  detail=outcome.detail, corr_id=corr_id,
                                  latency_ms=latency_ms)

    return app


app = create_app()
