"""
Prediction entry point used by the UI collaborator.

validate -> ensure the session is loaded -> marshal -> run -> decode.
predict() never raises; every failure comes back as a typed outcome.
"""

import asyncio
import logging
import time
from typing import Any, Mapping, Optional

from . import marshaller
from .metrics import E2E, FAILURES, INF, PREDICTIONS
from .outcomes import (INFERENCE_FAILED, TIMEOUT, InferenceFailure,
                       PredictionOutcome, Success, ValidationFailure)
from .session import ModelSessionManager
from .validator import FeatureVector, ValidationResult, validate

log = logging.getLogger(__name__)


def _collect_late_result(run: "asyncio.Future") -> None:
    if run.cancelled():
        return
    error = run.exception()
    if error is not None:
        log.warning(f"Inference failed after timeout: {error}")
    else:
        log.info("Inference finished after timeout, result discarded")


class PredictionService:
    def __init__(self, sessions: ModelSessionManager, timeout_s: Optional[float] = None):
        self.sessions = sessions
        self.timeout_s = timeout_s

    async def initialize(self) -> Optional[InferenceFailure]:
        """Optional warm-up; loads the model ahead of the first prediction."""
        return await self.sessions.ensure_loaded()

    def validate(self, raw: Mapping[str, Any]) -> ValidationResult:
        return validate(raw)

    async def predict(self, raw: Mapping[str, Any]) -> PredictionOutcome:
        t0 = time.perf_counter()
        outcome = await self._predict(raw)
        E2E.observe((time.perf_counter() - t0) * 1000)
        if isinstance(outcome, Success):
            PREDICTIONS.labels("success").inc()
        elif isinstance(outcome, ValidationFailure):
            PREDICTIONS.labels("validation_failure").inc()
        else:
            PREDICTIONS.labels("inference_failure").inc()
            FAILURES.labels(outcome.reason).inc()
        return outcome

    async def _predict(self, raw: Mapping[str, Any]) -> PredictionOutcome:
        result = self.validate(raw)
        if not result.ok:
            log.debug(f"Validation failed fields={sorted(result.errors)}")
            return ValidationFailure(field_errors=dict(result.errors))

        failure = await self.sessions.ensure_loaded()
        if failure is not None:
            return failure

        try:
            label = await self._infer(result.vector)
        except asyncio.TimeoutError:
            log.warning(f"Inference exceeded {self.timeout_s}s")
            return InferenceFailure(reason=TIMEOUT,
                                    detail=f"no result within {self.timeout_s}s")
        except Exception as e:
            log.exception("inference_failed")
            return InferenceFailure(reason=INFERENCE_FAILED, detail=str(e))

        log.debug(f"Prediction {label} for {result.vector}")
        return Success(label=label)

    async def _infer(self, vector: FeatureVector) -> int:
        session = self.sessions.session()
        if session is None:
            raise RuntimeError("model session is not ready")
        feeds = marshaller.to_tensors(vector)

        t_inf = time.perf_counter()
        run = asyncio.ensure_future(session.run(feeds))
        run.add_done_callback(lambda _: INF.observe((time.perf_counter() - t_inf) * 1000))
        if self.timeout_s is None:
            return marshaller.decode(await run)
        try:
            output = await asyncio.wait_for(asyncio.shield(run), self.timeout_s)
        except asyncio.TimeoutError:
            # the run keeps going after a timeout; only this caller stops waiting
            run.add_done_callback(_collect_late_result)
            raise
        return marshaller.decode(output)
