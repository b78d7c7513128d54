"""
Lifecycle of the process-wide model session.

    UNLOADED --ensure_loaded--> LOADING --ok--> READY
                                        --err-> FAILED --retry--> LOADING

READY and FAILED stick until the process ends; a failed load is only repeated
through retry(). While LOADING, every caller awaits the same in-flight task,
so the artifact is never loaded twice at once.
"""

import asyncio
import enum
import logging
from typing import Optional

from .backend import ModelBackend, ModelSession
from .metrics import LOAD_ATTEMPTS
from .outcomes import MODEL_LOAD_FAILED, InferenceFailure

log = logging.getLogger(__name__)


class SessionStatus(str, enum.Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class ModelSessionManager:
    def __init__(self, backend: ModelBackend):
        self._backend = backend
        self._status = SessionStatus.UNLOADED
        self._session: Optional[ModelSession] = None
        self._failure: Optional[InferenceFailure] = None
        self._inflight: Optional["asyncio.Task[Optional[InferenceFailure]]"] = None
        self.load_attempts = 0

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def failure(self) -> Optional[InferenceFailure]:
        return self._failure

    def session(self) -> Optional[ModelSession]:
        return self._session if self._status is SessionStatus.READY else None

    async def ensure_loaded(self) -> Optional[InferenceFailure]:
        """Load the model if needed. Returns None when ready, else the load failure."""
        if self._status is SessionStatus.READY:
            return None
        if self._status is SessionStatus.FAILED:
            return self._failure
        if self._status is SessionStatus.UNLOADED:
            self._start_load()
        # shield: a caller that gives up must not cancel the shared load
        return await asyncio.shield(self._inflight)

    async def retry(self) -> Optional[InferenceFailure]:
        """Explicitly re-attempt a failed load. Otherwise same as ensure_loaded."""
        if self._status is SessionStatus.FAILED:
            log.info("Retrying model load after failure")
            self._start_load()
        return await self.ensure_loaded()

    def _start_load(self) -> None:
        self._status = SessionStatus.LOADING
        self._failure = None
        self.load_attempts += 1
        self._inflight = asyncio.ensure_future(self._load())

    async def _load(self) -> Optional[InferenceFailure]:
        try:
            session = await self._backend.load()
        except Exception as e:
            log.exception("model_load_failed")
            LOAD_ATTEMPTS.labels("failed").inc()
            self._failure = InferenceFailure(reason=MODEL_LOAD_FAILED, detail=str(e))
            self._status = SessionStatus.FAILED
            return self._failure
        LOAD_ATTEMPTS.labels("ok").inc()
        self._session = session
        self._status = SessionStatus.READY
        log.info(f"Model session ready after {self.load_attempts} attempt(s)")
        return None

    async def close(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            await asyncio.shield(self._inflight)
        if self._session is not None:
            await self._session.close()
        self._session = None
        self._failure = None
        self._inflight = None
        self._status = SessionStatus.UNLOADED
