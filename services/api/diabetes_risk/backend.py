"""
Model runtimes behind the session manager.

A backend knows how to turn an artifact into a session; a session knows how to
run one set of named input tensors and hand back the first output tensor.
The onnxruntime calls are blocking, so they are pushed to a worker thread and
awaited; the pipeline itself stays on the event loop.
"""

import abc
import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np
import onnxruntime as ort

from .exceptions import ModelInvocationError, ModelLoadError
from .schemas import specs

log = logging.getLogger(__name__)


class ModelSession(abc.ABC):
    @abc.abstractmethod
    async def run(self, feeds: Dict[str, np.ndarray]) -> np.ndarray:
        """Run one inference and return the first output tensor."""

    async def close(self) -> None:
        return None


class ModelBackend(abc.ABC):
    @abc.abstractmethod
    async def load(self) -> ModelSession:
        """Load the artifact. Raises ModelLoadError on any failure."""


class OnnxModelSession(ModelSession):
    def __init__(self, session: "ort.InferenceSession"):
        self._session: Optional[ort.InferenceSession] = session
        self.input_names: List[str] = [i.name for i in session.get_inputs()]
        self.output_names: List[str] = [o.name for o in session.get_outputs()]

    def _run_sync(self, feeds: Dict[str, np.ndarray]) -> np.ndarray:
        if self._session is None:
            raise ModelInvocationError("session is closed")
        try:
            outputs = self._session.run(self.output_names[:1], feeds)
        except Exception as e:
            raise ModelInvocationError(f"onnxruntime run failed: {e}") from e
        return np.asarray(outputs[0])

    async def run(self, feeds: Dict[str, np.ndarray]) -> np.ndarray:
        return await asyncio.to_thread(self._run_sync, feeds)

    async def close(self) -> None:
        self._session = None


class OnnxRuntimeBackend(ModelBackend):
    def __init__(self, model_path: str, providers: Sequence[str] = ("CPUExecutionProvider",)):
        self.model_path = Path(model_path)
        self.providers = list(providers)

    def _load_sync(self) -> OnnxModelSession:
        if not self.model_path.is_file():
            raise ModelLoadError(f"model artifact not found: {self.model_path}")
        try:
            session = ort.InferenceSession(
                self.model_path.as_posix(), providers=self.providers)
        except Exception as e:
            raise ModelLoadError(f"could not initialise onnxruntime session: {e}") from e

        wrapped = OnnxModelSession(session)
        missing = [s.name for s in specs() if s.name not in wrapped.input_names]
        if missing:
            raise ModelLoadError(f"model is missing inputs: {', '.join(missing)}")
        if not wrapped.output_names:
            raise ModelLoadError("model declares no outputs")
        log.info(
            f"Loaded {self.model_path} inputs={wrapped.input_names} outputs={wrapped.output_names}")
        return wrapped

    async def load(self) -> ModelSession:
        return await asyncio.to_thread(self._load_sync)
