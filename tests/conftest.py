"""
Shared fixtures: an in-memory model backend that counts loads, so the session
lifecycle can be exercised without an ONNX artifact.
"""
import asyncio
from typing import Dict, List, Optional, Sequence

import numpy as np
import pytest

from diabetes_risk.backend import ModelBackend, ModelSession
from diabetes_risk.exceptions import ModelInvocationError, ModelLoadError
from diabetes_risk.service import PredictionService
from diabetes_risk.session import ModelSessionManager

PIMA_FIRST_RECORD = {
    "pregnancies": "6", "glucose": "148", "bloodPressure": "72", "skinThickness": "35",
    "insulin": "0", "bmi": "33.6", "diabetesPedigreeFunction": "0.627", "age": "50",
}


class FakeSession(ModelSession):
    def __init__(self, output: Sequence[float] = (1.0,), error: Optional[Exception] = None,
                 delay: float = 0.0):
        self.output = output
        self.error = error
        self.delay = delay
        self.calls: List[Dict[str, np.ndarray]] = []
        self.closed = False

    async def run(self, feeds):
        self.calls.append(feeds)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return np.array([self.output], dtype=np.float32)

    async def close(self):
        self.closed = True


class FakeBackend(ModelBackend):
    def __init__(self, session: Optional[FakeSession] = None, fail: bool = False,
                 delay: float = 0.0):
        self.session = session or FakeSession()
        self.fail = fail
        self.delay = delay
        self.load_calls = 0

    async def load(self):
        self.load_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ModelLoadError("model artifact not found: missing.onnx")
        return self.session


@pytest.fixture
def pima_record():
    return dict(PIMA_FIRST_RECORD)


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def failing_backend():
    return FakeBackend(fail=True)


@pytest.fixture
def service(fake_backend):
    return PredictionService(ModelSessionManager(fake_backend))


@pytest.fixture
def crashing_session():
    return FakeSession(error=ModelInvocationError("onnxruntime run failed: bad shape"))
