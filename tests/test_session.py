import asyncio

import pytest

from diabetes_risk.backend import OnnxRuntimeBackend
from diabetes_risk.session import ModelSessionManager, SessionStatus
from conftest import FakeBackend


@pytest.mark.asyncio
async def test_lazy_until_first_request(fake_backend):
    manager = ModelSessionManager(fake_backend)
    assert manager.status is SessionStatus.UNLOADED
    assert manager.session() is None
    assert fake_backend.load_calls == 0

    assert await manager.ensure_loaded() is None
    assert manager.status is SessionStatus.READY
    assert manager.session() is fake_backend.session


@pytest.mark.asyncio
async def test_ensure_loaded_is_idempotent(fake_backend):
    manager = ModelSessionManager(fake_backend)
    await manager.ensure_loaded()
    await manager.ensure_loaded()
    assert fake_backend.load_calls == 1
    assert manager.load_attempts == 1


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_load():
    backend = FakeBackend(delay=0.05)
    manager = ModelSessionManager(backend)

    results = await asyncio.gather(*(manager.ensure_loaded() for _ in range(5)))

    assert results == [None] * 5
    assert backend.load_calls == 1
    assert manager.status is SessionStatus.READY


@pytest.mark.asyncio
async def test_status_is_loading_while_in_flight():
    backend = FakeBackend(delay=0.05)
    manager = ModelSessionManager(backend)
    first = asyncio.ensure_future(manager.ensure_loaded())
    await asyncio.sleep(0)
    assert manager.status is SessionStatus.LOADING
    assert manager.session() is None
    await first
    assert manager.status is SessionStatus.READY


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_load():
    backend = FakeBackend(delay=0.05)
    manager = ModelSessionManager(backend)
    waiter = asyncio.ensure_future(manager.ensure_loaded())
    await asyncio.sleep(0.01)
    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    assert await manager.ensure_loaded() is None
    assert backend.load_calls == 1


@pytest.mark.asyncio
async def test_failure_is_sticky_until_retry(failing_backend):
    manager = ModelSessionManager(failing_backend)

    for _ in range(3):
        failure = await manager.ensure_loaded()
        assert failure.reason == "model_load_failed"
        assert "missing.onnx" in failure.detail
    assert manager.status is SessionStatus.FAILED
    assert manager.session() is None
    assert failing_backend.load_calls == 1

    failing_backend.fail = False
    assert await manager.retry() is None
    assert manager.status is SessionStatus.READY
    assert failing_backend.load_calls == 2
    assert manager.load_attempts == 2


@pytest.mark.asyncio
async def test_retry_when_ready_does_not_reload(fake_backend):
    manager = ModelSessionManager(fake_backend)
    await manager.ensure_loaded()
    assert await manager.retry() is None
    assert fake_backend.load_calls == 1


@pytest.mark.asyncio
async def test_close_releases_session(fake_backend):
    manager = ModelSessionManager(fake_backend)
    await manager.ensure_loaded()
    await manager.close()
    assert fake_backend.session.closed
    assert manager.status is SessionStatus.UNLOADED
    assert manager.session() is None


@pytest.mark.asyncio
async def test_missing_onnx_artifact_fails_load(tmp_path):
    manager = ModelSessionManager(OnnxRuntimeBackend(str(tmp_path / "absent.onnx")))
    failure = await manager.ensure_loaded()
    assert failure.reason == "model_load_failed"
    assert "not found" in failure.detail


@pytest.mark.asyncio
async def test_corrupt_onnx_artifact_fails_load(tmp_path):
    path = tmp_path / "corrupt.onnx"
    path.write_bytes(b"definitely not a protobuf graph")
    manager = ModelSessionManager(OnnxRuntimeBackend(str(path)))
    failure = await manager.ensure_loaded()
    assert failure.reason == "model_load_failed"
    assert manager.status is SessionStatus.FAILED
