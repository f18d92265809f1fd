from unittest.mock import AsyncMock, MagicMock

import pytest

from resumind.models.submission import (
    ConversionResult,
    Document,
    Error,
    Idle,
    NavigatingAway,
    Running,
    StoredFile,
)
from resumind.schemas.feedback import FeedbackResponse
from resumind.services.attempt_registry import AttemptNotFound, AttemptRegistry
from resumind.services.submission_service import SubmissionService

RESUME = Document(filename="resume.pdf", content=b"%PDF-1.4 fake")


def _service(uploaded: bool = True) -> SubmissionService:
    storage = MagicMock()
    storage.upload = AsyncMock(
        return_value=StoredFile("x/resume.pdf", "resume.pdf") if uploaded else None
    )
    converter = MagicMock()
    converter.convert = AsyncMock(
        return_value=ConversionResult(file=Document("resume.png", b"\x89PNG", "image/png"))
    )
    kv = MagicMock()
    kv.set = AsyncMock(return_value=True)
    ai = MagicMock()
    ai.feedback = AsyncMock(
        return_value=FeedbackResponse.model_validate({"message": {"content": "{}"}})
    )
    return SubmissionService(storage=storage, converter=converter, kv=kv, ai=ai)


@pytest.mark.asyncio
async def test_finished_attempts_release_their_service():
    registry = AttemptRegistry()
    pairs = []
    for _ in range(200):
        service = _service()
        pairs.append((registry.register(service), service))

    for _, service in pairs:
        await service.submit(RESUME, {})

    assert registry.active() == 0
    attempt_id, _ = pairs[0]
    assert isinstance(registry.state(attempt_id), NavigatingAway)


@pytest.mark.asyncio
async def test_failed_attempt_keeps_service_for_reset():
    registry = AttemptRegistry()
    service = _service(uploaded=False)
    attempt_id = registry.register(service)
    await service.submit(RESUME, {})

    assert registry.active() == 1
    assert registry.state(attempt_id) == Error("Failed to upload resume")
    assert registry.reset(attempt_id) == Idle()
    assert registry.state(attempt_id) == Idle()


@pytest.mark.asyncio
async def test_reset_of_finished_attempt_returns_final_state():
    registry = AttemptRegistry()
    service = _service()
    attempt_id = registry.register(service)
    await service.submit(RESUME, {})
    assert isinstance(registry.reset(attempt_id), NavigatingAway)


def test_tracked_attempts_are_bounded():
    registry = AttemptRegistry(max_attempts=3)
    ids = [registry.register(_service()) for _ in range(5)]

    assert len(registry) == 3
    assert registry.active() == 3
    with pytest.raises(AttemptNotFound):
        registry.state(ids[0])
    assert registry.state(ids[-1]) == Idle()


def test_initial_state_is_reported_until_first_transition():
    registry = AttemptRegistry()
    attempt_id = registry.register(_service(), initial=Running("Uploading resume..."))
    assert registry.state(attempt_id) == Running("Uploading resume...")


def test_unknown_attempt():
    registry = AttemptRegistry()
    with pytest.raises(AttemptNotFound):
        registry.state("missing")
    with pytest.raises(AttemptNotFound):
        registry.reset("missing")
