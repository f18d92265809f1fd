import json
import logging
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from resumind.errors import (
    AnalysisFailed,
    AnalysisTimeout,
    ConversionFailed,
    DeadlineExceeded,
    UploadFailed,
    ValidationError,
)
from resumind.models.submission import (
    Document,
    Error,
    Idle,
    JobContext,
    NavigatingAway,
    ProcessState,
    Running,
    StoredFile,
    SubmissionRecord,
)
from resumind.repositories.base import AbstractFileStorage, AbstractKeyValueStore
from resumind.services.conversion_service import DocumentConverter
from resumind.services.deadline import with_deadline
from resumind.services.feedback_service import (
    AIFeedbackClient,
    decode_feedback,
    prepare_instructions,
    select_feedback_text,
)
from resumind.services.record_builder import build_record, record_key, with_feedback

logger = logging.getLogger(__name__)

UPLOADING_RESUME = "Uploading resume..."
CONVERTING = "Converting PDF to image..."
UPLOADING_IMAGE = "Uploading image..."
SAVING = "Saving data..."
ANALYZING = "Analyzing resume..."
COMPLETE = "Analysis complete! Redirecting..."

MISSING_DOCUMENT = "Please upload a file before analyzing"

_FORM_FIELDS = {
    "company_name": ("company-name", "company_name", "companyName"),
    "job_title": ("job-title", "job_title", "jobTitle"),
    "job_description": ("job-description", "job_description", "jobDescription"),
}

StateListener = Callable[[ProcessState], None]


def job_context_from_form(form: Mapping[str, Any] | None) -> JobContext:
    """Pull the three free-text job fields out of submitted form data. Missing values become ""."""
    form = form or {}
    values = {}
    for name, keys in _FORM_FIELDS.items():
        value = next((form[k] for k in keys if form.get(k) is not None), "")
        values[name] = str(value)
    return JobContext(**values)


def resume_page(record_id: str) -> str:
    return f"/resume/{record_id}"


def _new_id() -> str:
    return str(uuid.uuid4())


class SubmissionService:
    """
    Drives one resume submission through upload, conversion, persistence and
    AI analysis, exposing progress as a ProcessState.

    Stages run strictly in order and the first failure ends the attempt in
    Error. Nothing already uploaded or written is undone.
    """

    def __init__(
        self,
        storage: AbstractFileStorage,
        converter: DocumentConverter,
        kv: AbstractKeyValueStore,
        ai: AIFeedbackClient,
        id_factory: Callable[[], str] = _new_id,
        navigate: Callable[[str], None] | None = None,
        analysis_timeout_ms: int = 30000,
    ) -> None:
        self._storage = storage
        self._converter = converter
        self._kv = kv
        self._ai = ai
        self._id_factory = id_factory
        self._navigate = navigate
        self._analysis_timeout_ms = analysis_timeout_ms
        self._state: ProcessState = Idle()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ProcessState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called on every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)
        self._notify(listener, self._state)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, listener: StateListener, state: ProcessState) -> None:
        try:
            listener(state)
        except Exception:
            logger.exception("[submit] state listener failed | state=%s", state)

    def _set_state(self, state: ProcessState) -> None:
        self._state = state
        logger.debug("[submit] state | %s", state)
        for listener in list(self._listeners):
            self._notify(listener, state)

    def _advance(self, label: str) -> None:
        self._set_state(Running(label))

    def reset(self) -> ProcessState:
        """'Try again': leave the Error state. Partial artifacts from the failed attempt stay put."""
        if isinstance(self._state, Error):
            self._set_state(Idle())
        return self._state

    async def submit(
        self, document: Document | None, form: Mapping[str, Any] | None = None
    ) -> ProcessState:
        """Entry point: reject a missing document, otherwise run the pipeline."""
        if document is None:
            exc = ValidationError(MISSING_DOCUMENT)
            logger.info("[submit] rejected | reason=%s", exc)
            self._set_state(Error(str(exc)))
            return self._state
        return await self.analyze(document, job_context_from_form(form))

    async def analyze(self, document: Document, job: JobContext) -> ProcessState:
        if isinstance(self._state, Running):
            raise RuntimeError("a submission is already running")
        try:
            await self._run(document, job)
        except Exception as exc:
            logger.exception("[submit] failed | file=%s | state=%s", document.filename, self._state)
            self._set_state(Error(str(exc) or type(exc).__name__))
        return self._state

    async def _upload(self, document: Document, message: str) -> StoredFile:
        try:
            stored = await self._storage.upload([document])
        except Exception as exc:
            raise UploadFailed(message) from exc
        if stored is None:
            raise UploadFailed(message)
        return stored

    async def _convert(self, document: Document) -> Document:
        try:
            result = await self._converter.convert(document)
        except Exception as exc:
            raise ConversionFailed("PDF to image conversion failed") from exc
        if result is None or result.file is None:
            raise ConversionFailed("PDF to image conversion failed")
        return result.file

    async def _persist(self, record: SubmissionRecord) -> None:
        await self._kv.set(record_key(record.id), json.dumps(record.to_dict()))

    async def _request_feedback(self, resume_path: str, job: JobContext):
        instructions = prepare_instructions(job.job_title, job.job_description)
        try:
            response = await with_deadline(
                self._ai.feedback(resume_path, instructions),
                self._analysis_timeout_ms,
                message="Analysis timed out",
            )
        except DeadlineExceeded as exc:
            raise AnalysisTimeout(str(exc)) from exc
        except AnalysisFailed:
            raise
        except Exception as exc:
            raise AnalysisFailed(str(exc) or "Analysis failed") from exc
        if response is None:
            raise AnalysisFailed("No feedback from AI")
        return response

    async def _run(self, document: Document, job: JobContext) -> None:
        self._advance(UPLOADING_RESUME)
        uploaded_resume = await self._upload(document, "Failed to upload resume")

        self._advance(CONVERTING)
        image = await self._convert(document)

        self._advance(UPLOADING_IMAGE)
        uploaded_image = await self._upload(image, "Failed to upload image")

        self._advance(SAVING)
        record = build_record(self._id_factory(), uploaded_resume.path, uploaded_image.path, job)
        await self._persist(record)
        logger.info("[submit] record saved | id=%s", record.id)

        self._advance(ANALYZING)
        response = await self._request_feedback(uploaded_resume.path, job)
        record = with_feedback(record, decode_feedback(select_feedback_text(response)))
        await self._persist(record)

        self._advance(COMPLETE)
        target = resume_page(record.id)
        if self._navigate is not None:
            self._navigate(target)
        self._set_state(NavigatingAway(target=target, record_id=record.id))
        logger.info("[submit] complete | id=%s", record.id)
