import json
import logging

from fastapi import APIRouter, BackgroundTasks, File, Form, HTTPException, Request, UploadFile

from resumind.models.submission import Document, Running
from resumind.schemas.upload import AttemptResponse, ResumeResponse, StateResponse
from resumind.services.attempt_registry import AttemptNotFound
from resumind.services.record_builder import record_key
from resumind.services.submission_service import UPLOADING_RESUME

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@router.post("/upload", response_model=AttemptResponse)
async def upload(
    request: Request,
    background_tasks: BackgroundTasks,
    file: UploadFile | None = File(None),
    company_name: str = Form("", alias="company-name"),
    job_title: str = Form("", alias="job-title"),
    job_description: str = Form("", alias="job-description"),
) -> AttemptResponse:
    service = request.app.state.service_factory()
    form = {
        "company-name": company_name,
        "job-title": job_title,
        "job-description": job_description,
    }

    if file is None or not file.filename:
        state = await service.submit(None, form)
        return AttemptResponse(state=StateResponse.from_state(state))

    document = Document(
        filename=file.filename,
        content=await file.read(),
        content_type=file.content_type or "application/pdf",
    )
    # Reported as running from the moment it is queued.
    queued = Running(UPLOADING_RESUME)
    attempt_id = request.app.state.attempts.register(service, initial=queued)
    logger.info("[upload] queued | attempt_id=%s | file=%s", attempt_id, document.filename)
    background_tasks.add_task(service.submit, document, form)
    return AttemptResponse(attempt_id=attempt_id, state=StateResponse.from_state(queued))


@router.get("/attempts/{attempt_id}", response_model=AttemptResponse)
async def attempt_status(attempt_id: str, request: Request) -> AttemptResponse:
    try:
        state = request.app.state.attempts.state(attempt_id)
    except AttemptNotFound:
        raise HTTPException(status_code=404, detail="Unknown attempt")
    return AttemptResponse(attempt_id=attempt_id, state=StateResponse.from_state(state))


@router.post("/attempts/{attempt_id}/reset", response_model=AttemptResponse)
async def reset_attempt(attempt_id: str, request: Request) -> AttemptResponse:
    attempts = request.app.state.attempts
    try:
        current = attempts.state(attempt_id)
    except AttemptNotFound:
        raise HTTPException(status_code=404, detail="Unknown attempt")
    if isinstance(current, Running):
        raise HTTPException(status_code=409, detail="Attempt is still running")
    state = attempts.reset(attempt_id)
    return AttemptResponse(attempt_id=attempt_id, state=StateResponse.from_state(state))


@router.get("/resume/{record_id}", response_model=ResumeResponse)
async def get_resume(record_id: str, request: Request) -> ResumeResponse:
    value = await request.app.state.kv.get(record_key(record_id))
    if value is None:
        raise HTTPException(status_code=404, detail="Resume not found")
    return ResumeResponse(**json.loads(value))
