from dataclasses import replace
from typing import Any

from resumind.models.submission import JobContext, SubmissionRecord

KEY_PREFIX = "resume:"


def record_key(record_id: str) -> str:
    return f"{KEY_PREFIX}{record_id}"


def build_record(
    record_id: str, resume_path: str, image_path: str, job: JobContext
) -> SubmissionRecord:
    """First write point: paths are known, feedback is still the empty sentinel."""
    return SubmissionRecord(
        id=record_id,
        resume_path=resume_path,
        image_path=image_path,
        company_name=job.company_name,
        job_title=job.job_title,
        job_description=job.job_description,
        feedback="",
    )


def with_feedback(record: SubmissionRecord, feedback: Any) -> SubmissionRecord:
    """Second write point: same record, only feedback differs."""
    return replace(record, feedback=feedback)
