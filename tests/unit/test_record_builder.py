import dataclasses

import pytest

from resumind.models.submission import JobContext, SubmissionRecord
from resumind.services.record_builder import build_record, record_key, with_feedback


@pytest.fixture
def job():
    return JobContext(company_name="Acme", job_title="Engineer", job_description="Build things")


def test_build_record_starts_with_empty_feedback(job):
    record = build_record("id-1", "r/resume.pdf", "i/resume.png", job)
    assert record.id == "id-1"
    assert record.resume_path == "r/resume.pdf"
    assert record.image_path == "i/resume.png"
    assert record.company_name == "Acme"
    assert record.feedback == ""


def test_with_feedback_only_changes_feedback(job):
    first = build_record("id-1", "r/resume.pdf", "i/resume.png", job)
    second = with_feedback(first, {"overallScore": 70})
    assert second.feedback == {"overallScore": 70}
    assert dataclasses.replace(second, feedback="") == first
    assert first.feedback == ""


def test_builder_is_idempotent(job):
    a = build_record("id-1", "r", "i", job)
    b = build_record("id-1", "r", "i", job)
    assert a == b
    assert with_feedback(a, {"x": 1}) == with_feedback(b, {"x": 1})


def test_record_is_frozen(job):
    record = build_record("id-1", "r", "i", job)
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.id = "other"


def test_record_key_is_derived_from_id():
    assert record_key("abc") == "resume:abc"


def test_record_dict_uses_stored_field_names(job):
    data = build_record("id-1", "r", "i", job).to_dict()
    assert data == {
        "id": "id-1",
        "resumePath": "r",
        "imagePath": "i",
        "companyName": "Acme",
        "jobTitle": "Engineer",
        "jobDescription": "Build things",
        "feedback": "",
    }
    assert SubmissionRecord.from_dict(data) == build_record("id-1", "r", "i", job)
