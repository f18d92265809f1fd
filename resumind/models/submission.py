from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class Document:
    filename: str
    content: bytes
    content_type: str = "application/pdf"


@dataclass(frozen=True)
class StoredFile:
    path: str
    name: str
    size: int = 0


@dataclass(frozen=True)
class ConversionResult:
    file: Document | None = None
    error: str | None = None


@dataclass(frozen=True)
class JobContext:
    company_name: str = ""
    job_title: str = ""
    job_description: str = ""


@dataclass(frozen=True)
class SubmissionRecord:
    id: str
    resume_path: str
    image_path: str
    company_name: str = ""
    job_title: str = ""
    job_description: str = ""
    feedback: Any = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "resumePath": self.resume_path,
            "imagePath": self.image_path,
            "companyName": self.company_name,
            "jobTitle": self.job_title,
            "jobDescription": self.job_description,
            "feedback": self.feedback,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SubmissionRecord":
        return cls(
            id=data["id"],
            resume_path=data.get("resumePath", ""),
            image_path=data.get("imagePath", ""),
            company_name=data.get("companyName", ""),
            job_title=data.get("jobTitle", ""),
            job_description=data.get("jobDescription", ""),
            feedback=data.get("feedback", ""),
        )


@dataclass(frozen=True)
class Idle:
    kind: str = field(default="idle", init=False)


@dataclass(frozen=True)
class Running:
    status_label: str
    kind: str = field(default="running", init=False)


@dataclass(frozen=True)
class Error:
    message: str
    kind: str = field(default="error", init=False)


@dataclass(frozen=True)
class NavigatingAway:
    target: str
    record_id: str
    kind: str = field(default="navigating_away", init=False)


ProcessState = Union[Idle, Running, Error, NavigatingAway]
