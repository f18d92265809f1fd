from typing import Any

from pydantic import BaseModel

from resumind.models.submission import Error, NavigatingAway, ProcessState, Running


class StateResponse(BaseModel):
    status: str
    message: str | None = None
    redirect: str | None = None
    record_id: str | None = None

    @classmethod
    def from_state(cls, state: ProcessState) -> "StateResponse":
        match state:
            case Running(status_label=label):
                return cls(status="running", message=label)
            case Error(message=message):
                return cls(status="error", message=message)
            case NavigatingAway(target=target, record_id=record_id):
                return cls(status="complete", redirect=target, record_id=record_id)
            case _:
                return cls(status="idle")


class AttemptResponse(BaseModel):
    attempt_id: str | None = None
    state: StateResponse


class ResumeResponse(BaseModel):
    id: str
    resumePath: str
    imagePath: str
    companyName: str
    jobTitle: str
    jobDescription: str
    feedback: Any
