import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from resumind.errors import FeedbackDecodeFailed
from resumind.repositories.base import AbstractFileStorage
from resumind.schemas.feedback import ContentBlock, FeedbackResponse

logger = logging.getLogger(__name__)

EMPTY_FEEDBACK_TEXT = "{}"

RESPONSE_FORMAT = """
interface Feedback {
  overallScore: number; //max 100
  ATS: {
    score: number; //rate based on ATS suitability
    tips: {
      type: "good" | "improve";
      tip: string; //give 3-4 tips
    }[];
  };
  toneAndStyle: {
    score: number; //max 100
    tips: {
      type: "good" | "improve";
      tip: string; //make it a short "title" for the actual explanation
      explanation: string; //explain in detail here
    }[]; //give 3-4 tips
  };
  content: {
    score: number; //max 100
    tips: {
      type: "good" | "improve";
      tip: string;
      explanation: string;
    }[];
  };
  structure: {
    score: number; //max 100
    tips: {
      type: "good" | "improve";
      tip: string;
      explanation: string;
    }[];
  };
  skills: {
    score: number; //max 100
    tips: {
      type: "good" | "improve";
      tip: string;
      explanation: string;
    }[];
  };
}"""


def prepare_instructions(job_title: str, job_description: str) -> str:
    """Build the ATS review prompt sent alongside the uploaded resume."""
    return (
        "You are an expert in ATS (Applicant Tracking System) and resume analysis.\n"
        "Please analyze and rate this resume and suggest how to improve it.\n"
        "The rating can be low if the resume is bad.\n"
        "Be thorough and detailed. Don't be afraid to point out any mistakes or areas for improvement.\n"
        "If there is a lot to improve, don't hesitate to give low scores. This is to help the user "
        "to improve their resume.\n"
        "If available, use the job description for the job user is applying to to give more "
        "detailed feedback.\n"
        "If provided, take the job description into consideration.\n"
        f"The job title is: {job_title}\n"
        f"The job description is: {job_description}\n"
        f"Provide the feedback using the following format: {RESPONSE_FORMAT}\n"
        "Return the analysis as a JSON object, without any other text and without the backticks.\n"
        "Do not include any other text or comments."
    )


def select_feedback_text(response: FeedbackResponse) -> str:
    """
    Pick the text to decode from an AI response.
    A plain string is used as-is; for content blocks the first block's text is
    used, falling back to an empty JSON object.
    """
    match response.message.content:
        case str() as text:
            return text
        case [ContentBlock(text=str() as text), *_] if text:
            return text
        case _:
            return EMPTY_FEEDBACK_TEXT


def decode_feedback(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise FeedbackDecodeFailed(f"Could not decode feedback: {exc}") from exc


class AIFeedbackClient(ABC):
    @abstractmethod
    async def feedback(self, path: str, instructions: str) -> FeedbackResponse | None:
        """Request feedback for the stored document at `path`. Returns None on an empty reply."""


class HttpAIFeedbackClient(AIFeedbackClient):
    def __init__(
        self, endpoint: str, storage: AbstractFileStorage, timeout: float = 120.0
    ) -> None:
        self._endpoint = endpoint
        self._storage = storage
        self._timeout = timeout

    async def feedback(self, path: str, instructions: str) -> FeedbackResponse | None:
        """
        POST the stored document and the instructions to the feedback endpoint.
        Transport and HTTP errors propagate to the caller.
        """
        content = await self._storage.read(path)
        files = {"file": (path.rsplit("/", 1)[-1], content, "application/pdf")}
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                self._endpoint, files=files, data={"instructions": instructions}
            )
            response.raise_for_status()
        if not response.content:
            logger.info("[ai] empty response | path=%s", path)
            return None
        payload = response.json()
        if payload is None:
            logger.info("[ai] null response | path=%s", path)
            return None
        logger.info("[ai] feedback received | path=%s | status=%d", path, response.status_code)
        return FeedbackResponse.model_validate(payload)
