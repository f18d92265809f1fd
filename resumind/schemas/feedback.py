from pydantic import BaseModel, ConfigDict


class ContentBlock(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str | None = None
    text: str | None = None


class FeedbackMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str | None = None
    content: str | list[ContentBlock]


class FeedbackResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: FeedbackMessage
