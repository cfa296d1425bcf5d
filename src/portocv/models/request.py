"""Request-side types shared by every use case."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class UseCase(str, enum.Enum):
    PORTFOLIO_SYNTHESIS = "portfolio synthesis"
    PORTFOLIO_EDIT = "portfolio edit"
    CRITIQUE = "critique"
    CV_GENERATION = "CV generation"
    CV_TAILORING = "CV tailoring"
    JOB_MATCH = "job-match scoring"
    COVER_LETTER = "cover letter"


@dataclass(frozen=True)
class Attachment:
    """Binary document sent inline, base64 encoded."""

    data: str
    mime_type: str


@dataclass(frozen=True)
class ResumeInput:
    """Either extracted text or a binary attachment."""

    text: str | None = None
    attachment: Attachment | None = None

    def __post_init__(self):
        if (self.text is None) == (self.attachment is None):
            raise ValueError("ResumeInput needs exactly one of text or attachment")

    @property
    def is_binary(self) -> bool:
        return self.attachment is not None


@dataclass(frozen=True)
class GenerationRequest:
    use_case: UseCase
    prompt: str
    model: str
    temperature: float | None = None
    response_schema: Any = None  # pydantic model, list[...] of one, or None for plain text
    attachment: Attachment | None = None
