"""Pydantic models for job postings and match scores."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from portocv.models.base import WireModel


class JobPosting(WireModel):
    id: str
    title: str
    company: str = ""
    location: str = ""
    type: Literal["Full-time", "Part-time", "Internship", "Contract"] = "Full-time"
    posted_at: str = ""
    description: str  # short blurb
    apply_link: str = ""
    match_score: float | None = None
    match_reason: str | None = None


class JobMatch(WireModel):
    id: str
    score: float = Field(ge=0, le=100)
    reason: str
