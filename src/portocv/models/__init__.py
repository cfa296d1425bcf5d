"""Data models for the PortoCV use cases."""

from portocv.models.cv import (
    CVData,
    CVEducation,
    CVExperience,
    TailoringResponse,
    TailorResult,
)
from portocv.models.history import HistoryItem
from portocv.models.jobs import JobMatch, JobPosting
from portocv.models.portfolio import (
    Education,
    Experience,
    PortfolioData,
    PortfolioPatch,
    Project,
    QAFeedback,
    SocialLinks,
    ThemeConfig,
    ThemePatch,
)
from portocv.models.preferences import UserPreferences
from portocv.models.request import Attachment, GenerationRequest, ResumeInput, UseCase

__all__ = [
    "Attachment",
    "CVData",
    "CVEducation",
    "CVExperience",
    "Education",
    "Experience",
    "GenerationRequest",
    "HistoryItem",
    "JobMatch",
    "JobPosting",
    "PortfolioData",
    "PortfolioPatch",
    "Project",
    "QAFeedback",
    "ResumeInput",
    "SocialLinks",
    "TailorResult",
    "TailoringResponse",
    "ThemeConfig",
    "ThemePatch",
    "UseCase",
    "UserPreferences",
]
