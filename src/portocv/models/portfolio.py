"""Pydantic models for portfolio synthesis, edit and critique."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator

from portocv.models.base import WireModel

TOP_SKILLS = 10
HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"

FontStyle = Literal["modern", "cyber", "minimal", "brutal"]
BackgroundStyle = Literal["particles", "grid", "bokeh"]
AnimationStyle = Literal["fade", "slide", "scale", "pop"]
ColorMode = Literal["dark", "light"]


class Experience(WireModel):
    role: str
    company: str
    period: str
    description: str


class Project(WireModel):
    title: str
    description: str
    tech: list[str]


class Education(WireModel):
    degree: str
    institution: str
    year: str


class ThemeConfig(WireModel):
    primary_color: str = Field(pattern=HEX_COLOR, description="Hex color")
    accent_color: str = Field(pattern=HEX_COLOR, description="Hex color")
    background_color: str = Field(
        pattern=HEX_COLOR, description="Hex color (dark or light based on mode)"
    )
    font_style: FontStyle
    background_style: BackgroundStyle
    animation_style: AnimationStyle
    mode: ColorMode


class SocialLinks(WireModel):
    github: str | None = None
    linkedin: str | None = None
    twitter: str | None = None
    whatsapp: str | None = None
    instagram: str | None = None
    facebook: str | None = None
    behance: str | None = None
    dribbble: str | None = None


class PortfolioData(WireModel):
    name: str
    title: str
    summary: str
    email: str
    location: str
    quote: str
    skills: list[str]
    experience: list[Experience]
    projects: list[Project]
    education: list[Education]
    theme: ThemeConfig
    social_links: SocialLinks | None = None
    photo_url: str | None = None

    @field_validator("skills")
    @classmethod
    def _top_skills(cls, v: list[str]) -> list[str]:
        return [s for s in v if s.strip()][:TOP_SKILLS]


class ThemePatch(WireModel):
    primary_color: str | None = Field(default=None, pattern=HEX_COLOR)
    accent_color: str | None = Field(default=None, pattern=HEX_COLOR)
    background_color: str | None = Field(default=None, pattern=HEX_COLOR)
    font_style: FontStyle | None = None
    background_style: BackgroundStyle | None = None
    animation_style: AnimationStyle | None = None
    mode: ColorMode | None = None


class PortfolioPatch(WireModel):
    """Partial portfolio returned by an edit request."""

    name: str | None = None
    title: str | None = None
    summary: str | None = None
    email: str | None = None
    location: str | None = None
    quote: str | None = None
    skills: list[str] | None = None
    experience: list[Experience] | None = None
    projects: list[Project] | None = None
    education: list[Education] | None = None
    theme: ThemePatch | None = None
    social_links: SocialLinks | None = None


class QAFeedback(WireModel):
    score: float
    suggestions: list[str]
    ux_insights: str
