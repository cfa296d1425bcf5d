"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from portocv.clients.generator import ContentGenerator
from portocv.clients.key_pool import KeyPool
from portocv.clients.llm_client import LLMResponse
from portocv.models.cv import CVData, CVEducation, CVExperience
from portocv.models.jobs import JobPosting
from portocv.models.portfolio import (
    Education,
    Experience,
    PortfolioData,
    Project,
    ThemeConfig,
)
from portocv.models.request import ResumeInput

KEY_A = "AIzaSyA-first-key-000"
KEY_B = "AIzaSyB-second-key-000"
KEY_C = "AIzaSyC-third-key-000"


@pytest.fixture
def sample_resume_text() -> str:
    return """Jane Smith
jane.smith@example.com | 07700 900123 | Manchester

EXPERIENCE
Senior Backend Engineer, Acme Payments (2021 - present)
- Built the card settlement service in Python and PostgreSQL
- Cut batch runtime from 4 hours to 25 minutes

Backend Engineer, Northwind Logistics (2018 - 2021)
- Maintained Django REST APIs for route planning
- Introduced Redis caching for parcel tracking

EDUCATION
BSc Computer Science, University of Leeds (2015 - 2018)

SKILLS
Python, Django, FastAPI, PostgreSQL, Redis, Docker, AWS
"""


@pytest.fixture
def sample_resume(sample_resume_text) -> ResumeInput:
    return ResumeInput(text=sample_resume_text)


@pytest.fixture
def sample_theme() -> ThemeConfig:
    return ThemeConfig(
        primary_color="#22d3ee",
        accent_color="#f472b6",
        background_color="#0f172a",
        font_style="cyber",
        background_style="grid",
        animation_style="slide",
        mode="dark",
    )


@pytest.fixture
def sample_portfolio(sample_theme) -> PortfolioData:
    return PortfolioData(
        name="Jane Smith",
        title="Senior Backend Engineer",
        summary="Backend engineer building payment systems that settle on time.",
        email="jane.smith@example.com",
        location="Manchester",
        quote="Boring systems, exciting results.",
        skills=["Python", "Django", "FastAPI", "PostgreSQL", "Redis", "Docker", "AWS"],
        experience=[
            Experience(
                role="Senior Backend Engineer",
                company="Acme Payments",
                period="2021 - present",
                description="Built the card settlement service.",
            ),
        ],
        projects=[
            Project(title="Settlement Engine", description="Nightly card settlement.", tech=["Python"]),
        ],
        education=[
            Education(degree="BSc Computer Science", institution="University of Leeds", year="2018"),
        ],
        theme=sample_theme,
    )


@pytest.fixture
def sample_portfolio_wire(sample_portfolio) -> dict:
    return sample_portfolio.to_wire()


@pytest.fixture
def sample_cv() -> CVData:
    return CVData(
        full_name="Jane Smith",
        contact_info="Manchester | 07700 900123 | jane.smith@example.com",
        professional_profile="Backend engineer with six years of Python experience in payments and logistics.",
        core_competencies=["Python", "Django", "PostgreSQL", "Redis", "AWS"],
        experience=[
            CVExperience(
                role="Senior Backend Engineer",
                company="Acme Payments",
                location="Manchester",
                dates="2021 - Present",
                responsibilities=[
                    "Built the card settlement service in Python and PostgreSQL",
                    "Cut batch runtime from 4 hours to 25 minutes",
                ],
            ),
        ],
        education=[
            CVEducation(
                degree="BSc Computer Science",
                institution="University of Leeds",
                dates="2015 - 2018",
            ),
        ],
        references="Available upon request",
    )


@pytest.fixture
def sample_postings() -> list[JobPosting]:
    return [
        JobPosting(id="j1", title="Python Developer", company="Beta Bank", description="Django APIs"),
        JobPosting(id="j2", title="Data Engineer", company="Gamma", description="Spark pipelines"),
        JobPosting(id="j3", title="Pastry Chef", company="Delta Bakery", description="Croissants"),
    ]


@pytest.fixture
def no_sleep():
    """Injected sleep that records requested delays instead of waiting."""
    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep


@pytest.fixture
def key_pool() -> KeyPool:
    return KeyPool([KEY_A, KEY_B, KEY_C])


@pytest.fixture
def mock_llm_client():
    """Mock LLMClient whose generate() returns canned text."""
    client = MagicMock()
    client.generate = AsyncMock(return_value=LLMResponse(text="{}", input_tokens=10, output_tokens=5))
    return client


@pytest.fixture
def mock_generator():
    """ContentGenerator with run() mocked, for testing agents in isolation."""
    generator = MagicMock(spec=ContentGenerator)
    generator.run = AsyncMock()
    generator.invoker = MagicMock()
    generator.invoker.pool = KeyPool([KEY_A])
    return generator
