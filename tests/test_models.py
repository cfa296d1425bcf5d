"""Tests for pydantic models and request types."""

import pytest
from pydantic import ValidationError

from portocv.models import (
    Attachment,
    CVData,
    HistoryItem,
    JobMatch,
    PortfolioData,
    ResumeInput,
    TailoringResponse,
    ThemeConfig,
    UserPreferences,
)


class TestThemeConfig:
    def test_wire_names_are_camel_case(self, sample_theme):
        wire = sample_theme.to_wire()
        assert wire["primaryColor"] == "#22d3ee"
        assert wire["backgroundStyle"] == "grid"

    def test_accepts_camel_case_input(self):
        theme = ThemeConfig.model_validate({
            "primaryColor": "#fff",
            "accentColor": "#000000",
            "backgroundColor": "#0f172a",
            "fontStyle": "brutal",
            "backgroundStyle": "bokeh",
            "animationStyle": "pop",
            "mode": "light",
        })
        assert theme.font_style == "brutal"

    def test_rejects_unknown_enum(self, sample_theme):
        data = sample_theme.to_wire() | {"backgroundStyle": "waves"}
        with pytest.raises(ValidationError):
            ThemeConfig.model_validate(data)

    def test_rejects_non_hex_color(self, sample_theme):
        data = sample_theme.to_wire() | {"accentColor": "#12345"}
        with pytest.raises(ValidationError):
            ThemeConfig.model_validate(data)


class TestPortfolioData:
    def test_round_trip_from_wire(self, sample_portfolio):
        assert PortfolioData.model_validate(sample_portfolio.to_wire()) == sample_portfolio

    def test_skills_capped_at_ten(self, sample_portfolio_wire):
        sample_portfolio_wire["skills"] = [f"Skill {n}" for n in range(14)]
        portfolio = PortfolioData.model_validate(sample_portfolio_wire)
        assert portfolio.skills == [f"Skill {n}" for n in range(10)]

    def test_blank_skills_dropped(self, sample_portfolio_wire):
        sample_portfolio_wire["skills"] = ["Python", "", "  ", "Go"]
        assert PortfolioData.model_validate(sample_portfolio_wire).skills == ["Python", "Go"]

    def test_theme_required(self, sample_portfolio_wire):
        del sample_portfolio_wire["theme"]
        with pytest.raises(ValidationError):
            PortfolioData.model_validate(sample_portfolio_wire)

    def test_social_links_optional(self, sample_portfolio_wire):
        sample_portfolio_wire["socialLinks"] = {"github": "https://github.com/jane"}
        portfolio = PortfolioData.model_validate(sample_portfolio_wire)
        assert portfolio.social_links.github == "https://github.com/jane"
        assert portfolio.social_links.linkedin is None


class TestCVModels:
    def test_cv_wire_names(self, sample_cv):
        wire = sample_cv.to_wire()
        assert wire["fullName"] == "Jane Smith"
        assert "coreCompetencies" in wire
        assert "interests" not in wire

    def test_match_score_bounds(self):
        with pytest.raises(ValidationError):
            TailoringResponse(match_score=101, analysis="x")
        with pytest.raises(ValidationError):
            JobMatch(id="j1", score=-1, reason="x")

    def test_tailoring_without_cv(self):
        response = TailoringResponse.model_validate({"matchScore": 30, "analysis": "Gap"})
        assert response.tailored_cv is None

    def test_cv_requires_references(self, sample_cv):
        data = sample_cv.to_wire()
        del data["references"]
        with pytest.raises(ValidationError):
            CVData.model_validate(data)


class TestResumeInput:
    def test_needs_exactly_one_source(self):
        with pytest.raises(ValueError):
            ResumeInput()
        with pytest.raises(ValueError):
            ResumeInput(text="x", attachment=Attachment(data="eA==", mime_type="application/pdf"))

    def test_binary(self):
        assert ResumeInput(attachment=Attachment(data="eA==", mime_type="image/png")).is_binary


class TestPreferencesAndHistory:
    def test_all_auto(self):
        assert UserPreferences().all_auto
        assert not UserPreferences(color_mode="dark").all_auto

    def test_history_item_defaults(self):
        item = HistoryItem(name="Jane", title="Engineer")
        assert len(item.id) == 9
        assert item.type == "portfolio"
        assert item.url is None

    def test_history_item_type_restricted(self):
        with pytest.raises(ValidationError):
            HistoryItem(name="Jane", title="Engineer", type="website")
