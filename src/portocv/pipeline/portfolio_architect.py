"""Agent 1: Portfolio Architect - turns a résumé into a themed portfolio blueprint."""

from __future__ import annotations

import json
import logging

from portocv.clients.generator import ContentGenerator
from portocv.models.portfolio import PortfolioData, PortfolioPatch, ThemeConfig
from portocv.models.preferences import UserPreferences
from portocv.models.request import GenerationRequest, ResumeInput, UseCase

logger = logging.getLogger(__name__)

MAX_RESUME_CHARS = 15000

CREATIVE_FREEDOM = (
    "CREATIVE FREEDOM: Create a COMPLETELY UNIQUE visual identity. Randomize colors, "
    "moods, and layouts. Do not default to blue/dark."
)

SYNTHESIS_PROMPT = """\
Act as an Award-Winning Digital Art Director. Transform raw resume data into a high-end web portfolio.

MANDATORY DIRECTIVES:
1. {style_guidance}
2. COLOR PALETTE: If 'auto', generate a unique, harmonic palette. Avoid generic defaults. \
If Light Mode is requested, use light background codes (e.g., #f8fafc, #f1f5f9) and darker primary colors.
3. BACKGROUND: 'particles' (Space/Data), 'grid' (Cyber/Retro), 'bokeh' (Modern/Soft).
4. ANIMATION: 'fade' (Classic), 'slide' (Dynamic), 'scale' (Impact), 'pop' (Bouncy).
5. SKILLS: Extract exactly top 10 skills.
6. QUOTE: A powerful, short professional manifesto.
7. CONTACT: Use an empty string for any contact field missing from the resume.

OUTPUT: Strict JSON only."""

EDIT_PROMPT = """\
You are editing an existing web portfolio. Apply the change request below and return JSON \
containing ONLY the top-level fields you changed. For the theme, include only the theme keys \
you changed. Do not invent experience, projects or education that are not already present.

CHANGE REQUEST:
{instruction}

CURRENT PORTFOLIO:
{portfolio}"""


def style_guidance(prefs: UserPreferences) -> str:
    """Translate the style knobs into prompt directives."""
    parts = []
    if prefs.theme_style != "auto":
        parts.append(f"VISUAL STYLE: Strictly use a '{prefs.theme_style}' aesthetic (colors, fonts).")
    if prefs.background_type != "auto":
        parts.append(f"BACKGROUND: Strictly use '{prefs.background_type}' mode.")
    if prefs.animation_type != "auto":
        parts.append(f"ANIMATION: Strictly use '{prefs.animation_type}' animations.")
    if prefs.color_mode == "light":
        parts.append("COLOR SCHEME: LIGHT MODE (White/Light Gray background). Ensure high contrast text.")
    elif prefs.color_mode == "dark":
        parts.append("COLOR SCHEME: DARK MODE (Black/Dark Navy background).")
    if prefs.primary_hue != "auto":
        parts.append(f"PRIMARY COLOR: Dominant color must be shades of {prefs.primary_hue.upper()}.")
    return " ".join(parts) if parts else CREATIVE_FREEDOM


def build_synthesis_request(
    resume: ResumeInput,
    prefs: UserPreferences,
    *,
    model: str,
    temperature: float = 0.95,
) -> GenerationRequest:
    prompt = SYNTHESIS_PROMPT.format(style_guidance=style_guidance(prefs))
    if resume.text is not None:
        prompt += f"\n\nResume Data Content: {resume.text[:MAX_RESUME_CHARS]}"
    return GenerationRequest(
        use_case=UseCase.PORTFOLIO_SYNTHESIS,
        prompt=prompt,
        model=model,
        temperature=temperature,
        response_schema=PortfolioData,
        attachment=resume.attachment,
    )


def build_edit_request(
    portfolio: PortfolioData,
    instruction: str,
    *,
    model: str,
) -> GenerationRequest:
    current = portfolio.model_dump(by_alias=True, exclude_none=True, exclude={"photo_url"})
    prompt = EDIT_PROMPT.format(
        instruction=instruction.strip(),
        portfolio=json.dumps(current, ensure_ascii=False, indent=2),
    )
    return GenerationRequest(
        use_case=UseCase.PORTFOLIO_EDIT,
        prompt=prompt,
        model=model,
        temperature=0.7,
        response_schema=PortfolioPatch,
    )


def merge_portfolio(original: PortfolioData, patch: PortfolioPatch) -> PortfolioData:
    """Shallow-merge an edit onto the original.

    Theme keys are merged one by one; every other field present in the
    patch replaces the original wholesale.
    """
    merged = original.model_dump()
    changes = patch.model_dump(exclude_none=True)
    theme_changes = changes.pop("theme", None)
    merged.update(changes)
    if theme_changes:
        merged["theme"] = ThemeConfig.model_validate({**merged["theme"], **theme_changes}).model_dump()
    return PortfolioData.model_validate(merged)


class PortfolioArchitect:
    def __init__(
        self,
        generator: ContentGenerator,
        model: str = "gemini-3-pro-preview",
        temperature: float = 0.95,
    ):
        self.generator = generator
        self.model = model
        self.temperature = temperature

    async def generate(self, resume: ResumeInput, prefs: UserPreferences | None = None) -> PortfolioData:
        """Synthesize a portfolio blueprint from a résumé."""
        prefs = prefs or UserPreferences()
        logger.info("Synthesizing portfolio (all auto: %s)", prefs.all_auto)
        request = build_synthesis_request(
            resume, prefs, model=self.model, temperature=self.temperature
        )
        return await self.generator.run(request)

    async def edit(self, portfolio: PortfolioData, instruction: str) -> PortfolioData:
        """Apply a free-text change request to an existing portfolio."""
        request = build_edit_request(portfolio, instruction, model=self.model)
        patch = await self.generator.run(request)
        return merge_portfolio(portfolio, patch)
