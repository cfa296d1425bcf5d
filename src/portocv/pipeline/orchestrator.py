"""Main pipeline orchestrator - wires the key pool, invoker and agents."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from portocv.clients.generator import ContentGenerator
from portocv.clients.invoker import ResilientInvoker
from portocv.config import AppConfig
from portocv.models.portfolio import PortfolioData, QAFeedback
from portocv.models.preferences import UserPreferences
from portocv.models.request import ResumeInput
from portocv.pipeline.cover_letter import CoverLetterWriter
from portocv.pipeline.cv_tailor import CVTailor
from portocv.pipeline.cv_writer import CVWriter
from portocv.pipeline.job_matcher import JobMatcher
from portocv.pipeline.portfolio_architect import PortfolioArchitect
from portocv.pipeline.portfolio_critic import PortfolioCritic


@dataclass
class PortfolioResult:
    """Complete result of a portfolio build."""

    portfolio: PortfolioData
    feedback: QAFeedback | None
    elapsed_seconds: float = 0.0
    metadata: dict = field(default_factory=dict)


class PortfolioOrchestrator:
    """Holds one agent per use case, all sharing a single invoker."""

    def __init__(
        self,
        generator: ContentGenerator,
        *,
        pro_model: str = "gemini-3-pro-preview",
        flash_model: str = "gemini-3-flash-preview",
        portfolio_temperature: float = 0.95,
    ):
        self.generator = generator
        self.architect = PortfolioArchitect(generator, model=pro_model, temperature=portfolio_temperature)
        self.critic = PortfolioCritic(generator, model=flash_model)
        self.cv_writer = CVWriter(generator, model=pro_model)
        self.cv_tailor = CVTailor(generator, model=pro_model)
        self.job_matcher = JobMatcher(generator, model=flash_model)
        self.cover_letter = CoverLetterWriter(generator, model=pro_model)

    async def run(
        self,
        resume: ResumeInput,
        prefs: UserPreferences | None = None,
        *,
        photo_url: str | None = None,
        critique: bool = True,
        on_phase: Callable[[str, str], None] | None = None,
    ) -> PortfolioResult:
        """Synthesize a portfolio, then critique it.

        Args:
            resume: Ingested résumé (text or binary attachment).
            prefs: Style knobs; all "auto" when omitted.
            photo_url: Optional photo attached to the result as-is.
            critique: Skip the critique step when False.
            on_phase: Optional callback(phase_name, detail) for progress.
        """
        start = time.monotonic()

        def _notify(phase: str, detail: str = ""):
            if on_phase:
                on_phase(phase, detail)

        _notify("synthesis", "Agent 1: Analyzing preferences & architecture...")
        portfolio = await self.architect.generate(resume, prefs)
        if photo_url:
            portfolio = portfolio.model_copy(update={"photo_url": photo_url})

        feedback = None
        if critique:
            _notify("critique", "Agent 2: Running visual fidelity checks...")
            feedback = await self.critic.review(portfolio)

        elapsed = time.monotonic() - start
        _notify("done", f"Done in {elapsed:.1f}s")
        return PortfolioResult(
            portfolio=portfolio,
            feedback=feedback,
            elapsed_seconds=elapsed,
            metadata={"key_index": self.generator.invoker.pool.index},
        )


def build_orchestrator(config: AppConfig, api_key: str | None = None) -> PortfolioOrchestrator:
    """Build the full stack from config plus an optional user-supplied key."""
    pool = config.keys.build_pool(override=api_key)
    invoker = ResilientInvoker(
        pool,
        max_retries=config.llm.max_retries,
        initial_delay=config.llm.initial_delay,
        timeout=config.llm.timeout,
    )
    return PortfolioOrchestrator(
        ContentGenerator(invoker),
        pro_model=config.llm.pro_model,
        flash_model=config.llm.flash_model,
        portfolio_temperature=config.llm.portfolio_temperature,
    )
