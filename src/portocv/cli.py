"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

from dotenv import load_dotenv

load_dotenv()

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from portocv.config import AppConfig, load_config
from portocv.errors import PortoCVError
from portocv.history import HistoryStore
from portocv.models.cv import CVData
from portocv.models.history import HistoryItem
from portocv.models.jobs import JobPosting
from portocv.models.portfolio import PortfolioData
from portocv.models.preferences import UserPreferences
from portocv.models.request import ResumeInput
from portocv.parsers.resume_parser import ingest_file
from portocv.pipeline.orchestrator import PortfolioOrchestrator, build_orchestrator

T = TypeVar("T")

app = typer.Typer(
    name="portocv",
    help="Turn a résumé into a portfolio blueprint or a tailored UK CV",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)


def _setup(verbose: bool, api_key: str | None) -> tuple[AppConfig, PortfolioOrchestrator]:
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    config = load_config()
    return config, build_orchestrator(config, api_key=api_key)


def _run(coro: Coroutine[Any, Any, T], status: str) -> T:
    """Run one step; any failure ends the command with a readable message."""
    try:
        with console.status(status):
            return asyncio.run(coro)
    except PortoCVError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        logger.debug("Unhandled generation error", exc_info=True)
        console.print(f"[red]Generation failed: {e}[/red]")
        raise typer.Exit(1)


def _require_file(path: Path, label: str) -> None:
    if not path.exists():
        console.print(f"[red]{label} not found: {path}[/red]")
        raise typer.Exit(1)


def _ingest(path: Path):
    try:
        return ingest_file(path)
    except PortoCVError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _load_json_model(path: Path, adapter: TypeAdapter, label: str):
    _require_file(path, label)
    try:
        return adapter.validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        console.print(f"[red]{label} is not valid: {e.error_count()} error(s)[/red]")
        raise typer.Exit(1)


def _read_cv_source(path: Path) -> CVData | ResumeInput:
    """Accept either a CV JSON file or a raw résumé to convert first."""
    if path.suffix.lower() == ".json":
        return _load_json_model(path, TypeAdapter(CVData), "CV JSON")
    _require_file(path, "Resume file")
    return _ingest(path)


async def _ensure_cv(source: CVData | ResumeInput, orchestrator: PortfolioOrchestrator) -> CVData:
    if isinstance(source, CVData):
        return source
    return await orchestrator.cv_writer.generate(source)


def _write_json(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def _record(config: AppConfig, name: str, title: str, kind: str, output: Path, photo_url: str | None = None):
    store = HistoryStore(config.history.resolved_path, max_entries=config.history.max_entries)
    store.add(
        HistoryItem(name=name, title=title, type=kind, url=output.resolve().as_uri(), photo_url=photo_url)
    )


@app.command()
def portfolio(
    resume: Path = typer.Argument(help="Résumé file (PDF, image, DOCX, TXT, MD)"),
    theme: str = typer.Option("auto", "--theme", help="auto|cyber|minimal|professional|creative"),
    background: str = typer.Option("auto", "--background", help="auto|particles|grid|bokeh"),
    animation: str = typer.Option("auto", "--animation", help="auto|fade|slide|scale"),
    mode: str = typer.Option("auto", "--mode", help="auto|dark|light"),
    hue: str = typer.Option("auto", "--hue", help="auto|blue|green|purple|red|orange|monochrome"),
    photo: str = typer.Option(None, "--photo", help="Photo URL to embed"),
    output: Path = typer.Option(None, "--output", "-o", help="Output path (.json)"),
    critique: bool = typer.Option(True, "--critique/--no-critique", help="Run the critique agent"),
    api_key: str = typer.Option(None, "--api-key", help="Use this key ahead of configured keys"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Generate a portfolio blueprint from a résumé."""
    _require_file(resume, "Resume file")
    try:
        prefs = UserPreferences(
            theme_style=theme,
            background_type=background,
            animation_type=animation,
            color_mode=mode,
            primary_hue=hue,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid style option: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(1)

    config, orchestrator = _setup(verbose, api_key)
    resume_input = _ingest(resume)
    result = _run(
        orchestrator.run(resume_input, prefs, photo_url=photo, critique=critique),
        "Agent 1: Designing your digital legacy...",
    )

    data = result.portfolio
    if output is None:
        output = Path(f"./output/{data.name}_portfolio.json".replace(" ", "_"))
    _write_json(output, data.to_wire())
    _record(config, data.name, data.title, "portfolio", output, photo_url=data.photo_url)
    console.print(f"\n[green]Portfolio saved: {output}[/green]")

    t = data.theme
    console.print(Panel(
        f"[bold]{data.name}[/bold] - {data.title}\n"
        f"Theme: {t.font_style} / {t.background_style} / {t.animation_style} / {t.mode}\n"
        f"Colors: {t.primary_color} {t.accent_color} on {t.background_color}\n"
        f"Skills: {', '.join(data.skills)}",
        title="Blueprint",
    ))

    if result.feedback:
        fb = result.feedback
        console.print(Panel(
            f"Score: {fb.score:g}\n{fb.ux_insights}"
            + "".join(f"\n  - {s}" for s in fb.suggestions),
            title="Critique",
        ))


@app.command()
def edit(
    file: Path = typer.Argument(help="Portfolio JSON produced by `portocv portfolio`"),
    instruction: str = typer.Argument(help="What to change"),
    output: Path = typer.Option(None, "--output", "-o", help="Output path (defaults to overwrite)"),
    api_key: str = typer.Option(None, "--api-key", help="Use this key ahead of configured keys"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Apply a free-text change request to a portfolio."""
    current = _load_json_model(file, TypeAdapter(PortfolioData), "Portfolio JSON")
    _, orchestrator = _setup(verbose, api_key)
    updated = _run(orchestrator.architect.edit(current, instruction), "Applying edits...")
    target = output or file
    _write_json(target, updated.to_wire())
    console.print(f"[green]Portfolio updated: {target}[/green]")


@app.command()
def cv(
    resume: Path = typer.Argument(help="Résumé file (PDF, image, DOCX, TXT, MD)"),
    portfolio_url: str = typer.Option(None, "--portfolio-url", help="Portfolio link to include"),
    pages: int = typer.Option(1, "--pages", min=1, max=2, help="Target length in pages"),
    output: Path = typer.Option(None, "--output", "-o", help="Output path (.json)"),
    api_key: str = typer.Option(None, "--api-key", help="Use this key ahead of configured keys"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Build a structured UK CV."""
    _require_file(resume, "Resume file")
    config, orchestrator = _setup(verbose, api_key)
    resume_input = _ingest(resume)
    data = _run(
        orchestrator.cv_writer.generate(resume_input, portfolio_url=portfolio_url, target_pages=pages),
        "Agent 3: Building CV structure...",
    )
    if output is None:
        output = Path(f"./output/{data.full_name}_cv.json".replace(" ", "_"))
    _write_json(output, data.to_wire())
    _record(config, data.full_name, data.experience[0].role if data.experience else "CV", "resume", output)
    console.print(f"[green]CV saved: {output}[/green]")


@app.command()
def tailor(
    cv_file: Path = typer.Argument(help="CV JSON, or a résumé file to convert first"),
    jd: Path = typer.Option(..., "--jd", help="Job description text file"),
    title: str = typer.Option(..., "--title", help="Target job title"),
    output: Path = typer.Option(None, "--output", "-o", help="Where to save the tailored CV"),
    api_key: str = typer.Option(None, "--api-key", help="Use this key ahead of configured keys"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Score a CV against a job and rewrite it when it qualifies."""
    _require_file(jd, "Job description")
    cv_source = _read_cv_source(cv_file)
    _, orchestrator = _setup(verbose, api_key)
    jd_text = jd.read_text(encoding="utf-8")

    async def _steps():
        source = await _ensure_cv(cv_source, orchestrator)
        return source, await orchestrator.cv_tailor.tailor(source, jd_text, title)

    source, result = _run(_steps(), "Agent 4: Moulding CV...")

    color = "green" if result.success else "yellow"
    console.print(Panel(
        f"[bold {color}]Score: {result.match_score:g}[/bold {color}]\n{result.analysis}",
        title="Match",
    ))
    if not result.success:
        console.print("[yellow]Below the match threshold; CV left unchanged.[/yellow]")
        return
    if output is None:
        output = Path(f"./output/{source.full_name}_{title}_cv.json".replace(" ", "_"))
    _write_json(output, result.data.to_wire())
    console.print(f"[green]Tailored CV saved: {output}[/green]")


@app.command()
def match(
    cv_file: Path = typer.Argument(help="CV JSON, or a résumé file to convert first"),
    jobs: Path = typer.Option(..., "--jobs", help="JSON array of job postings"),
    api_key: str = typer.Option(None, "--api-key", help="Use this key ahead of configured keys"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Rank job postings by fit, keeping only scores of 60 and above."""
    postings = _load_json_model(jobs, TypeAdapter(list[JobPosting]), "Jobs JSON")
    cv_source = _read_cv_source(cv_file)
    _, orchestrator = _setup(verbose, api_key)

    async def _steps():
        source = await _ensure_cv(cv_source, orchestrator)
        return source, await orchestrator.job_matcher.rank(source, postings)

    source, ranked = _run(_steps(), "Scoring matches...")

    if not ranked:
        console.print("[yellow]No postings reached the match threshold.[/yellow]")
        return
    table = Table(title=f"Matches for {source.full_name}")
    table.add_column("Score", justify="right")
    table.add_column("Title")
    table.add_column("Company")
    table.add_column("Why")
    for p in ranked:
        table.add_row(f"{p.match_score:g}", p.title, p.company, p.match_reason or "")
    console.print(table)


@app.command("cover-letter")
def cover_letter(
    cv_file: Path = typer.Argument(help="CV JSON, or a résumé file to convert first"),
    jobs: Path = typer.Option(..., "--jobs", help="JSON array of job postings"),
    job_id: str = typer.Option(..., "--job-id", help="Posting id to write for"),
    api_key: str = typer.Option(None, "--api-key", help="Use this key ahead of configured keys"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Draft a cover letter email body for one posting."""
    postings = _load_json_model(jobs, TypeAdapter(list[JobPosting]), "Jobs JSON")
    posting = next((p for p in postings if p.id == job_id), None)
    if posting is None:
        console.print(f"[red]No posting with id {job_id}[/red]")
        raise typer.Exit(1)
    cv_source = _read_cv_source(cv_file)
    _, orchestrator = _setup(verbose, api_key)

    async def _steps():
        source = await _ensure_cv(cv_source, orchestrator)
        return await orchestrator.cover_letter.draft(source, posting)

    letter = _run(_steps(), "Agent 3: Drafting application...")
    console.print(Panel(letter, title=f"{posting.title} - {posting.company}", border_style="cyan"))


@app.command()
def history() -> None:
    """Show recently published portfolios and CVs."""
    config = load_config()
    store = HistoryStore(config.history.resolved_path, max_entries=config.history.max_entries)
    if not store.items:
        console.print("[yellow]No history yet.[/yellow]")
        return
    table = Table(title="History")
    table.add_column("When")
    table.add_column("Type")
    table.add_column("Name")
    table.add_column("Title")
    table.add_column("Location")
    for item in store.items:
        table.add_row(
            item.deployed_at.strftime("%Y-%m-%d %H:%M"), item.type, item.name, item.title, item.url or ""
        )
    console.print(table)


if __name__ == "__main__":
    app()
