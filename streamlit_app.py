"""Streamlit Web UI for PortoCV.

Four modes:
  A) Portfolio Studio : résumé + style knobs → portfolio blueprint (JSON) + critique
  B) CV Builder       : résumé → structured UK CV (JSON)
  C) Resume Moulder   : CV + job description → tailored CV when the match is 60+
  D) Job Hunter       : CV + postings → ranked matches + cover letters
"""

from __future__ import annotations

import asyncio
import json
import logging
import os

import nest_asyncio
import streamlit as st
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets → os.environ so the key pool can read them
for key in ("API_KEY", "GEMINI_API_KEY", "API_KEY_BACKUPS"):
    if key not in os.environ:
        try:
            os.environ[key] = st.secrets[key]
        except Exception:
            pass

from pydantic import TypeAdapter, ValidationError

from portocv.config import load_config
from portocv.errors import PortoCVError
from portocv.history import HistoryStore
from portocv.models.cv import CVData
from portocv.models.history import HistoryItem
from portocv.models.jobs import JobPosting
from portocv.models.portfolio import PortfolioData
from portocv.models.preferences import UserPreferences
from portocv.parsers.resume_parser import ingest_bytes
from portocv.pipeline.orchestrator import PortfolioOrchestrator, build_orchestrator
from portocv.session import SessionTimer

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
UPLOAD_TYPES = ["pdf", "png", "jpg", "jpeg", "webp", "docx", "txt", "md"]

# Wizard state cleared on session expiry
WIZARD_KEYS = (
    "portfolio_result", "cv_result", "tailor_result", "ranked_jobs",
    "cover_letters", "job_cv",
)

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="PortoCV",
    page_icon=":briefcase:",
    layout="wide",
)

config = load_config()

# ---------------------------------------------------------------------------
# Session timer
# ---------------------------------------------------------------------------

if "session_timer" not in st.session_state:
    st.session_state.session_timer = SessionTimer(config.session.timeout_minutes)

if st.session_state.session_timer.expired:
    for key in WIZARD_KEYS:
        st.session_state.pop(key, None)
    st.session_state.session_timer.restart()
    st.info("Your session expired and the wizard was reset.")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@st.cache_resource
def _get_orchestrator(api_key: str | None) -> PortfolioOrchestrator:
    """One orchestrator (and key pool) per override key for the process lifetime."""
    return build_orchestrator(config, api_key=api_key or None)


@st.cache_resource
def _get_history() -> HistoryStore:
    return HistoryStore(config.history.resolved_path, max_entries=config.history.max_entries)


def _record_history(name: str, title: str, kind: str, photo_url: str | None = None):
    _get_history().add(HistoryItem(name=name, title=title, type=kind, photo_url=photo_url))


def _run(coro):
    """Run one generation step. On failure show the message and drop back a step."""
    try:
        return asyncio.run(coro)
    except PortoCVError as e:
        logger.warning("Generation step failed: %s", e)
        st.error(str(e))
    except Exception:
        logger.exception("Unhandled generation error")
        st.error("Generation failed. Please try again in a moment.")
    return None


def _ingest_upload(uploaded_file):
    if uploaded_file.size > MAX_UPLOAD_BYTES:
        st.error("The file is larger than 10MB.")
        return None
    try:
        return ingest_bytes(uploaded_file.getvalue(), uploaded_file.type, filename=uploaded_file.name)
    except PortoCVError as e:
        st.error(str(e))
        return None


def _cv_from_upload(uploaded_file, orchestrator: PortfolioOrchestrator) -> CVData | None:
    """Accept a CV JSON produced earlier or a raw résumé to convert first."""
    if uploaded_file.name.lower().endswith(".json"):
        try:
            return CVData.model_validate_json(uploaded_file.getvalue())
        except ValidationError:
            st.error("That JSON file is not a PortoCV CV.")
            return None
    resume = _ingest_upload(uploaded_file)
    if resume is None:
        return None
    with st.spinner("Agent 3: Building CV structure..."):
        return _run(orchestrator.cv_writer.generate(resume))


def _json_bytes(data: dict) -> bytes:
    return json.dumps(data, ensure_ascii=False, indent=2).encode("utf-8")


# ---------------------------------------------------------------------------
# Sidebar: shared across modes
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("PortoCV")
    st.caption("Résumé to portfolio and CV")

    mode = st.radio(
        "Mode",
        ["Portfolio Studio", "CV Builder", "Resume Moulder", "Job Hunter"],
        index=0,
    )

    st.divider()

    api_key_override = st.text_input(
        "Gemini API key (optional)",
        type="password",
        help="Tried before the configured keys.",
    )

    st.divider()

    st.subheader("Recent")
    history_items = _get_history().items
    if not history_items:
        st.caption("Nothing published yet.")
    for item in history_items:
        st.markdown(
            f"**{item.name}** · {item.title}  \n"
            f"{item.type} · {item.deployed_at:%Y-%m-%d %H:%M}"
        )

orchestrator = _get_orchestrator(api_key_override.strip())


# ---------------------------------------------------------------------------
# Mode A: Portfolio Studio
# ---------------------------------------------------------------------------


def _mode_portfolio():
    st.header("Portfolio Studio")
    st.markdown("Upload a résumé and get a themed portfolio blueprint.")

    resume_file = st.file_uploader("Résumé", type=UPLOAD_TYPES)

    with st.expander("Style", expanded=False):
        c1, c2, c3 = st.columns(3)
        theme_style = c1.selectbox("Theme", ["auto", "cyber", "minimal", "professional", "creative"])
        background_type = c2.selectbox("Background", ["auto", "particles", "grid", "bokeh"])
        animation_type = c3.selectbox("Animation", ["auto", "fade", "slide", "scale"])
        c4, c5 = st.columns(2)
        color_mode = c4.selectbox("Colour mode", ["auto", "dark", "light"])
        primary_hue = c5.selectbox(
            "Primary hue", ["auto", "blue", "green", "purple", "red", "orange", "monochrome"]
        )
    photo_url = st.text_input("Photo URL (optional)")

    if st.button("Generate portfolio", type="primary", disabled=not resume_file):
        resume = _ingest_upload(resume_file)
        if resume is None:
            return
        prefs = UserPreferences(
            theme_style=theme_style,
            background_type=background_type,
            animation_type=animation_type,
            color_mode=color_mode,
            primary_hue=primary_hue,
        )
        progress_bar = st.progress(0, text="Preparing...")
        phases = {"synthesis": 0.2, "critique": 0.7, "done": 1.0}

        def on_phase(phase: str, detail: str):
            progress_bar.progress(phases.get(phase, 0), text=detail)

        st.session_state.pop("portfolio_result", None)
        result = _run(
            orchestrator.run(resume, prefs, photo_url=photo_url.strip() or None, on_phase=on_phase)
        )
        if result is None:
            return
        st.session_state["portfolio_result"] = result

    result = st.session_state.get("portfolio_result")
    if result is None:
        return

    data: PortfolioData = result.portfolio
    st.divider()
    st.subheader(f"{data.name} · {data.title}")
    st.caption(data.quote)
    st.markdown(data.summary)
    t = data.theme
    st.markdown(
        f"**Theme** {t.font_style} / {t.background_style} / {t.animation_style} / {t.mode}  \n"
        f"**Colours** `{t.primary_color}` `{t.accent_color}` on `{t.background_color}`"
    )
    st.markdown("**Skills** " + ", ".join(data.skills))

    if result.feedback:
        with st.expander(f"Critique · score {result.feedback.score:g}", expanded=True):
            st.markdown(result.feedback.ux_insights)
            for s in result.feedback.suggestions:
                st.markdown(f"- {s}")

    instruction = st.text_input("Ask for a change", placeholder="e.g. switch to light mode")
    if st.button("Apply change", disabled=not instruction.strip()):
        with st.spinner("Applying edits..."):
            updated = _run(orchestrator.architect.edit(data, instruction))
        if updated is not None:
            result.portfolio = updated
            st.rerun()

    st.download_button(
        label="Download portfolio (.json)",
        data=_json_bytes(data.to_wire()),
        file_name=f"{data.name.replace(' ', '_')}_portfolio.json",
        mime="application/json",
        type="primary",
        on_click=_record_history,
        args=(data.name, data.title, "portfolio", data.photo_url),
    )


# ---------------------------------------------------------------------------
# Mode B: CV Builder
# ---------------------------------------------------------------------------


def _mode_cv_builder():
    st.header("CV Builder")
    st.markdown("Turn a résumé into a UK-standard CV.")

    resume_file = st.file_uploader("Résumé", type=UPLOAD_TYPES)
    portfolio_url = st.text_input("Portfolio link (optional)")
    pages = st.radio("Length", [1, 2], format_func=lambda n: f"{n} page(s)", horizontal=True)

    if st.button("Build CV", type="primary", disabled=not resume_file):
        resume = _ingest_upload(resume_file)
        if resume is None:
            return
        st.session_state.pop("cv_result", None)
        with st.spinner("Agent 3: Building CV structure..."):
            cv = _run(
                orchestrator.cv_writer.generate(
                    resume, portfolio_url=portfolio_url.strip() or None, target_pages=pages
                )
            )
        if cv is None:
            return
        st.session_state["cv_result"] = cv

    cv = st.session_state.get("cv_result")
    if cv is None:
        return
    _render_cv(cv)
    st.download_button(
        label="Download CV (.json)",
        data=_json_bytes(cv.to_wire()),
        file_name=f"{cv.full_name.replace(' ', '_')}_cv.json",
        mime="application/json",
        type="primary",
        on_click=_record_history,
        args=(cv.full_name, cv.experience[0].role if cv.experience else "CV", "resume"),
    )


def _render_cv(cv: CVData):
    st.divider()
    st.subheader(cv.full_name)
    st.caption(cv.contact_info)
    st.markdown("**Professional profile**")
    st.markdown(cv.professional_profile)
    st.markdown("**Core competencies** " + " · ".join(cv.core_competencies))
    st.markdown("**Experience**")
    for exp in cv.experience:
        st.markdown(f"*{exp.role}*, {exp.company} ({exp.location}) | {exp.dates}")
        for r in exp.responsibilities:
            st.markdown(f"- {r}")
    st.markdown("**Education**")
    for edu in cv.education:
        st.markdown(f"- {edu.degree}, {edu.institution} | {edu.dates}")
    if cv.interests:
        st.markdown(f"**Interests** {cv.interests}")
    st.markdown(f"**References** {cv.references}")


# ---------------------------------------------------------------------------
# Mode C: Resume Moulder
# ---------------------------------------------------------------------------


def _mode_moulder():
    st.header("Resume Moulder")
    st.markdown("Tailor a CV to a job. Nothing is rewritten below a 60% match.")

    cv_file = st.file_uploader("CV (.json) or résumé", type=UPLOAD_TYPES + ["json"])
    job_title = st.text_input("Job title", max_chars=200)
    jd_text = st.text_area("Job description", height=200, max_chars=10000)

    can_run = bool(cv_file and job_title.strip() and jd_text.strip())
    if st.button("Mould CV", type="primary", disabled=not can_run):
        st.session_state.pop("tailor_result", None)
        cv = _cv_from_upload(cv_file, orchestrator)
        if cv is None:
            return
        with st.spinner("Agent 4: Moulding CV..."):
            result = _run(orchestrator.cv_tailor.tailor(cv, jd_text, job_title))
        if result is None:
            return
        st.session_state["tailor_result"] = result

    result = st.session_state.get("tailor_result")
    if result is None:
        return
    if result.success:
        st.success(f"Match {result.match_score:g}%: {result.analysis}")
        _render_cv(result.data)
        st.download_button(
            label="Download tailored CV (.json)",
            data=_json_bytes(result.data.to_wire()),
            file_name=f"{result.data.full_name.replace(' ', '_')}_tailored_cv.json",
            mime="application/json",
            type="primary",
        )
    else:
        st.warning(f"Match {result.match_score:g}%: {result.analysis}")


# ---------------------------------------------------------------------------
# Mode D: Job Hunter
# ---------------------------------------------------------------------------


def _mode_job_hunter():
    st.header("Job Hunter")
    st.markdown("Rank postings against your CV and draft cover letters.")

    cv_file = st.file_uploader("CV (.json) or résumé", type=UPLOAD_TYPES + ["json"])
    jobs_file = st.file_uploader("Job postings (.json array)", type=["json"])

    if st.button("Find matches", type="primary", disabled=not (cv_file and jobs_file)):
        for key in ("ranked_jobs", "cover_letters", "job_cv"):
            st.session_state.pop(key, None)
        try:
            postings = TypeAdapter(list[JobPosting]).validate_json(jobs_file.getvalue())
        except ValidationError:
            st.error("The postings file is not a JSON array of jobs.")
            return
        cv = _cv_from_upload(cv_file, orchestrator)
        if cv is None:
            return
        with st.spinner("Scoring matches..."):
            ranked = _run(orchestrator.job_matcher.rank(cv, postings))
        if ranked is None:
            return
        st.session_state["job_cv"] = cv
        st.session_state["ranked_jobs"] = ranked
        st.session_state["cover_letters"] = {}

    ranked = st.session_state.get("ranked_jobs")
    if ranked is None:
        return
    if not ranked:
        st.info("No postings reached a 60% match.")
        return

    cv = st.session_state["job_cv"]
    letters: dict = st.session_state["cover_letters"]
    for posting in ranked:
        with st.container(border=True):
            st.markdown(f"**{posting.title}** · {posting.company} · {posting.location}")
            st.caption(f"Match {posting.match_score:g}% · {posting.match_reason or ''}")
            if posting.apply_link:
                st.markdown(f"[Apply]({posting.apply_link})")
            if posting.id in letters:
                st.text_area("Cover letter", letters[posting.id], height=220, key=f"letter_{posting.id}")
            elif st.button("Draft cover letter", key=f"draft_{posting.id}"):
                with st.spinner("Agent 3: Drafting application..."):
                    letter = _run(orchestrator.cover_letter.draft(cv, posting))
                if letter is not None:
                    letters[posting.id] = letter
                    st.rerun()


# ---------------------------------------------------------------------------
# Main router
# ---------------------------------------------------------------------------

if mode == "Portfolio Studio":
    _mode_portfolio()
elif mode == "CV Builder":
    _mode_cv_builder()
elif mode == "Resume Moulder":
    _mode_moulder()
else:
    _mode_job_hunter()
