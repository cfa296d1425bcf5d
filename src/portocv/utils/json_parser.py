"""Utility to extract JSON from LLM responses."""

from __future__ import annotations

import json


def extract_json(text: str) -> dict | list:
    """Extract JSON from an LLM response, handling ```json blocks.

    Tries in order:
    1. Direct json.loads on the full text
    2. Strip fenced code block markers and parse
    3. The outermost {...} or [...] span, whichever opens first

    Truncated JSON is not repaired; a cut-off answer is a failed generation.
    """
    text = (text or "").strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    stripped = _strip_code_fences(text)
    if stripped != text:
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass

    for candidate in _spans(stripped):
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")


def _strip_code_fences(text: str) -> str:
    """Remove markdown code fence markers, keeping only the fenced body."""
    start = text.find("```")
    if start == -1:
        return text
    body = text[start + 3 :]
    newline = body.find("\n")
    if newline != -1 and body[:newline].strip().isalpha():
        body = body[newline + 1 :]  # language tag, e.g. ```json
    end = body.find("```")
    if end != -1:
        body = body[:end]
    return body.strip()


def _spans(text: str) -> list[str]:
    """Outermost object/array spans, ordered by where they start."""
    spans = []
    for open_ch, close_ch in (("{", "}"), ("[", "]")):
        start = text.find(open_ch)
        end = text.rfind(close_ch)
        if start != -1 and end > start:
            spans.append((start, text[start : end + 1]))
    return [s for _, s in sorted(spans)]
