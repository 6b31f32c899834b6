"""Helpers for turning admin free-text input into term field lists."""

from __future__ import annotations


def parse_list_input(text: str | None) -> list[str]:
    """Split comma-separated input into trimmed, non-empty items.

    >>> parse_list_input("LLM, large language model, ,GPT")
    ['LLM', 'large language model', 'GPT']
    """
    if not text:
        return []
    return [item.strip() for item in text.split(",") if item.strip()]


def parse_url_input(text: str | None) -> list[str]:
    """Keep the lines of ``text`` that look like URLs (start with ``http``)."""
    if not text:
        return []
    return [
        line.strip()
        for line in text.split("\n")
        if line.strip() and line.strip().startswith("http")
    ]
