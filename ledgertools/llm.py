"""Prompt building and chat-completion requests for the AI-assisted commands."""

from __future__ import annotations

import os
from pathlib import Path

import httpx

__all__ = [
    "LLMError",
    "ASK_SYSTEM_MESSAGE",
    "IMPORT_SYSTEM_MESSAGE",
    "read_context",
    "build_ask_prompt",
    "build_import_prompt",
    "chat_completion",
]

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o"
REQUEST_TIMEOUT = 600.0

ASK_SYSTEM_MESSAGE = (
    "You are a helpful financial assistant reviewing a user's personal finances."
)
IMPORT_SYSTEM_MESSAGE = (
    "You are a financial assistant that converts raw transactions into hledger "
    "journal entries."
)


class LLMError(RuntimeError):
    """Raised when a chat completion cannot be obtained."""


def read_context(path: str | Path) -> str | None:
    """Return the file's text, or None if it cannot be read."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def build_ask_prompt(balance: str, context: str | None, question: str) -> str:
    """Build the user prompt for a question about the balance sheet."""
    return (
        f"Here is my balance sheet:\n\n{balance}\n\n"
        f"Context:\n{context or ''}\n\n"
        f"Question:\n{question}"
    )


def build_import_prompt(
    accounts: list[str], source: str, context: str | None, journal: str | None
) -> str:
    """Build the user prompt asking for journal entries from raw source data."""
    journal_part = (
        f"\nHere is my full journal for context:\n\n{journal}" if journal is not None else ""
    )
    account_list = "\n".join(accounts)
    return (
        f"Here are the account names available:\n\n{account_list}\n\n"
        f"Here is the source data (e.g., CSV or JSON):\n\n{source}\n\n"
        f"Context:\n{context or ''}{journal_part}\n\n"
        "Generate valid hledger journal transactions using only the accounts above.\n\n"
        "IMPORTANT:\n"
        "- Do NOT explain anything.\n"
        "- Do NOT include any prose or formatting.\n"
        "- Output ONLY valid hledger journal entries.\n"
    )


def chat_completion(system_message: str, user_prompt: str, api_key: str | None = None) -> str:
    """Send a system and user message and return the first reply's text."""
    key = api_key or os.environ.get("OPENAI_API_KEY")
    if not key:
        raise LLMError("OPENAI_API_KEY environment variable is not set.")
    base_url = os.environ.get("OPENAI_BASE_URL") or DEFAULT_BASE_URL
    payload = {
        "model": DEFAULT_MODEL,
        "messages": [
            {"role": "system", "content": system_message},
            {"role": "user", "content": user_prompt},
        ],
    }
    try:
        response = httpx.post(
            f"{base_url.rstrip('/')}/chat/completions",
            headers={"Authorization": f"Bearer {key}"},
            json=payload,
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise LLMError(f"OpenAI request failed: {exc}") from exc
    try:
        content = response.json()["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise LLMError(f"OpenAI request failed: malformed response ({exc})") from exc
    return content or ""