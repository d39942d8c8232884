"""Drafting a journal transaction and appending it to a journal file."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

__all__ = ["ValidationError", "Posting", "TransactionDraft", "append_to_journal"]

_LEADING_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


class ValidationError(ValueError):
    """Raised when a draft transaction is incomplete or malformed."""


@dataclass
class Posting:
    """One account/amount pair of a transaction."""

    account: str = ""
    amount: str = ""


def _default_postings() -> list[Posting]:
    return [Posting(), Posting()]


@dataclass
class TransactionDraft:
    """A transaction being entered, before it is written to a journal."""

    date: str = field(default_factory=lambda: date.today().isoformat())
    description: str = ""
    postings: list[Posting] = field(default_factory=_default_postings)

    def add_posting(self, account: str = "", amount: str = "") -> Posting:
        """Append a new posting and return it."""
        posting = Posting(account, amount)
        self.postings.append(posting)
        return posting

    def validate(self) -> None:
        """Raise ValidationError if the draft cannot be written."""
        if len(self.postings) < 2:
            raise ValidationError("At least 2 account/amount pairs required.")
        if not self.date.strip() or not self.description.strip():
            raise ValidationError("Date and description are required.")
        last = len(self.postings) - 1
        for index, posting in enumerate(self.postings):
            if not posting.account.strip():
                raise ValidationError("All account fields must be filled.")
            amount = posting.amount.strip()
            if not amount:
                if index == last:
                    continue
                raise ValidationError("All amount fields must be filled.")
            if not _LEADING_NUMBER.match(amount):
                raise ValidationError("Amounts must be numeric.")

    def journal_string(self) -> str:
        """Render the draft in journal syntax."""
        lines = [f"{self.date} {self.description}\n"]
        lines.extend(f"  {p.account}    {p.amount}\n" for p in self.postings)
        return "".join(lines)


def append_to_journal(journal_path: str | Path, entry: str) -> None:
    """Append an entry to the journal, separated by a blank line."""
    if not entry:
        return
    with open(journal_path, "a", encoding="utf-8") as handle:
        handle.write("\n" + entry)