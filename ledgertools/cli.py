"""Command-line interface: add, ask and import commands for a journal file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Protocol, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, WordCompleter

from .entry import Posting, TransactionDraft, ValidationError, append_to_journal
from .journal import JournalError, get_accounts, get_balance_sheet
from .llm import (
    ASK_SYSTEM_MESSAGE,
    IMPORT_SYSTEM_MESSAGE,
    LLMError,
    build_ask_prompt,
    build_import_prompt,
    chat_completion,
    read_context,
)

__all__ = ["build_parser", "run_add", "run_ask", "run_import", "main"]

_PROMPT_BANNER = "----- Prompt sent to OpenAI -----"
_PROMPT_FOOTER = "----- End of prompt -----"
_ACTIONS = (
    "[a] Generate and append to journal  "
    "[o] Generate and output to console  "
    "[n] Add another account/amount pair  "
    "[q] Quit\n> "
)
_GROUPS = (
    "Core Commands:\n"
    "  add       Add a new transaction interactively\n"
    "\n"
    "AI-Powered Commands:\n"
    "  ask       Ask a question about your balance sheet\n"
    "  import    Import transactions from any source (e.g., CSV, JSON, etc.)"
)


class _Session(Protocol):
    def prompt(self, message: str, *, default: str = "", completer: Any = None) -> str: ...


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the command line."""
    journal_option = argparse.ArgumentParser(add_help=False)
    journal_option.add_argument(
        "-j", "--journal", default=argparse.SUPPRESS, help="Path to journal file"
    )

    parser = argparse.ArgumentParser(
        prog="hledger-tools",
        description="Tools for working with hledger journals",
        epilog=_GROUPS,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-j", "--journal", default=None, help="Path to journal file")
    commands = parser.add_subparsers(dest="command", metavar="<command>")

    commands.add_parser(
        "add",
        parents=[journal_option],
        help="Add a new transaction interactively",
        description="Add a new transaction interactively",
    )

    ask = commands.add_parser(
        "ask",
        parents=[journal_option],
        help="Ask a question about your balance sheet",
        description="Ask a question about your balance sheet",
    )
    ask.add_argument("question", help='The question, e.g. "Am I saving enough?"')
    ask.add_argument(
        "-c",
        "--context",
        dest="context",
        default=None,
        help="Optional context file. It will be included in the LLM prompt.",
    )
    ask.add_argument(
        "--show-prompt",
        action="store_true",
        help="Print the full prompt sent to the LLM",
    )

    source = commands.add_parser(
        "import",
        parents=[journal_option],
        help="Import transactions from any source (e.g., CSV, JSON, etc.)",
        description="Import transactions from any source (e.g., CSV, JSON, etc.)",
    )
    source.add_argument("source", help="Path to the source file, e.g. transactions.csv")
    source.add_argument(
        "-c",
        "--context",
        dest="context",
        default=None,
        help="Path to optional context file. It will be included in the LLM prompt.",
    )
    source.add_argument(
        "--show-prompt",
        action="store_true",
        help="Print the full prompt sent to the LLM",
    )
    source.add_argument(
        "--include-journal",
        action="store_true",
        help="Include the full journal in the LLM prompt (NOT RECOMMENDED)",
    )
    return parser


def _ask(session: _Session, message: str, default: str = "", completer: Completer | None = None) -> str:
    return session.prompt(message, default=default, completer=completer)


def _edit_posting(session: _Session, number: int, posting: Posting, completer: Completer) -> None:
    posting.account = _ask(session, f"Account {number}: ", posting.account, completer)
    posting.amount = _ask(session, f"Amount {number} (e.g. 1000€): ", posting.amount)


def _edit_draft(session: _Session, draft: TransactionDraft, completer: Completer) -> None:
    draft.date = _ask(session, "Date (YYYY-MM-DD): ", draft.date)
    draft.description = _ask(session, "Description: ", draft.description)
    for number, posting in enumerate(draft.postings, 1):
        _edit_posting(session, number, posting, completer)


def run_add(journal_path: str | Path, session: _Session | None = None) -> str | None:
    """Enter a transaction interactively; return the entry, or None if abandoned."""
    accounts = get_accounts(journal_path)
    completer = WordCompleter(accounts, sentence=True, match_middle=True)
    session = session if session is not None else PromptSession()
    draft = TransactionDraft()
    try:
        _edit_draft(session, draft, completer)
        while True:
            choice = _ask(session, _ACTIONS).strip().lower()
            if choice == "q":
                return None
            if choice == "n":
                posting = draft.add_posting()
                _edit_posting(session, len(draft.postings), posting, completer)
                continue
            if choice not in ("a", "o"):
                continue
            try:
                draft.validate()
            except ValidationError as exc:
                print(f"Error: {exc}")
                _edit_draft(session, draft, completer)
                continue
            entry = draft.journal_string()
            print(entry, end="")
            if choice == "a":
                append_to_journal(journal_path, entry)
                print("Entry successfully appended to journal file.")
            return entry
    except (KeyboardInterrupt, EOFError):
        return None


def _load_context(context_path: str | Path | None) -> str | None:
    if not context_path:
        return None
    content = read_context(context_path)
    if content is None:
        print(
            f"Warning: failed to read context file: {context_path} (ignored)",
            file=sys.stderr,
        )
    else:
        print(f"Using context file: {context_path}")
    return content


def _show(prompt: str) -> None:
    print(_PROMPT_BANNER)
    print(prompt)
    print(_PROMPT_FOOTER)


def run_ask(
    journal_path: str | Path,
    question: str,
    context_path: str | Path | None = None,
    show_prompt: bool = False,
) -> str:
    """Ask the assistant a question about the journal's balance sheet."""
    context = _load_context(context_path)
    balance = get_balance_sheet(journal_path)
    prompt = build_ask_prompt(balance, context, question)
    if show_prompt:
        _show(prompt)
        print()
    answer = chat_completion(ASK_SYSTEM_MESSAGE, prompt)
    print()
    print(answer)
    return answer


def run_import(
    journal_path: str | Path,
    source_path: str | Path,
    context_path: str | Path | None = None,
    show_prompt: bool = False,
    include_journal: bool = False,
) -> str:
    """Have the assistant turn raw source data into journal entries."""
    try:
        source = Path(source_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise OSError(f"could not read source file: {source_path}") from exc

    context = _load_context(context_path)

    journal = None
    if include_journal:
        journal = read_context(journal_path)
        if journal is None:
            print(
                f"Warning: failed to read journal file: {journal_path} (ignored)",
                file=sys.stderr,
            )

    accounts = get_accounts(journal_path)
    prompt = build_import_prompt(accounts, source, context, journal)
    if show_prompt:
        _show(prompt)
    entries = chat_completion(IMPORT_SYSTEM_MESSAGE, prompt)
    print()
    print(entries)
    return entries


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    if not args.journal:
        print(
            "Error: the --journal (-j) flag is required (path to journal file)",
            file=sys.stderr,
        )
        return 1
    try:
        if args.command == "add":
            run_add(args.journal)
        elif args.command == "ask":
            run_ask(args.journal, args.question, args.context, args.show_prompt)
        else:
            run_import(
                args.journal,
                args.source,
                args.context,
                args.show_prompt,
                args.include_journal,
            )
    except (JournalError, LLMError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())