import json
from datetime import date

import httpx
import pytest
import respx

from ledgertools.cli import build_parser, main, run_add, run_ask, run_import
from ledgertools.journal import get_accounts, get_balance_sheet
from ledgertools.llm import ASK_SYSTEM_MESSAGE, IMPORT_SYSTEM_MESSAGE, LLMError

URL = "https://api.openai.com/v1/chat/completions"
REPLY = "You are doing fine."

JOURNAL = """account assets:bank
account expenses:food

2024-01-05 Groceries
  expenses:food    50 EUR
  assets:bank
"""


@pytest.fixture
def journal(tmp_path):
    path = tmp_path / "main.journal"
    path.write_text(JOURNAL, encoding="utf-8")
    return path


@pytest.fixture
def api(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "placeholder")
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    with respx.mock(assert_all_called=False) as router:
        route = router.post(URL).mock(
            return_value=httpx.Response(
                200, json={"choices": [{"message": {"content": REPLY}}]}
            )
        )
        yield route


class FakeSession:
    """Answers prompts from a script; None accepts the offered default."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.calls = []

    def prompt(self, message, default="", completer=None):
        self.calls.append((message, default, completer))
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return default if answer is None else answer


def sent_messages(route):
    return json.loads(route.calls.last.request.content)["messages"]


# parser


def test_parser_reads_journal_before_command():
    args = build_parser().parse_args(["-j", "x.journal", "ask", "Am I saving enough?"])
    assert (args.journal, args.command, args.question) == (
        "x.journal",
        "ask",
        "Am I saving enough?",
    )


def test_parser_reads_journal_after_command():
    args = build_parser().parse_args(["import", "data.csv", "--journal", "x.journal"])
    assert args.journal == "x.journal"
    assert args.source == "data.csv"
    assert args.include_journal is False
    assert args.show_prompt is False


def test_parser_import_flags():
    args = build_parser().parse_args(
        ["-j", "j", "import", "s.csv", "-c", "ctx.txt", "--show-prompt", "--include-journal"]
    )
    assert args.context == "ctx.txt"
    assert args.show_prompt is True
    assert args.include_journal is True


def test_parser_ask_needs_question():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["-j", "j", "ask"])


def test_parser_ask_rejects_two_questions():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["-j", "j", "ask", "one", "two"])


# add


def test_add_appends_entry(journal, capsys):
    session = FakeSession(
        ["2024-02-01", "Lunch", "expenses:food", "12.50", "assets:bank", "", "a"]
    )
    entry = run_add(journal, session)
    assert entry == "2024-02-01 Lunch\n  expenses:food    12.50\n  assets:bank    \n"
    assert journal.read_text(encoding="utf-8") == JOURNAL + "\n" + entry
    assert "Entry successfully appended to journal file." in capsys.readouterr().out
    assert get_accounts(journal) == ["assets:bank", "expenses:food"]


def test_add_output_only_leaves_file(journal, capsys):
    session = FakeSession(
        ["2024-02-01", "Lunch", "expenses:food", "12", "assets:bank", "-12", "o"]
    )
    entry = run_add(journal, session)
    assert journal.read_text(encoding="utf-8") == JOURNAL
    assert entry in capsys.readouterr().out


def test_add_defaults_date_to_today(journal):
    session = FakeSession([KeyboardInterrupt()])
    assert run_add(journal, session) is None
    assert session.calls[0][1] == date.today().isoformat()


def test_add_offers_account_completion(journal):
    session = FakeSession(["2024-02-01", "Lunch", "q", "", "", "", "q"])
    run_add(journal, session)
    completer = session.calls[2][2]
    assert list(completer.words) == ["assets:bank", "expenses:food"]


def test_add_quit_returns_none(journal):
    session = FakeSession(
        ["2024-02-01", "Lunch", "expenses:food", "1", "assets:bank", "", "q"]
    )
    assert run_add(journal, session) is None
    assert journal.read_text(encoding="utf-8") == JOURNAL


def test_add_eof_returns_none(journal):
    session = FakeSession(["2024-02-01", EOFError()])
    assert run_add(journal, session) is None


def test_add_validation_error_reprompts_with_values(journal, capsys):
    session = FakeSession(
        [
            "2024-02-01", "Lunch", "expenses:food", "abc", "assets:bank", "", "a",
            None, None, None, "12", None, None, "o",
        ]
    )
    entry = run_add(journal, session)
    assert "Error: Amounts must be numeric." in capsys.readouterr().out
    assert session.calls[10][1] == "abc"
    assert session.calls[7][1] == "2024-02-01"
    assert entry == "2024-02-01 Lunch\n  expenses:food    12\n  assets:bank    \n"
    assert journal.read_text(encoding="utf-8") == JOURNAL


def test_add_new_pair(journal):
    session = FakeSession(
        [
            "2024-02-01", "Split", "expenses:food", "10", "assets:bank", "-5", "n",
            "assets:cash", "", "o",
        ]
    )
    entry = run_add(journal, session)
    lines = entry.splitlines()
    assert len(lines) == 4
    assert lines[-1] == "  assets:cash    "
    assert session.calls[7][0].startswith("Account 3")


# ask


def test_ask_sends_balance_and_question(journal, api, capsys):
    answer = run_ask(journal, "Am I saving enough?")
    assert answer == REPLY
    messages = sent_messages(api)
    assert messages[0] == {"role": "system", "content": ASK_SYSTEM_MESSAGE}
    assert get_balance_sheet(journal) in messages[1]["content"]
    assert messages[1]["content"].endswith("Question:\nAm I saving enough?")
    assert capsys.readouterr().out == "\n" + REPLY + "\n"


def test_ask_uses_context_file(journal, api, tmp_path, capsys):
    context = tmp_path / "ctx.txt"
    context.write_text("I earn in EUR.", encoding="utf-8")
    run_ask(journal, "How much?", context, show_prompt=True)
    out = capsys.readouterr().out
    assert f"Using context file: {context}" in out
    assert "----- Prompt sent to OpenAI -----" in out
    assert "----- End of prompt -----" in out
    assert "Context:\nI earn in EUR." in sent_messages(api)[1]["content"]


def test_ask_missing_context_warns(journal, api, tmp_path, capsys):
    missing = tmp_path / "nope.txt"
    assert run_ask(journal, "How much?", missing) == REPLY
    assert f"failed to read context file: {missing}" in capsys.readouterr().err


def test_ask_without_key(journal, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(LLMError, match="OPENAI_API_KEY"):
        run_ask(journal, "How much?")


# import


def test_import_sends_accounts_and_source(journal, api, tmp_path):
    source = tmp_path / "data.csv"
    source.write_text("date,amount\n2024-03-01,20\n", encoding="utf-8")
    result = run_import(journal, source)
    assert result == REPLY
    messages = sent_messages(api)
    assert messages[0]["content"] == IMPORT_SYSTEM_MESSAGE
    prompt = messages[1]["content"]
    assert "assets:bank\nexpenses:food" in prompt
    assert "date,amount\n2024-03-01,20\n" in prompt
    assert "full journal" not in prompt


def test_import_includes_journal(journal, api, tmp_path):
    source = tmp_path / "data.csv"
    source.write_text("x", encoding="utf-8")
    result = run_import(journal, source, include_journal=True)
    assert result == REPLY
    prompt = sent_messages(api)[1]["content"]
    assert "Here is my full journal for context:" in prompt
    assert JOURNAL in prompt


def test_import_missing_source(journal, tmp_path):
    with pytest.raises(OSError, match="could not read source file"):
        run_import(journal, tmp_path / "missing.csv")


# main


def test_main_requires_journal(capsys):
    assert main(["ask", "Am I saving enough?"]) == 1
    assert "--journal" in capsys.readouterr().err


def test_main_without_command_prints_help(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "AI-Powered Commands" in out
    assert "Core Commands" in out


def test_main_ask(journal, api, capsys):
    assert main(["-j", str(journal), "ask", "Am I saving enough?"]) == 0
    assert REPLY in capsys.readouterr().out


def test_main_ask_without_key(journal, monkeypatch, capsys):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert main(["-j", str(journal), "ask", "q"]) == 1
    assert "OPENAI_API_KEY" in capsys.readouterr().err


def test_main_import_missing_source(journal, tmp_path, capsys):
    missing = tmp_path / "missing.csv"
    assert main(["-j", str(journal), "import", str(missing)]) == 1
    assert str(missing) in capsys.readouterr().err


def test_main_request_failure(journal, monkeypatch, capsys):
    monkeypatch.setenv("OPENAI_API_KEY", "placeholder")
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    with respx.mock() as router:
        router.post(URL).mock(return_value=httpx.Response(500))
        assert main(["-j", str(journal), "ask", "q"]) == 1
    assert "OpenAI request failed" in capsys.readouterr().err