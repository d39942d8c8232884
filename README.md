# ledgertools

Small command-line helpers for a plain-text accounting journal in the
hledger format: enter a transaction interactively, ask a chat model about
your balance sheet, or have it turn raw transaction data into journal entries.

The journal is read by the package itself; no other program is needed.

## Installation

```
pip install .
```

## Usage

Every command needs the journal file, given with `--journal` (or `-j`),
either before or after the command name:

```
hledger-tools --journal main.journal <command> [options]
hledger-tools <command> -j main.journal [options]
```

Run `hledger-tools` with no command to see the help. On failure a command
prints `Error: ...` to standard error and exits with status 1.

### add

Enter a transaction at the prompt:

```
hledger-tools -j main.journal add
```

You are asked in turn for the date (today by default), a description and two
account/amount pairs. Account names are completed from the accounts already
in the journal. Then choose:

- `a`: check the entry, print it and append it to the journal
- `o`: check the entry and only print it
- `n`: add another account/amount pair
- `q`: quit without saving (`ctrl+c` and `ctrl+d` do the same)

The check requires a date, a description, an account for every pair and an
amount for every pair except the last, which may be left empty so that it
balances the others. Amounts must begin with a number (`1000€`, `42.50`). If
the check fails, the error is shown and the fields are asked again with their
current values as defaults.

A finished entry looks like this, and is appended after a blank line:

```
2024-05-01 Groceries
  expenses:food    42.50
  assets:bank
```

### ask

```
hledger-tools -j main.journal ask "Am I saving enough?"
```

Builds a balance sheet from the journal and sends it, with your question, to
a chat completion model (`gpt-4o`), then prints the answer.

### import

```
hledger-tools -j main.journal import transactions.csv
```

Sends the source file (CSV, JSON or anything else) together with the list of
accounts in the journal, and asks for journal entries that use only those
accounts. The result is printed, not written to the journal, so you can check
it first.

### Options of ask and import

- `-c`, `--context PATH`: a text file whose contents are added to the prompt.
  If it cannot be read, a warning is shown and it is ignored.
- `--show-prompt`: print the full prompt before sending it.
- `--include-journal` (import only): put the whole journal into the prompt.
  Not recommended for large or private journals.

Both need the `OPENAI_API_KEY` environment variable. `OPENAI_BASE_URL` may
point the requests at another compatible endpoint.

## What the journal reader understands

- transactions starting with a date (`2024-05-01`, `2024/5/1`), with indented
  postings separated from their amounts by two spaces or a tab
- at most one posting without an amount, inferred so the transaction balances;
  transactions without `@` prices must balance
- `account` directives, `include` directives and comments
- virtual postings in `(...)` and `[...]`

Accounts are listed with declared ones first, in order, then the others
alphabetically.

## What it does not do

- The balance sheet covers only top-level `assets`/`asset` and
  `liabilities`/`liability`/`debts`/`debt` accounts, shown as a tree with each
  account as a percentage of its section. Commodities are not converted, and
  there are no period, depth or other report options.
- `add` is a series of prompts, not a full-screen form.
- `import` never writes to the journal.

## In Python

```python
from ledgertools.entry import TransactionDraft, append_to_journal
from ledgertools.journal import get_accounts, get_balance_sheet

draft = TransactionDraft(date="2024-05-01", description="Groceries")
draft.postings[0].account, draft.postings[0].amount = "expenses:food", "42.50"
draft.postings[1].account = "assets:bank"
draft.validate()  # raises ValidationError
append_to_journal("main.journal", draft.journal_string())
```

`ledgertools.llm` holds `build_ask_prompt`, `build_import_prompt`,
`read_context` and `chat_completion`, which raises `LLMError` on failure.

## Development

```
pip install -e ".[test]"
pytest
```