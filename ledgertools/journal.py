"""Reading plain-text accounting journals: account lists and balance sheets."""

from __future__ import annotations

import re
from collections import defaultdict
from decimal import Decimal, InvalidOperation
from pathlib import Path

__all__ = ["JournalError", "get_accounts", "get_balance_sheet"]


class JournalError(Exception):
    """Raised when a journal cannot be read or understood."""


_DATE_RE = re.compile(r"^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})")
_SEPARATOR_RE = re.compile(r"\t| {2,}")
_AMOUNT_RE = re.compile(
    r'^(?P<sign>[-+]?)\s*(?P<pre>"[^"]*"|[^\d\s.,+\-]*)\s*(?P<sign2>[-+]?)\s*'
    r'(?P<num>\d[\d,.]*|[.,]\d+)\s*(?P<post>"[^"]*"|[^\d\s.,+\-]*)$'
)
_SECTIONS = (
    ("Assets", re.compile(r"^assets?$", re.IGNORECASE)),
    ("Liabilities", re.compile(r"^(debts?|liabilit(y|ies))$", re.IGNORECASE)),
)

Amounts = dict[str, Decimal]


def _parse_number(text: str) -> Decimal:
    if "," in text and "." in text and text.rfind(",") > text.rfind("."):
        text = text.replace(".", "").replace(",", ".")
    elif text.count(",") == 1 and "." not in text and len(text) - text.index(",") != 4:
        text = text.replace(",", ".")
    else:
        text = text.replace(",", "")
    if text.count(".") > 1:
        text = text.replace(".", "")
    try:
        return Decimal(text)
    except InvalidOperation as exc:
        raise JournalError(f"invalid number: {text!r}") from exc


def _parse_amount(text: str, where: str) -> Amounts:
    match = _AMOUNT_RE.match(text)
    if not match or (match["pre"] and match["post"]):
        raise JournalError(f"{where}: cannot parse amount {text!r}")
    quantity = _parse_number(match["num"])
    if "-" in (match["sign"], match["sign2"]):
        quantity = -quantity
    return {(match["pre"] or match["post"]).strip('"'): quantity}


class _Transaction:
    def __init__(self, date: str, source: str) -> None:
        self.date = date
        self.source = source
        self.postings: list[tuple[str, Amounts | None, bool]] = []
        self.has_cost = False

    def add(self, line: str) -> None:
        body = line.strip()
        if body.startswith((";", "#")):
            return
        body = body.split(";", 1)[0].rstrip().lstrip("*!").lstrip()
        if not body:
            return
        account, _, amount_text = (_SEPARATOR_RE.split(body, maxsplit=1) + [""])[:2] + [""]
        account = account.strip()
        virtual = account[:1] == "(" and account[-1:] == ")"
        if account[:1] in "([" and account[-1:] in ")]":
            account = account[1:-1]
        self.has_cost |= "@" in amount_text
        amount_text = re.split(r"\s*[@=]", amount_text.strip(), maxsplit=1)[0].strip()
        amounts = _parse_amount(amount_text, self.source) if amount_text else None
        self.postings.append((account, amounts, virtual))

    def balanced(self) -> list[tuple[str, Amounts]]:
        """Postings with any missing amount inferred; raises if unbalanced."""
        real = [p for p in self.postings if not p[2]]
        missing = [p for p in real if p[1] is None]
        if len(missing) > 1:
            raise JournalError(f"{self.source}: more than one posting without an amount")
        sums: Amounts = defaultdict(Decimal)
        for _, amounts, _ in real:
            for commodity, quantity in (amounts or {}).items():
                sums[commodity] += quantity
        inferred = {c: -q for c, q in sums.items() if q}
        if not missing and not self.has_cost and inferred:
            raise JournalError(f"{self.source}: transaction is unbalanced")
        return [
            (acc, amounts if amounts is not None else (inferred if not virtual else {}))
            for acc, amounts, virtual in self.postings
        ]


def _read(path: Path, declared: list[str], txns: list[_Transaction], seen: set[Path]) -> None:
    if path.resolve() in seen:
        raise JournalError(f"{path}: include cycle")
    seen.add(path.resolve())
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise JournalError(f"cannot read journal {path}: {exc}") from exc

    current: _Transaction | None = None
    for lineno, raw in enumerate(text.splitlines(), 1):
        line = raw.rstrip()
        if line and raw[0] in " \t":
            if current is not None:
                current.add(line)
            continue
        current = None
        if not line or line[0] in ";#*%|":
            continue
        date = _DATE_RE.match(line)
        if date:
            year, month, day = date.groups()
            current = _Transaction(f"{year}-{int(month):02d}-{int(day):02d}", f"{path}:{lineno}")
            txns.append(current)
            continue
        word, _, rest = line.partition(" ")
        if word == "account":
            name = _SEPARATOR_RE.split(rest.split(";", 1)[0].strip(), maxsplit=1)[0]
            if name and name not in declared:
                declared.append(name)
        elif word == "include":
            _read(path.parent / rest.strip(), declared, txns, seen)


def _load(journal_path: str | Path) -> tuple[list[str], list[tuple[str, list[tuple[str, Amounts]]]]]:
    declared: list[str] = []
    txns: list[_Transaction] = []
    _read(Path(journal_path), declared, txns, set())
    return declared, [(t.date, t.balanced()) for t in txns]


def get_accounts(journal_path: str | Path) -> list[str]:
    """List account names: declared ones in order, then used ones alphabetically."""
    declared, txns = _load(journal_path)
    used = {account for _, postings in txns for account, _ in postings}
    return declared + sorted(used - set(declared))


def _format_share(amounts: Amounts, total: Amounts) -> str:
    show_commodity = sum(1 for q in total.values() if q) > 1
    cells = []
    for commodity, quantity in sorted(amounts.items()):
        if not quantity:
            continue
        base = total.get(commodity)
        cell = f"{quantity / base * 100:.1f} %" if base else "-"
        cells.append(f"{cell} {commodity}" if show_commodity and commodity else cell)
    return ", ".join(cells)


def get_balance_sheet(journal_path: str | Path) -> str:
    """Render assets and liabilities as a tree, each account as a percentage of its section."""
    _, txns = _load(journal_path)
    balances: dict[str, Amounts] = defaultdict(lambda: defaultdict(Decimal))
    for _, postings in txns:
        for account, amounts in postings:
            parts = account.split(":")
            for depth in range(1, len(parts) + 1):
                for commodity, quantity in amounts.items():
                    balances[":".join(parts[:depth])][commodity] += quantity

    def walk(name: str, depth: int):
        if any(balances[name].values()):
            yield "  " * (depth + 1) + name.rsplit(":", 1)[-1], name
        prefix = name + ":"
        for child in sorted(n for n in list(balances) if n.startswith(prefix) and ":" not in n[len(prefix):]):
            yield from walk(child, depth + 1)

    sections = []
    for heading, pattern in _SECTIONS:
        roots = sorted(n for n in list(balances) if ":" not in n and pattern.match(n))
        total: Amounts = defaultdict(Decimal)
        for root in roots:
            for commodity, quantity in balances[root].items():
                total[commodity] += quantity
        rows = [(label, _format_share(balances[name], total)) for root in roots for label, name in walk(root, 0)]
        sections.append((heading, rows, _format_share(total, total)))

    width = max([len("Total")] + [len(label) for _, rows, _ in sections for label, _ in rows])
    lines = [f"Balance Sheet {max(d for d, _ in txns)}" if txns else "Balance Sheet", ""]
    for heading, rows, total_text in sections:
        lines.append(heading)
        lines.extend(f"{label:<{width}}  {value:>10}" for label, value in rows)
        lines += ["-" * (width + 12), f"{'Total':<{width}}  {total_text:>10}".rstrip(), ""]
    return "\n".join(lines)