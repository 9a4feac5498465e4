"""
CLI interface and shared display-data computation for the
UK savings tax calculator.
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional

import config as cfg
import tax
from accounts import normalise_currency_display, parse_amount, parse_rate
from scenarios import Scenario, Workspace
import report


# ═══════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════

def fmt(val: float, decimals: int = 2) -> str:
    """Format number as £X,XXX.XX."""
    if decimals > 0:
        return f"£{val:,.{decimals}f}"
    return f"£{val:,.0f}"


def pct(val: float, decimals: int = 2) -> str:
    return f"{val:.{decimals}f}%"


# ═══════════════════════════════════════════════════════════════════
# Shared display-data computation (used by CLI and web app)
# ═══════════════════════════════════════════════════════════════════

def account_rows(ws: Workspace) -> List[Dict[str, Any]]:
    """Rows of the taxable account table."""
    return [
        {
            "id": a.id,
            "name": a.name,
            "amount": fmt(a.amount, 0),
            "rate": f"{a.interest_rate:g}%",
            "interest": fmt(tax.account_interest(a)),
        }
        for a in ws.accounts
    ]


def isa_rows(ws: Workspace) -> List[Dict[str, Any]]:
    """Rows of the ISA table."""
    return [
        {
            "id": i.id,
            "name": i.name,
            "type": i.type_label,
            "amount": fmt(i.amount, 0),
            "rate": f"{i.interest_rate:g}%",
            "interest": fmt(tax.account_interest(i)),
        }
        for i in ws.isa_accounts
    ]


def summary_rows(summary: tax.SavingsSummary) -> List[tuple[str, str]]:
    """Label/value pairs of the complete savings summary."""
    calc = summary.calculation
    return [
        ("Taxable Interest (Savings)", fmt(calc.gross_interest)),
        ("Tax-Free Interest (ISAs)", fmt(summary.isa_interest)),
        ("Personal Savings Allowance", fmt(summary.allowance)),
        ("Taxable Interest", fmt(calc.taxable_interest)),
        (f"Tax Owed ({summary.tax_rate * 100:.0f}%)", fmt(calc.tax_owed)),
        ("Net Taxable Interest", fmt(calc.net_interest)),
        ("Total Net Interest (All Accounts)", fmt(summary.total_net_interest)),
        ("Overall Effective Tax Rate", pct(summary.overall_effective_rate)),
    ]


def scenario_card(scenario: Scenario, summary: tax.SavingsSummary) -> Dict[str, Any]:
    """Headline figures for one saved scenario."""
    return {
        "id": scenario.id,
        "name": scenario.name,
        "band": tax.band_label(scenario.tax_band),
        "total_net": fmt(summary.total_net_interest),
        "tax_owed": fmt(summary.calculation.tax_owed),
        "accounts": f"{len(scenario.accounts)} Savings, {len(scenario.isa_accounts)} ISAs",
        "saved_at": scenario.saved_at.strftime("%d %b %Y %H:%M"),
    }


COMPARISON_METRICS = [
    "Tax Band",
    "Taxable Interest",
    "Tax-Free Interest (ISAs)",
    "Tax Owed",
    "Total Net Interest",
    "Effective Tax Rate",
]


def comparison_table(ws: Workspace) -> Dict[str, Any]:
    """Metric-by-scenario table for the selected scenarios.

    Returns
    -------
    dict
        ``'headers'``: scenario names in selection order.
        ``'rows'``: ``(metric, [value per scenario])`` pairs.
    """
    compared = ws.store.comparison()
    columns = []
    for scenario, s in compared:
        columns.append([
            tax.band_label(scenario.tax_band),
            fmt(s.calculation.gross_interest),
            fmt(s.isa_interest),
            fmt(s.calculation.tax_owed),
            fmt(s.total_net_interest),
            pct(s.overall_effective_rate),
        ])
    rows = [
        (metric, [col[i] for col in columns])
        for i, metric in enumerate(COMPARISON_METRICS)
    ]
    return {"headers": [sc.name for sc, _ in compared], "rows": rows}


# ═══════════════════════════════════════════════════════════════════
# Input collection (CLI)
# ═══════════════════════════════════════════════════════════════════

def _prompt(label: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    raw = input(f"  {label}{suffix}: ").strip()
    return raw or default


def _prompt_amount(label: str) -> Optional[str]:
    """Prompt until a valid amount is entered; blank cancels."""
    while True:
        raw = _prompt(label)
        if not raw:
            return None
        if parse_amount(raw) is not None:
            print(f"    = £{normalise_currency_display(raw)}")
            return raw
        print("    Invalid amount, try again.")


def _prompt_rate(label: str) -> Optional[str]:
    while True:
        raw = _prompt(label)
        if not raw:
            return None
        if parse_rate(raw) is not None:
            return raw
        print("    Invalid rate, try again.")


def _prompt_choice(label: str, options: list[str], default: str) -> str:
    opts = "/".join(options)
    while True:
        raw = input(f"  {label} ({opts}) [{default}]: ").strip().lower()
        if not raw:
            return default
        if raw in options:
            return raw
        print(f"    Choose from: {opts}")


def _pick(label: str, items: List[Any], describe) -> Optional[Any]:
    """Let the user pick one item by its 1-based number."""
    if not items:
        print("    Nothing to choose from.")
        return None
    for n, item in enumerate(items, 1):
        print(f"    {n}. {describe(item)}")
    raw = _prompt(label)
    try:
        idx = int(raw)
    except ValueError:
        return None
    if 1 <= idx <= len(items):
        return items[idx - 1]
    return None


# ═══════════════════════════════════════════════════════════════════
# Box-drawing CLI output
# ═══════════════════════════════════════════════════════════════════

W = 78  # box width (characters)


def _box_top(title: str) -> str:
    inner = W - 2
    bar = "═" * inner
    return (
        f"╔{bar}╗\n"
        f"║  {title:<{inner - 2}}║\n"
        f"╠{bar}╣"
    )


def _box_line(text: str = "") -> str:
    inner = W - 4
    if len(text) > inner:
        text = text[:inner]
    return f"║  {text:<{inner}}║"


def _box_row(label: str, value: str, lw: int = 38) -> str:
    return _box_line(f"{label:<{lw}}{value}")


def _box_bottom() -> str:
    return f"╚{'═' * (W - 2)}╝"


def _print_section(title: str, rows: List[str]) -> None:
    """Print a titled box with content rows."""
    print(_box_top(title))
    for r in rows:
        print(r)
    print(_box_bottom())
    print()


# ═══════════════════════════════════════════════════════════════════
# CLI Section Printers
# ═══════════════════════════════════════════════════════════════════

def _print_accounts(ws: Workspace) -> None:
    rows = []
    band = ws.tax_band
    rows.append(_box_row(
        "Tax band",
        f"{tax.band_label(band)} ({tax.tax_rate(band) * 100:.0f}%) - "
        f"{fmt(tax.savings_allowance(band), 0)} allowance",
    ))
    rows.append(_box_line())

    rows.append(_box_line("Savings accounts"))
    if not ws.accounts:
        rows.append(_box_line("  No accounts added yet"))
    for r in account_rows(ws):
        rows.append(_box_line(f"  {r['name'][:24]:<24}{r['amount']:>14}{r['rate']:>9}{r['interest']:>14}"))
    rows.append(_box_line())

    rows.append(_box_line("ISA accounts (tax-free)"))
    if not ws.isa_accounts:
        rows.append(_box_line("  No ISAs added yet"))
    for r in isa_rows(ws):
        rows.append(_box_line(f"  {r['name'][:16]:<16}{r['type'][:8]:<8}{r['amount']:>14}{r['rate']:>9}{r['interest']:>14}"))

    _print_section(f"YOUR ACCOUNTS ({cfg.TAX_YEAR})", rows)


def _print_summary(ws: Workspace) -> None:
    if not ws.has_accounts:
        print("  Add an account to see your savings summary.\n")
        return
    rows = [_box_row(label, value) for label, value in summary_rows(ws.summary)]
    _print_section("COMPLETE SAVINGS SUMMARY", rows)


def _print_scenarios(ws: Workspace) -> None:
    if not len(ws.store):
        print("  No saved scenarios.\n")
        return
    rows = []
    selected = ws.store.selected
    for scenario, summary in ws.store.recompute_all():
        card = scenario_card(scenario, summary)
        mark = "[x]" if scenario.id in selected else "[ ]"
        rows.append(_box_line(f"{mark} {card['name']}  ({card['saved_at']})"))
        rows.append(_box_row("    Tax band", card["band"]))
        rows.append(_box_row("    Total net interest", card["total_net"]))
        rows.append(_box_row("    Tax owed", card["tax_owed"]))
        rows.append(_box_row("    Accounts", card["accounts"]))
        rows.append(_box_line())
    _print_section("SAVED SCENARIOS", rows[:-1])


def _print_comparison(ws: Workspace) -> None:
    table = comparison_table(ws)
    if not table["headers"]:
        print(f"  Select up to {cfg.MAX_COMPARE_SCENARIOS} scenarios to compare.\n")
        return
    lw = 26
    cw = (W - 6 - lw) // len(table["headers"])
    rows = [_box_line(f"{'Metric':<{lw}}" + "".join(f"{h[:cw - 1]:>{cw}}" for h in table["headers"]))]
    rows.append(_box_line("─" * (W - 6)))
    for metric, values in table["rows"]:
        rows.append(_box_line(f"{metric:<{lw}}" + "".join(f"{v:>{cw}}" for v in values)))
    _print_section("SCENARIO COMPARISON", rows)


# ═══════════════════════════════════════════════════════════════════
# Menu actions
# ═══════════════════════════════════════════════════════════════════

def _set_band(ws: Workspace) -> None:
    ws.set_band(_prompt_choice("Tax band", list(cfg.TAX_BANDS), ws.tax_band))


def _add_account(ws: Workspace) -> None:
    name = _prompt("Account name")
    amount = _prompt_amount("Amount (£)")
    rate = _prompt_rate("Interest rate (%)")
    if ws.add_account(name, amount or "", rate or "") is None:
        print("    Account not added.")


def _add_isa(ws: Workspace) -> None:
    name = _prompt("ISA name")
    amount = _prompt_amount("Amount (£)")
    rate = _prompt_rate("Interest rate (%)")
    isa_type = _prompt_choice("ISA type", list(cfg.ISA_TYPES), cfg.DEFAULT_ISA_TYPE)
    if ws.add_isa(name, amount or "", rate or "", isa_type) is None:
        print("    ISA not added.")


def _remove_account(ws: Workspace) -> None:
    a = _pick("Remove account #", ws.accounts, lambda a: a.name)
    if a is not None:
        ws.remove_account(a.id)


def _remove_isa(ws: Workspace) -> None:
    i = _pick("Remove ISA #", ws.isa_accounts, lambda i: i.name)
    if i is not None:
        ws.remove_isa(i.id)


def _save_scenario(ws: Workspace) -> None:
    if not ws.has_accounts:
        print("    Add an account before saving a scenario.")
        return
    if ws.save_scenario(_prompt("Scenario name")) is None:
        print("    Scenario not saved.")


def _load_scenario(ws: Workspace) -> None:
    s = _pick("Load scenario #", ws.store.scenarios, lambda s: s.name)
    if s is not None:
        ws.load_scenario(s.id)


def _delete_scenario(ws: Workspace) -> None:
    s = _pick("Delete scenario #", ws.store.scenarios, lambda s: s.name)
    if s is not None:
        ws.delete_scenario(s.id)


def _toggle_selection(ws: Workspace) -> None:
    selected = ws.store.selected

    def describe(s: Scenario) -> str:
        if s.id in selected:
            return f"[x] {s.name}"
        return f"[ ] {s.name}" if ws.store.can_select(s.id) else f"[-] {s.name}"

    s = _pick("Toggle scenario #", ws.store.scenarios, describe)
    if s is not None:
        ws.toggle_selection(s.id)


def _write_report(ws: Workspace) -> None:
    compared = ws.store.comparison() or ws.store.recompute_all()
    if not compared:
        print("    Save a scenario first.")
        return
    path = report.generate_pdf(compared, cfg.REPORT_PATH)
    print(f"    Saved to {path}")


MENU = [
    ("b", "Set tax band", _set_band),
    ("a", "Add savings account", _add_account),
    ("i", "Add ISA", _add_isa),
    ("r", "Remove savings account", _remove_account),
    ("x", "Remove ISA", _remove_isa),
    ("s", "Save scenario", _save_scenario),
    ("l", "Load scenario", _load_scenario),
    ("d", "Delete scenario", _delete_scenario),
    ("c", "Select scenarios to compare", _toggle_selection),
    ("p", "Write PDF report", _write_report),
]


def _print_menu() -> None:
    for key, label, _ in MENU:
        print(f"  {key}) {label}")
    print("  q) Quit")


# ═══════════════════════════════════════════════════════════════════
# Main CLI entry point
# ═══════════════════════════════════════════════════════════════════

def run_cli(ws: Optional[Workspace] = None) -> Workspace:
    """Run the interactive menu until the user quits."""
    # Ensure box-drawing characters render on Windows
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except (AttributeError, OSError):
        pass
    ws = ws if ws is not None else Workspace()
    actions = {key: action for key, _, action in MENU}

    print()
    print("=" * W)
    print("  UK Savings Tax Calculator")
    print("=" * W)

    while True:
        print()
        _print_accounts(ws)
        _print_summary(ws)
        _print_scenarios(ws)
        if ws.store.selected:
            _print_comparison(ws)
        _print_menu()
        try:
            choice = input("\n  > ").strip().lower()
        except EOFError:
            break
        if choice == "q":
            break
        action = actions.get(choice)
        if action is None:
            print("    Unknown option.")
            continue
        action(ws)

    return ws


if __name__ == "__main__":
    run_cli()
