"""
PDF report generation and reusable chart rendering for the
UK savings tax calculator.

Provides:
  - Scenario comparison PDF report (generate_pdf)
  - Base64-encoded chart images for web embedding (get_web_charts)
"""

from __future__ import annotations

import base64
import io
from typing import List, Sequence, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.ticker import FuncFormatter
import numpy as np

import config as cfg
import tax
from scenarios import Scenario

Compared = Sequence[Tuple[Scenario, tax.SavingsSummary]]

# ═══════════════════════════════════════════════════════════════════
# Style constants
# ═══════════════════════════════════════════════════════════════════

BG = "#0a101f"
CARD = "#131b2e"
TEXT = "#f1f5f9"
TEXT2 = "#cbd5e1"
INDIGO = "#818cf8"
EMERALD = "#34d399"
AMBER = "#fbbf24"
RED = "#f87171"
SLATE = "#94a3b8"
BORDER = "#1e293b"

A4W, A4H = 8.27, 11.69
WEB_W, WEB_H = 10, 6


# ═══════════════════════════════════════════════════════════════════
# Axis formatters
# ═══════════════════════════════════════════════════════════════════

def _gbp_fmt(x, _):
    if abs(x) >= 1e6:
        return f"£{x / 1e6:.1f}M"
    if abs(x) >= 1e3:
        return f"£{x / 1e3:.1f}k"
    return f"£{x:.0f}"


def _pct_fmt(x, _):
    return f"{x:.0f}%"


GBP_FMT = FuncFormatter(_gbp_fmt)
PCT_FMT = FuncFormatter(_pct_fmt)


# ═══════════════════════════════════════════════════════════════════
# Style helpers
# ═══════════════════════════════════════════════════════════════════

def _style(fig, *axes):
    """Apply dark theme to figure and all axes."""
    fig.patch.set_facecolor(BG)
    for ax in axes:
        ax.set_facecolor(CARD)
        ax.tick_params(colors=TEXT, labelsize=8)
        ax.xaxis.label.set_color(TEXT)
        ax.yaxis.label.set_color(TEXT)
        ax.title.set_color(TEXT)
        for spine in ax.spines.values():
            spine.set_color(BORDER)
        ax.grid(True, axis="y", alpha=0.15, color=SLATE)


def _legend(ax, loc="upper left"):
    leg = ax.legend(loc=loc, fontsize=8, facecolor=CARD, edgecolor=BORDER,
                    labelcolor=TEXT)
    return leg


# ═══════════════════════════════════════════════════════════════════
# Charts
# ═══════════════════════════════════════════════════════════════════

def _chart_interest_breakdown(compared: Compared, figsize=(WEB_W, WEB_H)) -> plt.Figure:
    """Grouped bars of interest, tax and net interest per scenario."""
    fig, ax = plt.subplots(figsize=figsize)
    _style(fig, ax)

    names = [s.name for s, _ in compared]
    series = [
        ("Taxable interest", [m.calculation.gross_interest for _, m in compared], INDIGO),
        ("ISA interest", [m.isa_interest for _, m in compared], EMERALD),
        ("Tax owed", [m.calculation.tax_owed for _, m in compared], RED),
        ("Total net interest", [m.total_net_interest for _, m in compared], AMBER),
    ]

    x = np.arange(len(names))
    width = 0.8 / len(series)
    for k, (label, values, color) in enumerate(series):
        offset = (k - (len(series) - 1) / 2) * width
        bars = ax.bar(x + offset, values, width, label=label, color=color, alpha=0.9)
        for bar, v in zip(bars, values):
            if v > 0:
                ax.annotate(_gbp_fmt(v, None), (bar.get_x() + bar.get_width() / 2, v),
                            ha="center", va="bottom", fontsize=6, color=TEXT2,
                            xytext=(0, 2), textcoords="offset points")

    ax.set_xticks(x)
    ax.set_xticklabels(names)
    ax.yaxis.set_major_formatter(GBP_FMT)
    ax.set_ylabel("Annual amount")
    ax.set_title("Annual Interest and Tax by Scenario", fontsize=11, fontweight="bold")
    _legend(ax)
    fig.tight_layout()
    return fig


def _chart_effective_rate(compared: Compared, figsize=(WEB_W, WEB_H - 1)) -> plt.Figure:
    """Overall effective tax rate per scenario against the band rate."""
    fig, ax = plt.subplots(figsize=figsize)
    _style(fig, ax)

    names = [s.name for s, _ in compared]
    effective = [m.overall_effective_rate for _, m in compared]
    band_rates = [m.tax_rate * 100 for _, m in compared]

    x = np.arange(len(names))
    ax.bar(x - 0.2, effective, 0.4, label="Effective rate", color=INDIGO)
    ax.bar(x + 0.2, band_rates, 0.4, label="Band rate", color=SLATE, alpha=0.6)
    for xi, v in zip(x, effective):
        ax.annotate(f"{v:.2f}%", (xi - 0.2, v), ha="center", va="bottom",
                    fontsize=7, color=TEXT2, xytext=(0, 2), textcoords="offset points")

    ax.set_xticks(x)
    ax.set_xticklabels(names)
    ax.yaxis.set_major_formatter(PCT_FMT)
    ax.set_ylim(0, 50)
    ax.set_title("Effective Tax Rate on All Interest", fontsize=11, fontweight="bold")
    _legend(ax, loc="upper right")
    fig.tight_layout()
    return fig


SUMMARY_PER_PAGE = 3  # scenario blocks that fit on one A4 summary page


def _page_summary(compared: Compared, page: int = 1, pages: int = 1) -> plt.Figure:
    """Summary page with a text table of each scenario in *compared*."""
    fig = plt.figure(figsize=(A4W, A4H))
    fig.patch.set_facecolor(BG)

    title = "UK Savings Tax Report"
    if pages > 1:
        title += f" ({page} of {pages})"
    fig.text(0.08, 0.94, title, fontsize=20, color=TEXT,
             fontweight="bold")
    fig.text(0.08, 0.915, f"Personal Savings Allowance, tax year {cfg.TAX_YEAR}",
             fontsize=9, color=SLATE)

    y = 0.86
    for scenario, m in compared:
        calc = m.calculation
        fig.text(0.08, y, scenario.name, fontsize=13, color=INDIGO, fontweight="bold")
        y -= 0.028
        lines = [
            ("Tax band", tax.band_label(scenario.tax_band)),
            ("Accounts", f"{len(scenario.accounts)} savings, {len(scenario.isa_accounts)} ISAs"),
            ("Taxable interest", f"£{calc.gross_interest:,.2f}"),
            ("Tax-free interest (ISAs)", f"£{m.isa_interest:,.2f}"),
            ("Personal Savings Allowance", f"£{m.allowance:,.2f}"),
            ("Tax owed", f"£{calc.tax_owed:,.2f}"),
            ("Total net interest", f"£{m.total_net_interest:,.2f}"),
            ("Effective tax rate", f"{m.overall_effective_rate:.2f}%"),
        ]
        for label, value in lines:
            fig.text(0.10, y, label, fontsize=9, color=TEXT2)
            fig.text(0.60, y, value, fontsize=9, color=TEXT)
            y -= 0.022
        y -= 0.02

    return fig


def _summary_pages(compared: Compared, per_page: int = SUMMARY_PER_PAGE) -> List[plt.Figure]:
    """Split the scenario summary over as many pages as it needs."""
    chunks = [compared[i:i + per_page] for i in range(0, len(compared), per_page)] or [[]]
    return [_page_summary(chunk, n, len(chunks)) for n, chunk in enumerate(chunks, 1)]


# ═══════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════

def figure_to_base64(fig: plt.Figure) -> str:
    """Convert a matplotlib figure to a base64-encoded PNG string."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", facecolor=fig.get_facecolor(),
                dpi=120, bbox_inches="tight")
    buf.seek(0)
    b64 = base64.b64encode(buf.read()).decode()
    buf.close()
    return b64


def generate_pdf(compared: Compared, path: str = cfg.REPORT_PATH) -> str:
    """Generate the comparison PDF report. Returns the file path."""
    pages = _summary_pages(compared) + [
        _chart_interest_breakdown(compared, figsize=(A4W, A4H * 0.5)),
        _chart_effective_rate(compared, figsize=(A4W, A4H * 0.45)),
    ]

    with PdfPages(path) as pdf:
        for fig in pages:
            pdf.savefig(fig, facecolor=fig.get_facecolor())
    for fig in pages:
        plt.close(fig)
    return path


def get_web_charts(compared: Compared) -> List[str]:
    """Return base64-encoded PNG chart images for web embedding.

    Returns 2 charts:
      [0] Interest and tax by scenario  (grouped bar)
      [1] Effective tax rate by scenario
    """
    if not compared:
        return []
    chart_figs = [
        _chart_interest_breakdown(compared),
        _chart_effective_rate(compared),
    ]

    images = [figure_to_base64(f) for f in chart_figs]
    for f in chart_figs:
        plt.close(f)
    return images
