"""
UK Savings Tax Constants.

All monetary values in GBP. Personal Savings Allowance table for the
2024/25 tax year. Runtime settings (web server, report path, logging)
can be overridden through environment variables.
"""

import os

# ── General ──────────────────────────────────────────────────────────
TAX_YEAR = "2024/25"

# ── Personal Savings Allowance ───────────────────────────────────────
# band -> (allowance, rate on interest above the allowance)
TAX_BANDS = {
    "basic": (1_000, 0.20),
    "higher": (500, 0.40),
    "additional": (0, 0.45),
}

BAND_LABELS = {
    "basic": "Basic Rate",
    "higher": "Higher Rate",
    "additional": "Additional Rate",
}

DEFAULT_TAX_BAND = "basic"

# ── ISA ──────────────────────────────────────────────────────────────
ISA_TYPES = {
    "cash": "Cash ISA",
    "stocks": "Stocks & Shares ISA",
}

DEFAULT_ISA_TYPE = "cash"

# ── Scenario comparison ──────────────────────────────────────────────
MAX_COMPARE_SCENARIOS = 3

# ── Runtime settings ─────────────────────────────────────────────────
WEB_HOST = os.getenv("SAVINGS_TAX_HOST", "127.0.0.1")
WEB_PORT = int(os.getenv("SAVINGS_TAX_PORT", "5000"))
REPORT_PATH = os.getenv("SAVINGS_TAX_REPORT", "savings_tax_report.pdf")
LOG_LEVEL = os.getenv("SAVINGS_TAX_LOG_LEVEL", "WARNING").upper()
