"""
Flask web application for the UK savings tax calculator.

Single-file app using render_template_string over one in-memory
``Workspace``. Run via ``python main.py`` which starts the dev server
on localhost:5000.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, redirect, render_template_string, request, send_file, url_for

import config as cfg
import tax
from accounts import format_currency_input, normalise_currency_display
from cli import (
    account_rows,
    comparison_table,
    fmt,
    isa_rows,
    scenario_card,
    summary_rows,
)
from scenarios import Workspace
import report

logger = logging.getLogger(__name__)

app = Flask(__name__)

# One user, one session: state lives for the lifetime of the process.
workspace = Workspace()

# ═══════════════════════════════════════════════════════════════════
# HTML Template
# ═══════════════════════════════════════════════════════════════════

HTML_TEMPLATE = r"""
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>UK Savings Tax Calculator</title>
<style>
  *{margin:0;padding:0;box-sizing:border-box}
  :root{
    --bg-deep:#050816;
    --bg-surface:rgba(15,23,42,0.55);
    --bg-input:rgba(8,11,22,0.85);
    --border-subtle:rgba(99,102,241,0.1);
    --text-primary:#f1f5f9;
    --text-secondary:#94a3b8;
    --indigo:#818cf8;
    --indigo-deep:#6366f1;
    --violet:#8b5cf6;
    --emerald:#34d399;
    --red:#f87171;
    --radius-lg:16px;
    --radius-md:10px;
  }
  body{
    background:var(--bg-deep);color:var(--text-primary);
    font-family:'Inter',system-ui,-apple-system,sans-serif;line-height:1.6;
  }
  .container{max-width:1040px;margin:0 auto;padding:2rem 1.5rem}
  .hero{text-align:center;padding:1rem 0 2rem}
  .hero h1{font-size:2rem;font-weight:800;letter-spacing:-.03em}
  .hero-sub{color:var(--text-secondary);font-size:.92rem}
  .card{
    background:var(--bg-surface);border:1px solid var(--border-subtle);
    border-radius:var(--radius-lg);padding:1.5rem;margin-bottom:1.2rem;
  }
  h2{font-size:1.05rem;font-weight:700;margin-bottom:1rem}
  h3{font-size:.95rem;font-weight:700}
  .form-row{display:flex;flex-wrap:wrap;gap:.6rem}
  .form-row input,.form-row select{
    background:var(--bg-input);border:1px solid rgba(71,85,105,.35);
    border-radius:var(--radius-md);color:var(--text-primary);
    padding:.5rem .75rem;font-size:.88rem;font-family:inherit;
  }
  .btn{
    padding:.5rem 1.2rem;border:none;border-radius:var(--radius-md);
    font-size:.86rem;font-weight:600;cursor:pointer;font-family:inherit;
    background:linear-gradient(135deg,var(--indigo-deep),var(--violet));color:#fff;
  }
  .btn:disabled{opacity:.4;cursor:not-allowed}
  .btn-danger{background:rgba(248,113,113,.15);color:var(--red)}
  .btn-link{background:none;color:var(--indigo);padding:.2rem .4rem}
  .inline{display:inline}
  .band-options label{display:block;margin:.2rem 0;font-size:.9rem}
  table{width:100%;border-collapse:collapse;font-size:.86rem}
  th{text-align:left;padding:.55rem .7rem;color:var(--text-secondary);font-size:.75rem;
     text-transform:uppercase;letter-spacing:.05em;border-bottom:1px solid rgba(51,65,85,.3)}
  td{padding:.5rem .7rem;border-bottom:1px solid rgba(51,65,85,.15)}
  .empty{color:var(--text-secondary);font-size:.88rem}
  .stat-row{display:flex;justify-content:space-between;padding:.45rem 0;
            border-bottom:1px solid rgba(51,65,85,.3)}
  .stat-row:last-child{border-bottom:none}
  .stat-label{color:var(--text-secondary);font-size:.86rem}
  .stat-value{font-weight:600;font-size:.86rem;font-variant-numeric:tabular-nums}
  .stat-row.total .stat-value{color:var(--emerald)}
  .scenario-grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(280px,1fr));gap:1rem}
  .scenario-card{border:1px solid rgba(51,65,85,.3);border-radius:var(--radius-md);padding:1rem}
  .scenario-header{display:flex;justify-content:space-between;align-items:center;margin-bottom:.5rem}
  .scenarios-header{display:flex;justify-content:space-between;align-items:center}
  .chart-img{width:100%;border-radius:var(--radius-md);margin-top:1rem}
</style>
</head>
<body>
<div class="container">

<div class="hero">
  <h1>UK Savings Tax Calculator</h1>
  <p class="hero-sub">Calculate your savings interest and tax liability with the Personal Savings Allowance ({{ tax_year }})</p>
</div>

<div class="card">
  <h2>Tax Band</h2>
  <form method="POST" action="{{ url_for('set_band') }}" class="band-options">
    {% for key, label in bands %}
    <label>
      <input type="radio" name="band" value="{{ key }}" {{ 'checked' if key == ws.tax_band }} onchange="this.form.submit()">
      {{ label }}
    </label>
    {% endfor %}
    <noscript><button class="btn" type="submit">Set band</button></noscript>
  </form>
</div>

<div class="card">
  <h2>Add Savings Account</h2>
  <form method="POST" action="{{ url_for('add_account') }}" class="form-row">
    <input type="text" name="name" placeholder="Account name" value="{{ form.get('name', '') }}">
    <input type="text" name="amount" placeholder="Amount (£)" value="{{ form.get('amount', '') }}">
    <input type="text" name="interest_rate" placeholder="Interest rate (%)" value="{{ form.get('interest_rate', '') }}">
    <button class="btn" type="submit">Add Account</button>
  </form>
</div>

<div class="card">
  <h2>Your Savings Accounts</h2>
  {% if accounts %}
  <table>
    <thead><tr><th>Account Name</th><th>Amount</th><th>Interest Rate</th><th>Annual Interest</th><th>Action</th></tr></thead>
    <tbody>
    {% for a in accounts %}
      <tr>
        <td>{{ a.name }}</td><td>{{ a.amount }}</td><td>{{ a.rate }}</td><td>{{ a.interest }}</td>
        <td><form method="POST" action="{{ url_for('remove_account', account_id=a.id) }}" class="inline">
          <button class="btn btn-danger" type="submit">Remove</button></form></td>
      </tr>
    {% endfor %}
    </tbody>
  </table>
  {% else %}
  <p class="empty">No accounts added yet</p>
  {% endif %}
</div>

<div class="card">
  <h2>Add ISA Account</h2>
  <form method="POST" action="{{ url_for('add_isa') }}" class="form-row">
    <input type="text" name="name" placeholder="ISA name" value="{{ isa_form.get('name', '') }}">
    <input type="text" name="amount" placeholder="Amount (£)" value="{{ isa_form.get('amount', '') }}">
    <input type="text" name="interest_rate" placeholder="Interest rate (%)" value="{{ isa_form.get('interest_rate', '') }}">
    <select name="isa_type">
      {% for key, label in isa_types %}
      <option value="{{ key }}" {{ 'selected' if key == isa_form.get('isa_type') }}>{{ label }}</option>
      {% endfor %}
    </select>
    <button class="btn" type="submit">Add ISA</button>
  </form>
</div>

<div class="card">
  <h2>Your ISA Accounts (Tax-Free)</h2>
  {% if isas %}
  <table>
    <thead><tr><th>ISA Name</th><th>Type</th><th>Amount</th><th>Interest Rate</th><th>Annual Interest</th><th>Action</th></tr></thead>
    <tbody>
    {% for i in isas %}
      <tr>
        <td>{{ i.name }}</td><td>{{ i.type }}</td><td>{{ i.amount }}</td><td>{{ i.rate }}</td><td>{{ i.interest }}</td>
        <td><form method="POST" action="{{ url_for('remove_isa', isa_id=i.id) }}" class="inline">
          <button class="btn btn-danger" type="submit">Remove</button></form></td>
      </tr>
    {% endfor %}
    </tbody>
  </table>
  {% else %}
  <p class="empty">No ISAs added yet</p>
  {% endif %}
</div>

{% if ws.has_accounts %}
<div class="card">
  <h2>Complete Savings Summary</h2>
  {% for label, value in summary %}
  <div class="stat-row {{ 'total' if label.startswith('Total') }}">
    <span class="stat-label">{{ label }}:</span><span class="stat-value">{{ value }}</span>
  </div>
  {% endfor %}
</div>

<div class="card">
  <h2>Save Current Scenario</h2>
  <form method="POST" action="{{ url_for('save_scenario') }}" class="form-row">
    <input type="text" name="scenario_name" placeholder="Scenario name (e.g., 'Current Setup', 'Max ISA Strategy')" size="48" required pattern=".*\S.*" title="Enter a scenario name">
    <button class="btn" type="submit">Save Scenario</button>
  </form>
</div>
{% endif %}

{% if cards %}
<div class="card">
  <div class="scenarios-header">
    <h2>Saved Scenarios</h2>
    <form method="POST" action="{{ url_for('toggle_comparison') }}" class="inline">
      <button class="btn" type="submit">{{ 'Hide Comparison' if ws.show_comparison else 'Compare Scenarios' }}</button>
    </form>
  </div>

  {% if not ws.show_comparison %}
  <div class="scenario-grid">
    {% for c in cards %}
    <div class="scenario-card">
      <div class="scenario-header">
        <h3>{{ c.name }}</h3>
        <div>
          <form method="POST" action="{{ url_for('load_scenario', scenario_id=c.id) }}" class="inline">
            <button class="btn btn-link" type="submit">Load</button></form>
          <form method="POST" action="{{ url_for('delete_scenario', scenario_id=c.id) }}" class="inline">
            <button class="btn btn-danger" type="submit">Delete</button></form>
        </div>
      </div>
      <div class="stat-row"><span class="stat-label">Tax Band:</span><span class="stat-value">{{ c.band }}</span></div>
      <div class="stat-row"><span class="stat-label">Total Net Interest:</span><span class="stat-value">{{ c.total_net }}</span></div>
      <div class="stat-row"><span class="stat-label">Tax Owed:</span><span class="stat-value">{{ c.tax_owed }}</span></div>
      <div class="stat-row"><span class="stat-label">Accounts:</span><span class="stat-value">{{ c.accounts }}</span></div>
      <div class="stat-row"><span class="stat-label">Saved:</span><span class="stat-value">{{ c.saved_at }}</span></div>
    </div>
    {% endfor %}
  </div>
  {% else %}
  <h3>Select up to {{ max_compare }} scenarios to compare:</h3>
  {% for c in cards %}
  <form method="POST" action="{{ url_for('toggle_selection', scenario_id=c.id) }}" class="inline">
    <button class="btn btn-link" type="submit" {{ 'disabled' if not c.can_select }}>
      {{ '[x]' if c.selected else '[ ]' }} {{ c.name }}
    </button>
  </form>
  {% endfor %}

  {% if table.headers %}
  <table style="margin-top:1rem">
    <thead><tr><th>Metric</th>{% for h in table.headers %}<th>{{ h }}</th>{% endfor %}</tr></thead>
    <tbody>
    {% for metric, values in table.rows %}
      <tr><td><strong>{{ metric }}</strong></td>{% for v in values %}<td>{{ v }}</td>{% endfor %}</tr>
    {% endfor %}
    </tbody>
  </table>
  {% for chart in charts %}
  <img class="chart-img" src="data:image/png;base64,{{ chart }}" alt="Scenario comparison chart">
  {% endfor %}
  <p style="margin-top:1rem"><a href="{{ url_for('download_pdf') }}" class="btn">Download PDF Report</a></p>
  {% endif %}
  {% endif %}
</div>
{% endif %}

</div>
</body>
</html>
"""


# ═══════════════════════════════════════════════════════════════════
# Rendering
# ═══════════════════════════════════════════════════════════════════

def _band_options() -> list[tuple[str, str]]:
    return [
        (band, f"{tax.band_label(band)} ({tax.tax_rate(band) * 100:.0f}%) - "
               f"{fmt(tax.savings_allowance(band), 0)} allowance")
        for band in cfg.TAX_BANDS
    ]


def _render(
    form: Optional[Dict[str, Any]] = None,
    isa_form: Optional[Dict[str, Any]] = None,
):
    ws = workspace
    selected = ws.store.selected
    cards = []
    for scenario, summary in ws.store.recompute_all():
        card = scenario_card(scenario, summary)
        card["selected"] = scenario.id in selected
        card["can_select"] = ws.store.can_select(scenario.id)
        cards.append(card)

    table = comparison_table(ws)
    charts = []
    if ws.show_comparison and table["headers"]:
        charts = report.get_web_charts(ws.store.comparison())

    return render_template_string(
        HTML_TEMPLATE,
        ws=ws,
        tax_year=cfg.TAX_YEAR,
        bands=_band_options(),
        isa_types=list(cfg.ISA_TYPES.items()),
        max_compare=cfg.MAX_COMPARE_SCENARIOS,
        form=form or {},
        isa_form=isa_form or {"isa_type": cfg.DEFAULT_ISA_TYPE},
        accounts=account_rows(ws),
        isas=isa_rows(ws),
        summary=summary_rows(ws.summary),
        cards=cards,
        table=table,
        charts=charts,
    )


def _refused_form(form: Dict[str, Any]) -> Dict[str, Any]:
    """Echo a refused form back with the amount tidied for display."""
    echoed = dict(form)
    echoed["amount"] = normalise_currency_display(format_currency_input(form.get("amount", "")))
    return echoed


def _home():
    return redirect(url_for("index"))


# ═══════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════

@app.route("/", methods=["GET"])
def index():
    return _render()


@app.route("/band", methods=["POST"])
def set_band():
    band = request.form.get("band", "")
    if band in cfg.TAX_BANDS:
        workspace.set_band(band)
    return _home()


@app.route("/accounts", methods=["POST"])
def add_account():
    form = request.form.to_dict()
    account = workspace.add_account(
        form.get("name", ""), form.get("amount", ""), form.get("interest_rate", ""),
    )
    if account is None:
        return _render(form=_refused_form(form))
    return _home()


@app.route("/accounts/<account_id>/remove", methods=["POST"])
def remove_account(account_id: str):
    workspace.remove_account(account_id)
    return _home()


@app.route("/isas", methods=["POST"])
def add_isa():
    form = request.form.to_dict()
    isa = workspace.add_isa(
        form.get("name", ""),
        form.get("amount", ""),
        form.get("interest_rate", ""),
        form.get("isa_type", cfg.DEFAULT_ISA_TYPE),
    )
    if isa is None:
        return _render(isa_form=_refused_form(form))
    return _home()


@app.route("/isas/<isa_id>/remove", methods=["POST"])
def remove_isa(isa_id: str):
    workspace.remove_isa(isa_id)
    return _home()


@app.route("/scenarios", methods=["POST"])
def save_scenario():
    if workspace.has_accounts:
        workspace.save_scenario(request.form.get("scenario_name", ""))
    return _home()


@app.route("/scenarios/<scenario_id>/load", methods=["POST"])
def load_scenario(scenario_id: str):
    workspace.load_scenario(scenario_id)
    return _home()


@app.route("/scenarios/<scenario_id>/delete", methods=["POST"])
def delete_scenario(scenario_id: str):
    workspace.delete_scenario(scenario_id)
    return _home()


@app.route("/scenarios/<scenario_id>/toggle", methods=["POST"])
def toggle_selection(scenario_id: str):
    workspace.toggle_selection(scenario_id)
    return _home()


@app.route("/compare", methods=["POST"])
def toggle_comparison():
    workspace.toggle_comparison()
    return _home()


@app.route("/download-pdf")
def download_pdf():
    compared = workspace.store.comparison()
    if not compared:
        return "No scenarios selected. Select scenarios to compare first.", 404
    path = report.generate_pdf(compared, os.path.abspath(cfg.REPORT_PATH))
    logger.info("Wrote comparison report to %s", path)
    return send_file(path, as_attachment=True, download_name="savings_tax_report.pdf")


# ═══════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════

LOOPBACK_HOSTS = ("127.0.0.1", "localhost", "::1")


def run_web(debug: bool = False) -> None:
    """Start the Flask development server and open browser.

    The interactive debugger is only allowed on a loopback host.
    """
    import webbrowser
    import threading

    if debug and cfg.WEB_HOST not in LOOPBACK_HOSTS:
        logger.warning("Debug mode disabled: host %s is not loopback", cfg.WEB_HOST)
        debug = False
    url = f"http://{cfg.WEB_HOST}:{cfg.WEB_PORT}"
    print(f"Starting web app at {url}")
    threading.Timer(1.0, lambda: webbrowser.open(url)).start()
    app.run(host=cfg.WEB_HOST, port=cfg.WEB_PORT, debug=debug)


if __name__ == "__main__":
    run_web()
