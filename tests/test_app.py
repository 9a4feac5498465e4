"""Tests for the Flask web app."""

from pathlib import Path

import pytest
from flask.testing import FlaskClient

import app as web
import config
from scenarios import Workspace


@pytest.fixture
def ws(monkeypatch: pytest.MonkeyPatch) -> Workspace:
    """Fresh in-memory workspace for each test."""
    fresh = Workspace()
    monkeypatch.setattr(web, "workspace", fresh)
    return fresh


@pytest.fixture
def client(ws: Workspace) -> FlaskClient:
    web.app.config["TESTING"] = True
    return web.app.test_client()


class TestIndex:
    """Tests for the main page."""

    def test_empty_page(self, client: FlaskClient) -> None:
        resp = client.get("/")
        assert resp.status_code == 200
        body = resp.get_data(as_text=True)
        assert "UK Savings Tax Calculator" in body
        assert "No accounts added yet" in body
        assert "Complete Savings Summary" not in body

    def test_summary_shown_with_accounts(self, client: FlaskClient, ws: Workspace) -> None:
        ws.add_account("Easy Saver", "50000", "5")
        body = client.get("/").get_data(as_text=True)
        assert "Complete Savings Summary" in body
        assert "£300.00" in body
        assert "£2,200.00" in body


class TestAccountRoutes:
    """Tests for adding and removing accounts."""

    def test_add_account(self, client: FlaskClient, ws: Workspace) -> None:
        resp = client.post("/accounts", data={"name": "Easy Saver", "amount": "£12,000", "interest_rate": "4.5"})
        assert resp.status_code == 302
        assert len(ws.accounts) == 1
        assert ws.accounts[0].amount == 12_000

    def test_add_account_refused_keeps_form(self, client: FlaskClient, ws: Workspace) -> None:
        resp = client.post("/accounts", data={"name": "", "amount": "12000", "interest_rate": "4"})
        assert resp.status_code == 200
        assert ws.accounts == []
        assert 'value="12,000"' in resp.get_data(as_text=True)

    def test_refused_amount_is_tidied(self, client: FlaskClient, ws: Workspace) -> None:
        resp = client.post("/accounts", data={"name": "", "amount": "1234.50", "interest_rate": "4"})
        assert 'value="1,234.5"' in resp.get_data(as_text=True)

    def test_very_long_amount_refused(self, client: FlaskClient, ws: Workspace) -> None:
        resp = client.post("/accounts", data={"name": "", "amount": "9" * 5000, "interest_rate": "4"})
        assert resp.status_code == 200
        assert ws.accounts == []

    def test_remove_account(self, client: FlaskClient, ws: Workspace) -> None:
        account = ws.add_account("Easy Saver", "1000", "4")
        client.post(f"/accounts/{account.id}/remove")
        assert ws.accounts == []

    def test_add_and_remove_isa(self, client: FlaskClient, ws: Workspace) -> None:
        client.post("/isas", data={"name": "Vanguard", "amount": "20000", "interest_rate": "6", "isa_type": "stocks"})
        assert ws.isa_accounts[0].isa_type == "stocks"
        client.post(f"/isas/{ws.isa_accounts[0].id}/remove")
        assert ws.isa_accounts == []

    def test_set_band(self, client: FlaskClient, ws: Workspace) -> None:
        client.post("/band", data={"band": "additional"})
        assert ws.tax_band == "additional"
        client.post("/band", data={"band": "bogus"})
        assert ws.tax_band == "additional"


class TestScenarioRoutes:
    """Tests for saving, loading, deleting and comparing scenarios."""

    def test_save_requires_accounts_and_name(self, client: FlaskClient, ws: Workspace) -> None:
        client.post("/scenarios", data={"scenario_name": "Empty"})
        assert len(ws.store) == 0
        ws.add_account("Easy Saver", "1000", "4")
        client.post("/scenarios", data={"scenario_name": "   "})
        assert len(ws.store) == 0
        client.post("/scenarios", data={"scenario_name": "Current"})
        assert [s.name for s in ws.store.scenarios] == ["Current"]

    def test_scenario_name_input_required(self, client: FlaskClient, ws: Workspace) -> None:
        ws.add_account("Easy Saver", "1000", "4")
        body = client.get("/").get_data(as_text=True)
        line = next(l for l in body.splitlines() if 'name="scenario_name"' in l)
        assert " required" in line
        assert 'pattern=".*\\S.*"' in line

    def test_load_and_delete(self, client: FlaskClient, ws: Workspace) -> None:
        ws.add_account("Easy Saver", "1000", "4")
        scenario = ws.save_scenario("Current")
        ws.set_band("higher")
        ws.accounts = []

        client.post(f"/scenarios/{scenario.id}/load")
        assert ws.tax_band == "basic"
        assert len(ws.accounts) == 1

        client.post(f"/scenarios/{scenario.id}/delete")
        assert len(ws.store) == 0

    def test_comparison_view(self, client: FlaskClient, ws: Workspace) -> None:
        ws.add_account("Easy Saver", "50000", "5")
        basic = ws.save_scenario("Basic Plan")
        ws.set_band("additional")
        additional = ws.save_scenario("Additional Plan")

        client.post("/compare")
        client.post(f"/scenarios/{basic.id}/toggle")
        client.post(f"/scenarios/{additional.id}/toggle")
        assert ws.store.selected == [basic.id, additional.id]

        body = client.get("/").get_data(as_text=True)
        assert "Hide Comparison" in body
        assert "Effective Tax Rate" in body
        assert "£1,125.00" in body
        assert "data:image/png;base64," in body

    def test_fourth_selection_refused(self, client: FlaskClient, ws: Workspace) -> None:
        ws.add_account("Easy Saver", "1000", "4")
        ids = [ws.save_scenario(f"S{n}").id for n in range(4)]
        for sid in ids:
            client.post(f"/scenarios/{sid}/toggle")
        assert ws.store.selected == ids[:3]

    def test_download_pdf(
        self, client: FlaskClient, ws: Workspace, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        assert client.get("/download-pdf").status_code == 404

        monkeypatch.setattr(config, "REPORT_PATH", str(tmp_path / "report.pdf"))
        ws.add_account("Easy Saver", "50000", "5")
        ws.toggle_selection(ws.save_scenario("Current").id)
        resp = client.get("/download-pdf")
        assert resp.status_code == 200
        assert resp.data.startswith(b"%PDF")
        resp.close()


class _NoTimer:
    def __init__(self, interval, function) -> None:
        pass

    def start(self) -> None:
        pass


class TestRunWeb:
    """Tests for the development server entry point."""

    @pytest.fixture
    def run_kwargs(self, monkeypatch: pytest.MonkeyPatch) -> dict:
        captured: dict = {}
        monkeypatch.setattr(web.app, "run", lambda **kwargs: captured.update(kwargs))
        monkeypatch.setattr("webbrowser.open", lambda url: None)
        monkeypatch.setattr("threading.Timer", _NoTimer)
        return captured

    def test_debug_off_by_default(self, run_kwargs: dict) -> None:
        web.run_web()
        assert run_kwargs["debug"] is False

    def test_debug_on_loopback(self, run_kwargs: dict, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "WEB_HOST", "127.0.0.1")
        web.run_web(debug=True)
        assert run_kwargs["debug"] is True

    def test_debug_refused_on_public_host(self, run_kwargs: dict, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "WEB_HOST", "0.0.0.0")
        web.run_web(debug=True)
        assert run_kwargs == {"host": "0.0.0.0", "port": config.WEB_PORT, "debug": False}
