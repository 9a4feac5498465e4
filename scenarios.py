"""
Named scenarios of account configuration and the live workspace.

A ``Scenario`` is an immutable snapshot of a tax band and both account
lists. ``ScenarioStore`` keeps scenarios in memory for the lifetime of
the process and tracks up to three of them selected for comparison.
``Workspace`` is the single live session the CLI and web app drive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import config as cfg
import tax
from accounts import Account, IsaAccount, make_account, make_isa, new_id

logger = logging.getLogger(__name__)


# ─── Data Classes ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Scenario:
    """A saved snapshot of band and accounts."""

    name: str
    tax_band: str
    accounts: Tuple[Account, ...]
    isa_accounts: Tuple[IsaAccount, ...]
    id: str = field(default_factory=new_id)
    saved_at: datetime = field(default_factory=datetime.now)

    @property
    def summary(self) -> tax.SavingsSummary:
        return tax.summarise(self.tax_band, self.accounts, self.isa_accounts)


@dataclass
class WorkingState:
    """Band and account lists restored from a scenario."""

    tax_band: str
    accounts: List[Account]
    isa_accounts: List[IsaAccount]


# ─── Scenario Store ──────────────────────────────────────────────────

class ScenarioStore:
    """In-memory scenarios in save order, plus the comparison selection."""

    def __init__(self, max_selected: int = cfg.MAX_COMPARE_SCENARIOS) -> None:
        self._scenarios: Dict[str, Scenario] = {}
        self._selected: List[str] = []
        self.max_selected = max_selected

    def __len__(self) -> int:
        return len(self._scenarios)

    def __iter__(self) -> Iterator[Scenario]:
        return iter(list(self._scenarios.values()))

    @property
    def scenarios(self) -> List[Scenario]:
        return list(self._scenarios.values())

    @property
    def selected(self) -> List[str]:
        return list(self._selected)

    def get(self, scenario_id: str) -> Optional[Scenario]:
        return self._scenarios.get(scenario_id)

    def save(
        self,
        name: str,
        band: str,
        accounts: Sequence[Account],
        isa_accounts: Sequence[IsaAccount],
    ) -> Optional[Scenario]:
        """Snapshot the given state under *name*.

        Blank names are refused and ``None`` is returned. The account
        lists are copied so later changes to the caller's lists never
        reach the saved scenario.
        """
        name = (name or "").strip()
        if not name:
            logger.debug("Refused to save scenario with a blank name")
            return None
        tax.validate_band(band)

        scenario = Scenario(
            name=name,
            tax_band=band,
            accounts=tuple(accounts),
            isa_accounts=tuple(isa_accounts),
        )
        self._scenarios[scenario.id] = scenario
        logger.info("Saved scenario %r (%s)", scenario.name, scenario.id)
        return scenario

    def load(self, scenario_id: str) -> Optional[WorkingState]:
        """Return copies of a scenario's band and accounts.

        The scenario itself stays in the store unchanged.
        """
        scenario = self._scenarios.get(scenario_id)
        if scenario is None:
            return None
        logger.info("Loaded scenario %r (%s)", scenario.name, scenario.id)
        return WorkingState(
            tax_band=scenario.tax_band,
            accounts=list(scenario.accounts),
            isa_accounts=list(scenario.isa_accounts),
        )

    def delete(self, scenario_id: str) -> bool:
        """Remove a scenario and drop it from the comparison selection."""
        scenario = self._scenarios.pop(scenario_id, None)
        self._selected = [s for s in self._selected if s != scenario_id]
        if scenario is None:
            return False
        logger.info("Deleted scenario %r (%s)", scenario.name, scenario.id)
        return True

    def can_select(self, scenario_id: str) -> bool:
        """True if toggling *scenario_id* would change the selection."""
        if scenario_id in self._selected:
            return True
        return scenario_id in self._scenarios and len(self._selected) < self.max_selected

    def toggle_select(self, scenario_id: str) -> bool:
        """Select or deselect a scenario for comparison.

        Selecting beyond the limit is refused rather than evicting an
        earlier choice. Returns whether the scenario is now selected.
        """
        if scenario_id in self._selected:
            self._selected.remove(scenario_id)
            return False
        if not self.can_select(scenario_id):
            logger.debug("Refused to select %s (%d selected)", scenario_id, len(self._selected))
            return False
        self._selected.append(scenario_id)
        return True

    def recompute_all(self) -> List[Tuple[Scenario, tax.SavingsSummary]]:
        """Every scenario with a freshly computed summary."""
        return [(s, s.summary) for s in self._scenarios.values()]

    def comparison(self) -> List[Tuple[Scenario, tax.SavingsSummary]]:
        """Selected scenarios in selection order, freshly computed."""
        return [
            (self._scenarios[sid], self._scenarios[sid].summary)
            for sid in self._selected
            if sid in self._scenarios
        ]


# ─── Workspace ───────────────────────────────────────────────────────

class Workspace:
    """The live band, account lists and saved scenarios of one session."""

    def __init__(self, store: Optional[ScenarioStore] = None) -> None:
        self.tax_band: str = cfg.DEFAULT_TAX_BAND
        self.accounts: List[Account] = []
        self.isa_accounts: List[IsaAccount] = []
        self.store = store if store is not None else ScenarioStore()
        self.show_comparison = False

    @property
    def summary(self) -> tax.SavingsSummary:
        return tax.summarise(self.tax_band, self.accounts, self.isa_accounts)

    @property
    def has_accounts(self) -> bool:
        return bool(self.accounts or self.isa_accounts)

    def set_band(self, band: str) -> None:
        self.tax_band = tax.validate_band(band)

    # ── accounts ──

    def add_account(self, name: str, amount_text: str, rate_text: str) -> Optional[Account]:
        account = make_account(name, amount_text, rate_text)
        if account is None:
            logger.debug("Refused account input %r / %r / %r", name, amount_text, rate_text)
            return None
        self.accounts = [*self.accounts, account]
        return account

    def remove_account(self, account_id: str) -> bool:
        remaining = [a for a in self.accounts if a.id != account_id]
        removed = len(remaining) != len(self.accounts)
        self.accounts = remaining
        return removed

    def add_isa(
        self,
        name: str,
        amount_text: str,
        rate_text: str,
        isa_type: str = cfg.DEFAULT_ISA_TYPE,
    ) -> Optional[IsaAccount]:
        isa = make_isa(name, amount_text, rate_text, isa_type)
        if isa is None:
            logger.debug("Refused ISA input %r / %r / %r / %r", name, amount_text, rate_text, isa_type)
            return None
        self.isa_accounts = [*self.isa_accounts, isa]
        return isa

    def remove_isa(self, isa_id: str) -> bool:
        remaining = [i for i in self.isa_accounts if i.id != isa_id]
        removed = len(remaining) != len(self.isa_accounts)
        self.isa_accounts = remaining
        return removed

    # ── scenarios ──

    def save_scenario(self, name: str) -> Optional[Scenario]:
        return self.store.save(name, self.tax_band, self.accounts, self.isa_accounts)

    def load_scenario(self, scenario_id: str) -> bool:
        state = self.store.load(scenario_id)
        if state is None:
            return False
        self.tax_band = state.tax_band
        self.accounts = state.accounts
        self.isa_accounts = state.isa_accounts
        return True

    def delete_scenario(self, scenario_id: str) -> bool:
        return self.store.delete(scenario_id)

    def toggle_selection(self, scenario_id: str) -> bool:
        return self.store.toggle_select(scenario_id)

    def toggle_comparison(self) -> bool:
        self.show_comparison = not self.show_comparison
        return self.show_comparison
