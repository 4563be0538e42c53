"""Saved-lead collection: toggle semantics over a single key-value entry.

The collection is ordered most-recently-saved first and keyed by lead id.
It only changes through toggle (add-if-absent / remove-if-present).
"""

import json
import logging
import sqlite3
from collections.abc import Sequence

from pydantic import ValidationError

from src.core.db import get_value, set_value
from src.core.schemas import Lead

logger = logging.getLogger(__name__)

SAVED_LEADS_KEY = "savedLeads"


def toggle_saved(saved: Sequence[Lead], lead: Lead) -> list[Lead]:
    """Remove the lead if its id is present, otherwise put it first."""
    if any(s.id == lead.id for s in saved):
        return [s for s in saved if s.id != lead.id]
    return [lead, *saved]


class SavedLeadStore:
    """Persists the saved-lead collection under one fixed key.

    Usage::

        store = SavedLeadStore(conn)
        if store.toggle(lead):
            ...  # now saved
    """

    def __init__(self, conn: sqlite3.Connection, key: str = SAVED_LEADS_KEY) -> None:
        self._conn = conn
        self._key = key

    def load(self) -> list[Lead]:
        """Return saved leads. Missing or unreadable data counts as empty."""
        try:
            raw = get_value(self._conn, self._key)
        except sqlite3.Error:
            logger.warning("Could not read saved leads under '%s'", self._key, exc_info=True)
            return []
        if raw is None:
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Saved leads under '%s' are not valid JSON, ignoring", self._key)
            return []
        if not isinstance(items, list):
            logger.warning("Saved leads under '%s' are not a list, ignoring", self._key)
            return []

        leads: list[Lead] = []
        for item in items:
            try:
                leads.append(Lead.model_validate(item))
            except ValidationError:
                logger.warning("Skipping unreadable saved lead: %r", item)
        return leads

    def save(self, leads: Sequence[Lead]) -> None:
        payload = [lead.model_dump(mode="json", by_alias=True) for lead in leads]
        set_value(self._conn, self._key, json.dumps(payload, ensure_ascii=False))
        logger.debug("Stored %d saved leads", len(leads))

    def contains(self, lead_id: str) -> bool:
        return any(lead.id == lead_id for lead in self.load())

    def toggle(self, lead: Lead) -> bool:
        """Save or unsave a lead. Returns True if the lead is now saved."""
        updated = toggle_saved(self.load(), lead)
        self.save(updated)
        now_saved = any(s.id == lead.id for s in updated)
        logger.info("%s lead '%s' (%s)", "Saved" if now_saved else "Removed", lead.title, lead.id)
        return now_saved
