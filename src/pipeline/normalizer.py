"""Lead normalizer: untrusted RawLeadRecord -> trusted Lead, or rejected.

Rejections are silent: a record without a title or an http(s) url is simply
not actionable and is dropped, never raised.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from src.core.schemas import HTTP_SCHEMES, Lead, RawLeadRecord
from src.pipeline.contacts import validate_contacts

logger = logging.getLogger(__name__)


def make_lead_id(captured_at: datetime, index: int) -> str:
    """Capture-time milliseconds + batch position. Unique within one batch only."""
    return f"lead-{int(captured_at.timestamp() * 1000)}-{index}"


def _as_raw(item: Any) -> RawLeadRecord | None:
    if isinstance(item, RawLeadRecord):
        return item
    if not isinstance(item, Mapping):
        return None
    try:
        return RawLeadRecord.model_validate(dict(item))
    except ValidationError:
        return None


def normalize_lead(
    raw: RawLeadRecord | Mapping[str, Any],
    index: int,
    captured_at: datetime | None = None,
) -> Lead | None:
    """Validate contacts and enforce the actionable minimum on one record.

    Returns None when the record has no title or its url is not http(s).
    """
    record = _as_raw(raw)
    if record is None:
        return None

    title = record.title.strip()
    url = record.url.strip()
    if not title or not url.lower().startswith(HTTP_SCHEMES):
        return None

    country = record.country.strip() if record.country else None

    return Lead(
        id=make_lead_id(captured_at or datetime.now(), index),
        title=title,
        description=record.description,
        date=record.date.strip(),
        platform=record.platform.strip(),
        url=url,
        country=country or None,
        contacts=validate_contacts(record.contacts),
        tags=list(record.tags),
    )


def normalize_leads(
    raw_items: Iterable[Any],
    captured_at: datetime | None = None,
) -> list[Lead]:
    """Normalize a whole backend batch under one capture timestamp."""
    captured_at = captured_at or datetime.now()
    items = list(raw_items)
    leads = [
        lead
        for lead in (normalize_lead(item, i, captured_at) for i, item in enumerate(items))
        if lead is not None
    ]
    rejected = len(items) - len(leads)
    if rejected:
        logger.debug("Normalizer: dropped %d non-actionable records", rejected)
    return leads
