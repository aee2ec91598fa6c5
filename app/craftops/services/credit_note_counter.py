from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date

from app.craftops.core.config import settings
from app.craftops.core.logging import log_json
from app.craftops.db.models import VendorCreditNoteCounter
from app.craftops.repos.credit_notes import CreditNoteRepository

logger = logging.getLogger("craftops.credit_notes")

_TRAILING_NUMBER = re.compile(r"-(\d+)$")


def financial_year_for(day: date, start_month: int | None = None) -> str:
    """Financial year label such as ``2024-2025`` for April 2024 to March 2025."""
    start_month = start_month or settings.FINANCIAL_YEAR_START_MONTH
    if day.month >= start_month:
        return f"{day.year}-{day.year + 1}"
    return f"{day.year - 1}-{day.year}"


def format_credit_note_number(financial_year: str, number: int, prefix: str | None = None) -> str:
    prefix = prefix or settings.CREDIT_NOTE_PREFIX
    return f"{prefix}-{financial_year}-{number:04d}"


@dataclass(frozen=True)
class CounterPeek:
    current_number: int
    next_number: int
    credit_note_number: str
    financial_year: str


@dataclass(frozen=True)
class CounterIssue:
    credit_note_number: str
    next_number: int
    financial_year: str


class CreditNoteCounterService:
    def __init__(self, db, *, today: date | None = None):
        self.db = db
        self.repo = CreditNoteRepository(db)
        self.financial_year = financial_year_for(today or date.today())

    def _get_or_create(self) -> VendorCreditNoteCounter:
        counter = self.repo.get_counter_for_update(self.financial_year)
        if counter is None:
            counter = VendorCreditNoteCounter(financial_year=self.financial_year, last_number=0)
            self.db.add(counter)
            self.db.flush()
        return counter

    def peek(self) -> CounterPeek:
        counter = self._get_or_create()
        self.db.commit()
        next_number = counter.last_number + 1
        return CounterPeek(
            current_number=counter.last_number,
            next_number=next_number,
            credit_note_number=format_credit_note_number(self.financial_year, next_number),
            financial_year=self.financial_year,
        )

    def next_number(self) -> CounterIssue:
        try:
            counter = self._get_or_create()
            counter.last_number = counter.last_number + 1
            issued = counter.last_number
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        number = format_credit_note_number(self.financial_year, issued)
        log_json(logger, {"event": "credit_note_number_issued", "credit_note_number": number})
        return CounterIssue(credit_note_number=number, next_number=issued + 1, financial_year=self.financial_year)

    def sync(self) -> int:
        prefix = format_credit_note_number(self.financial_year, 0)[: -len("0000")]
        highest = self.repo.highest_number_with_prefix(prefix)
        last_number = 0
        if highest:
            match = _TRAILING_NUMBER.search(highest)
            if match:
                last_number = int(match.group(1))
        try:
            counter = self._get_or_create()
            counter.last_number = last_number
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        log_json(
            logger,
            {"event": "credit_note_counter_synced", "financial_year": self.financial_year, "last_number": last_number},
        )
        return last_number
