"""
Checklist progress tracker for bookings.

A booking's checklist is a snapshot: when the booking is created, one
completion row is copied from each checklist item the client selected on
the quote. Later template edits never change an existing booking.

Usage:
    tracker = ChecklistTracker(store)
    tracker.initialize(booking.id, quote.selected_item_ids)
    tracker.toggle(row.id, True)
    if tracker.is_complete(booking.id):
        ...
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from fieldops.errors import InvalidInputError
from fieldops.schemas.checklist_schema import (
    BookingChecklistCompletion,
    ChecklistFrequency,
    ChecklistItem,
    ChecklistProgress,
)
from fieldops.schemas.quote_schema import Frequency
from fieldops.tools.store import ServiceStore, new_id

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5

# Quote cadence -> checklist template cadence. One-off jobs may pick from every template.
_TEMPLATE_FREQUENCY = {
    Frequency.ONCE: None,
    Frequency.WEEKLY: ChecklistFrequency.WEEKLY,
    Frequency.BIWEEKLY: ChecklistFrequency.WEEKLY,
    Frequency.MONTHLY: ChecklistFrequency.MONTHLY,
}


def checklist_frequency(frequency: Frequency) -> Optional[ChecklistFrequency]:
    return _TEMPLATE_FREQUENCY[Frequency(frequency)]


def compute_progress(rows: Iterable[BookingChecklistCompletion]) -> ChecklistProgress:
    """Count completed rows; percentage rounds half up and is 0 for an empty list."""
    rows = list(rows)
    total = len(rows)
    completed = sum(1 for r in rows if r.completed)
    percentage = int(100 * completed / total + 0.5) if total else 0
    return ChecklistProgress(total=total, completed=completed, percentage=percentage)


class ChecklistTracker:
    """Creates and updates a booking's checklist completion rows."""

    def __init__(self, store: ServiceStore) -> None:
        self.store = store

    # ------------------------------------------------------------------ #
    # Reference data
    # ------------------------------------------------------------------ #

    def template_items(
        self, service_type: str, frequency: Optional[ChecklistFrequency] = None
    ) -> list[ChecklistItem]:
        """All items a client may pick for a service, in template order."""
        items: list[ChecklistItem] = []
        for template in self.store.list_checklist_templates(service_type, frequency):
            items.extend(self.store.list_checklist_items(template.id))
        return items

    # ------------------------------------------------------------------ #
    # Snapshot
    # ------------------------------------------------------------------ #

    def initialize(
        self, booking_id: str, selected_item_ids: Iterable[str]
    ) -> list[BookingChecklistCompletion]:
        """
        Create one incomplete row per selected item.

        Safe to call again: items already on the booking are skipped, so
        the row count always equals the number of distinct valid items.
        Unknown item ids are logged and ignored.
        """
        with self.store.transaction():
            present = {r.checklist_item_id for r in self.store.list_completions(booking_id)}
            created = 0
            for item_id in dict.fromkeys(selected_item_ids):
                if item_id in present:
                    continue
                item = self.store.get_checklist_item(item_id)
                if item is None:
                    logger.warning(
                        "Checklist item %s not found, skipped for booking %s", item_id, booking_id
                    )
                    continue
                self.store.add_completion(
                    BookingChecklistCompletion(
                        id=new_id("CK"),
                        booking_id=booking_id,
                        checklist_item_id=item.id,
                        name_en=item.name_en,
                        name_es=item.name_es,
                        is_required=item.is_required,
                        order_index=item.order_index,
                    )
                )
                present.add(item_id)
                created += 1
            rows = self.store.list_completions(booking_id)

        logger.info(
            "Checklist for booking %s: %d rows (%d new)", booking_id, len(rows), created
        )
        return rows

    def items_for(self, booking_id: str) -> list[BookingChecklistCompletion]:
        return self.store.list_completions(booking_id)

    # ------------------------------------------------------------------ #
    # Row updates
    # ------------------------------------------------------------------ #

    def _load(self, completion_id: str) -> BookingChecklistCompletion:
        row = self.store.get_completion(completion_id)
        if row is None:
            raise KeyError(f"Checklist completion {completion_id} does not exist")
        return row

    def toggle(self, completion_id: str, completed: bool) -> BookingChecklistCompletion:
        """Set the completion flag; completing stamps the time, un-completing clears it."""
        with self.store.transaction():
            row = self._load(completion_id)
            if completed and not row.completed:
                row.completed_at = datetime.now(timezone.utc)
            elif not completed:
                row.completed_at = None
            row.completed = completed
            row = self.store.save_completion(row)
        logger.debug("Checklist row %s completed=%s", completion_id, completed)
        return row

    def rate(self, completion_id: str, rating: int) -> BookingChecklistCompletion:
        """
        Record a 1-5 quality score.

        Rating a row that is not completed yet is allowed.

        Raises:
            InvalidInputError: If the rating is outside 1-5.
            KeyError: If the row does not exist.
        """
        validate_rating(rating)
        with self.store.transaction():
            row = self._load(completion_id)
            row.quality_rating = rating
            return self.store.save_completion(row)

    def annotate(self, completion_id: str, notes: str) -> BookingChecklistCompletion:
        with self.store.transaction():
            row = self._load(completion_id)
            row.notes = notes.strip()
            return self.store.save_completion(row)

    # ------------------------------------------------------------------ #
    # Progress
    # ------------------------------------------------------------------ #

    def progress(self, booking_id: str) -> ChecklistProgress:
        return compute_progress(self.store.list_completions(booking_id))

    def is_complete(self, booking_id: str) -> bool:
        """True when every item on the booking is done and there is at least one."""
        p = self.progress(booking_id)
        return p.total > 0 and p.percentage == 100

    def required_progress(self, booking_id: str) -> ChecklistProgress:
        return compute_progress(r for r in self.store.list_completions(booking_id) if r.is_required)

    def is_required_complete(self, booking_id: str) -> bool:
        """True when no required item is still open. Vacuously true without required items."""
        p = self.required_progress(booking_id)
        return p.completed == p.total


def validate_rating(rating: int) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidInputError(f"Rating must be an integer, got {rating!r}")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidInputError(f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}")
