"""
Domain service: append-only ledger of progress claims with review workflow.
"""
from typing import Callable, Iterable, List, Optional, Tuple
import logging
import math
import time
import uuid

from glass_mapper.domain.exceptions import IllegalTransition, InvalidInput, NotFound
from glass_mapper.domain.models import ProgressEntry, ProgressStatus, ProgressSummary
from glass_mapper.services.domain.geodesic_metrics import round_half_up

logger = logging.getLogger(__name__)


def current_time_ms() -> int:
    """Current wall clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class ProgressLedger:
    """
    Holds the progress entries of a single site.

    Entries are created pending and reviewed exactly once. Nothing is
    removed; the only change an entry ever sees is its status.
    """

    REVIEW_OUTCOMES = (ProgressStatus.APPROVED, ProgressStatus.REJECTED)

    def __init__(
        self,
        entries: Iterable[ProgressEntry] = (),
        clock: Callable[[], int] = current_time_ms,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self._entries: List[ProgressEntry] = list(entries)
        self._clock = clock
        self._id_factory = id_factory

    @property
    def entries(self) -> Tuple[ProgressEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: str) -> ProgressEntry:
        """
        Look up an entry by id.

        Raises:
            NotFound: If no entry has this id
        """
        return self._entries[self._index_of(entry_id)]

    def add_entry(self, meters_completed: float, notes: Optional[str] = None) -> ProgressEntry:
        """
        Record a pending progress claim.

        Args:
            meters_completed: Meters claimed as done, must be positive
            notes: Optional free text

        Returns:
            The created entry

        Raises:
            InvalidInput: If meters_completed is not a positive finite number
        """
        if not isinstance(meters_completed, (int, float)) or isinstance(meters_completed, bool):
            raise InvalidInput(f"metersCompleted must be a number, got {meters_completed!r}")
        if not math.isfinite(meters_completed) or meters_completed <= 0:
            raise InvalidInput(f"metersCompleted must be positive, got {meters_completed}")

        entry = ProgressEntry(
            id=self._id_factory(),
            date=self._clock(),
            meters_completed=float(meters_completed),
            status=ProgressStatus.PENDING,
            notes=notes,
        )
        self._entries.append(entry)
        logger.info(f"Logged progress entry {entry.id}: {entry.meters_completed}m pending review")
        return entry

    def set_status(self, entry_id: str, status: ProgressStatus) -> ProgressEntry:
        """
        Review a pending entry.

        Args:
            entry_id: Id of the entry to review
            status: APPROVED or REJECTED

        Returns:
            The updated entry

        Raises:
            InvalidInput: If status is not a review outcome
            NotFound: If the entry does not exist
            IllegalTransition: If the entry was already reviewed
        """
        try:
            status = ProgressStatus(status)
        except ValueError as e:
            raise InvalidInput(f"Unknown progress status {status!r}") from e
        if status not in self.REVIEW_OUTCOMES:
            raise InvalidInput(f"Entries can only be approved or rejected, not {status.value}")

        index = self._index_of(entry_id)
        current = self._entries[index]
        if current.status is not ProgressStatus.PENDING:
            raise IllegalTransition(
                f"Progress entry {entry_id} was already {current.status.value}"
            )

        updated = current.model_copy(update={"status": status})
        self._entries[index] = updated
        logger.info(f"Progress entry {entry_id} {status.value}")
        return updated

    def total_completed(self) -> float:
        """Sum of meters over approved entries."""
        return sum(
            e.meters_completed for e in self._entries
            if e.status is ProgressStatus.APPROVED
        )

    def summary(self, perimeter_meters: float, commitment_rate: float) -> ProgressSummary:
        """
        Derive completion and ETA figures against a perimeter.

        Days remaining are based on the full perimeter whether the shape is
        open or closed, and are None when the commitment rate is zero.

        Args:
            perimeter_meters: Length of the traced shape
            commitment_rate: Contractor commitment in meters/day

        Returns:
            ProgressSummary
        """
        total = self.total_completed()

        if perimeter_meters > 0:
            percentage = int(min(100, round_half_up(total / perimeter_meters * 100)))
        else:
            percentage = 0

        days_remaining = None
        if commitment_rate > 0:
            days_remaining = math.ceil(max(0.0, perimeter_meters - total) / commitment_rate)

        return ProgressSummary(
            total_completed=total,
            completion_percentage=percentage,
            estimated_days_remaining=days_remaining,
        )

    def _index_of(self, entry_id: str) -> int:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        raise NotFound(f"Progress entry {entry_id} not found")
