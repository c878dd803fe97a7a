"""Journal statistics - no I/O dependencies."""

from dataclasses import dataclass, field
from enum import Enum

from .entry import EntryKind, ParsedEntry


class StatsStatus(Enum):
    OK = "ok"
    NO_ENTRIES = "no entries"


@dataclass
class StatsSummary:
    """Aggregate counts over all period files."""

    status: StatsStatus
    total_entries: int = 0
    entries_by_period: dict[str, int] = field(default_factory=dict)
    most_active_period: str | None = None
    most_active_count: int = 0
    oldest_period: str | None = None
    newest_period: str | None = None
    average_per_period: int = 0
    coding_entries: int = 0
    personal_entries: int = 0
    encrypted_entries: int = 0
    storage_bytes: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def period_count(self) -> int:
        return len(self.entries_by_period)

    @property
    def encrypted_percentage(self) -> int:
        if not self.total_entries:
            return 0
        return self.encrypted_entries * 100 // self.total_entries


def rounded_average(total: int, count: int) -> int:
    """Integer average rounded half up."""
    if count <= 0:
        return 0
    return (total + count // 2) // count


def aggregate(periods: list[tuple[str, list[ParsedEntry]]]) -> StatsSummary:
    """
    Summarize parsed periods.

    ``periods`` must be ordered most recent first, as returned by the
    store; oldest and newest follow that order.
    """
    if not periods:
        return StatsSummary(status=StatsStatus.NO_ENTRIES)

    summary = StatsSummary(status=StatsStatus.OK)
    for period_key, entries in periods:
        count = len(entries)
        summary.entries_by_period[period_key] = count
        summary.total_entries += count
        summary.coding_entries += sum(1 for e in entries if e.kind is EntryKind.CODING)
        summary.personal_entries += sum(1 for e in entries if e.kind is EntryKind.PERSONAL)
        summary.encrypted_entries += sum(1 for e in entries if e.encrypted)

    # Walk oldest first so ties go to the earliest period.
    for period_key, count in reversed(summary.entries_by_period.items()):
        if count > summary.most_active_count:
            summary.most_active_period = period_key
            summary.most_active_count = count

    summary.newest_period = periods[0][0]
    summary.oldest_period = periods[-1][0]
    summary.average_per_period = rounded_average(summary.total_entries, len(periods))

    if summary.total_entries == 0:
        summary.status = StatsStatus.NO_ENTRIES
    return summary
