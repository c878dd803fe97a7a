"""Line-level search over period files - no I/O dependencies."""

from dataclasses import dataclass, field

from .formatter import parse_entries

DEFAULT_CONTEXT_LINES = 2


@dataclass
class SearchHit:
    """A matching line with its own context window."""

    period_key: str
    line_number: int  # 1-based
    line: str
    context_before: list[str] = field(default_factory=list)
    context_after: list[str] = field(default_factory=list)


@dataclass
class SearchReport:
    """Result of searching every period for a term."""

    term: str
    hits: list[SearchHit] = field(default_factory=list)
    skipped_encrypted: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_matches(self) -> bool:
        return bool(self.hits)

    def hits_by_period(self) -> dict[str, list[SearchHit]]:
        """Group hits by period, keeping search order."""
        grouped: dict[str, list[SearchHit]] = {}
        for hit in self.hits:
            grouped.setdefault(hit.period_key, []).append(hit)
        return grouped


def fold(text: str) -> str:
    """Normalize text for case-insensitive comparison."""
    return text.casefold()


def contains_encrypted(text: str) -> bool:
    """Whether any block in the text is encrypted."""
    return any(entry.encrypted for entry in parse_entries(text))


def search_text(
    period_key: str,
    text: str,
    term: str,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> list[SearchHit]:
    """
    Find lines containing ``term``, case-insensitively.

    Each hit carries up to ``context_lines`` lines before and after it;
    overlapping windows are reported per hit, not merged.
    """
    needle = fold(term)
    lines = text.splitlines()
    hits = []
    for i, line in enumerate(lines):
        if needle not in fold(line):
            continue
        hits.append(
            SearchHit(
                period_key=period_key,
                line_number=i + 1,
                line=line,
                context_before=lines[max(0, i - context_lines) : i],
                context_after=lines[i + 1 : i + 1 + context_lines],
            )
        )
    return hits


def search_periods(
    periods: list[tuple[str, str]],
    term: str,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> SearchReport:
    """
    Search ``(period_key, text)`` pairs in the given order.

    A period holding any encrypted block is skipped entirely and listed in
    ``skipped_encrypted``, so its plaintext entries never produce hits.
    """
    if not term:
        raise ValueError("Search term must not be empty")

    report = SearchReport(term=term)
    for period_key, text in periods:
        if contains_encrypted(text):
            report.skipped_encrypted.append(period_key)
            continue
        report.hits.extend(search_text(period_key, text, term, context_lines))
    return report
