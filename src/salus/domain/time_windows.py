"""Temporal-validity windows applied to incident collections."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from salus.domain.model import Incident


class Clock(Protocol):
    def __call__(self) -> date: ...


def today() -> date:
    return date.today()


@dataclass(frozen=True)
class ReportingWindow:
    """Describe which incident dates are accepted into the canonical view.

    An incident is accepted when its date lies in ``[reference - days, reference]``
    (both ends inclusive) and its year equals ``acceptance_year``. The two gates are
    independent; when ``acceptance_year`` is ``None`` the reference date's year is
    used.
    """

    days: int
    acceptance_year: int | None = None

    def resolve(self, *, reference: date) -> tuple[date, date, int]:
        """Resolve the window into concrete ``(start, end, year)`` bounds."""

        if self.days < 0:
            raise ValueError("Window length must be non-negative")
        year = self.acceptance_year if self.acceptance_year is not None else reference.year
        return reference - timedelta(days=self.days), reference, year

    def contains(self, value: date, *, reference: date) -> bool:
        start, end, year = self.resolve(reference=reference)
        return start <= value <= end and value.year == year


def apply_temporal_filter(
    incidents: Iterable[Incident],
    window_days: int,
    reference_date: date,
    *,
    acceptance_year: int | None = None,
) -> list[Incident]:
    """Return the incidents accepted by the reporting window, preserving order."""

    window = ReportingWindow(days=window_days, acceptance_year=acceptance_year)
    return [
        incident
        for incident in incidents
        if window.contains(incident.date, reference=reference_date)
    ]


def within_days(value: date, days: int, *, reference: date) -> bool:
    """Whether ``value`` falls in the trailing ``days`` ending at ``reference``."""

    return reference - timedelta(days=days) <= value <= reference


__all__ = ["Clock", "ReportingWindow", "apply_temporal_filter", "today", "within_days"]
