from __future__ import annotations

import random
from collections import defaultdict

from salus.domain.seed import (
    PRESIDENTIAL_CANDIDATES,
    RAW_PARLIAMENTARY,
    generate_parliamentary,
    load_seed,
    political_strength,
    seed_incidents,
)
from salus.domain.time_windows import apply_temporal_filter

from tests.helpers.factories import REFERENCE_DATE


def test_seed_incidents_are_dated_relative_to_reference() -> None:
    incidents = seed_incidents(REFERENCE_DATE)

    assert len(incidents) == 6
    assert len({incident.id for incident in incidents}) == 6
    assert max(incident.date for incident in incidents) == REFERENCE_DATE
    assert apply_temporal_filter(incidents, 90, REFERENCE_DATE) == list(incidents)


def test_parliamentary_projection_is_deterministic() -> None:
    assert generate_parliamentary(seed=7) == generate_parliamentary(seed=7)
    assert generate_parliamentary(seed=7) != generate_parliamentary(seed=8)


def test_parliamentary_shares_leave_room_for_others() -> None:
    totals: dict[str, float] = defaultdict(float)
    for candidate in generate_parliamentary():
        totals[candidate.constituency] += candidate.projected_vote_share

    for constituency, total in totals.items():
        assert 93.5 <= total <= 99.5, constituency


def test_parliamentary_values_stay_in_range() -> None:
    candidates = generate_parliamentary()

    assert [c.id for c in candidates] != []
    assert {c.id for c in candidates} == {raw.id for raw in RAW_PARLIAMENTARY}
    for candidate in candidates:
        assert 10 <= candidate.sentiment_score <= 98
        assert candidate.mentions >= 0


def test_regional_strength_favours_home_regions() -> None:
    rng = random.Random(0)
    samples = 200

    central = "Kampala Central Division"
    western = "Isingiro North, Mbarara"
    nup_central = sum(political_strength("NUP", central, rng) for _ in range(samples))
    nup_west = sum(political_strength("NUP", western, rng) for _ in range(samples))

    assert nup_central > nup_west


def test_load_seed_bundles_all_collections() -> None:
    data = load_seed(REFERENCE_DATE)

    assert data.presidential == PRESIDENTIAL_CANDIDATES
    assert len(data.incidents) == 6
    assert len(data.parliamentary) == len(RAW_PARLIAMENTARY)
