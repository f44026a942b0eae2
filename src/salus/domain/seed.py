"""Built-in seed collections used when no remote source is configured.

Incident dates are relative to the supplied reference date so the seed set always
survives the reporting window. Parliamentary projections are generated from a
regional party-strength model with a seeded RNG, which keeps runs reproducible.
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING

from salus.domain.model import (
    Candidate,
    Incident,
    IncidentType,
    OsintReport,
    ParliamentaryCandidate,
    ParliamentaryCategory,
    SourceReliability,
    TimelineEntry,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_SEED = 2026


@dataclass(frozen=True, slots=True)
class SeedData:
    incidents: tuple[Incident, ...]
    presidential: tuple[Candidate, ...]
    parliamentary: tuple[ParliamentaryCandidate, ...]


def _timeline(*entries: tuple[str, str]) -> tuple[TimelineEntry, ...]:
    return tuple(TimelineEntry(time=time, event=event) for time, event in entries)


def seed_incidents(reference: date) -> tuple[Incident, ...]:
    def days_ago(days: int) -> date:
        return reference - timedelta(days=days)

    return (
        Incident(
            id="1",
            date=days_ago(0),
            location="Kampala Central",
            latitude=0.3476,
            longitude=32.5825,
            type=IncidentType.PROTEST,
            injuries=5,
            description="Opposition rally dispersed near City Square.",
            verified=True,
            osint_report=OsintReport(
                source_reliability=SourceReliability.B,
                credibility_score=85,
                verified_sources=("Daily Monitor Live Feed", "Kampala Metro Police Twitter"),
                analysis=(
                    "Video analysis confirms use of teargas. Crowd density approx 300-400. "
                    "Geolocation matches City Square landmarks."
                ),
                timeline=_timeline(
                    ("10:00", "Crowd begins gathering at City Square"),
                    ("10:30", "Police deployment observed on Jinja Road"),
                    ("11:15", "Tear gas deployed to disperse crowd"),
                ),
            ),
        ),
        Incident(
            id="2",
            date=days_ago(1),
            location="Gulu",
            latitude=2.7724,
            longitude=32.2881,
            type=IncidentType.VIOLENCE,
            fatalities=1,
            injuries=3,
            description="Clash between youth groups in market area.",
            verified=True,
            osint_report=OsintReport(
                source_reliability=SourceReliability.C,
                credibility_score=60,
                verified_sources=("Local Radio FM Call-in", "Civil Society Observer"),
                analysis=(
                    "Reports indicate factional infighting. One fatality confirmed by "
                    "hospital admission records."
                ),
                timeline=_timeline(
                    ("14:00", "Heated argument reported at main market"),
                    ("14:45", "Physical altercation involving crude weapons"),
                    ("15:30", "Police restore order"),
                ),
            ),
        ),
        Incident(
            id="3",
            date=days_ago(2),
            location="Mbarara",
            latitude=-0.6072,
            longitude=30.6545,
            type=IncidentType.INTIMIDATION,
            description="Threats reported at polling station registration center.",
            osint_report=OsintReport(
                source_reliability=SourceReliability.D,
                credibility_score=45,
                verified_sources=("Anonymous Twitter Report",),
                analysis="Unverified user report. No corroborating visual evidence found.",
                timeline=_timeline(
                    ("09:00", "Registration center opens"),
                    ("11:20", "Unidentified men reportedly threaten staff"),
                ),
            ),
        ),
        Incident(
            id="4",
            date=days_ago(0),
            location="Jinja",
            latitude=0.4479,
            longitude=33.2026,
            type=IncidentType.ARREST,
            description="Local councilor detained during town hall.",
            verified=True,
            osint_report=OsintReport(
                source_reliability=SourceReliability.A,
                credibility_score=95,
                verified_sources=("Official Police Statement", "NTV Uganda"),
                analysis="Arrest confirmed. Charges relate to inciting violence.",
                timeline=_timeline(
                    ("16:00", "Councilor addresses gathering"),
                    ("16:25", "Police vehicle arrives"),
                    ("16:40", "Suspect taken into custody"),
                ),
            ),
        ),
        Incident(
            id="5",
            date=days_ago(3),
            location="Arua",
            latitude=3.0303,
            longitude=30.9073,
            type=IncidentType.RALLY,
            description="Peaceful procession by opposition supporters.",
            verified=True,
        ),
        Incident(
            id="6",
            date=days_ago(1),
            location="Masaka",
            latitude=-0.3411,
            longitude=31.7361,
            type=IncidentType.VIOLENCE,
            injuries=12,
            description="Market disruption and tear gas use.",
            verified=True,
        ),
    )


PRESIDENTIAL_CANDIDATES: tuple[Candidate, ...] = (
    Candidate(
        id="c1",
        name="Yoweri Kaguta Museveni",
        party="NRM",
        district="National",
        sentiment_score=65,
        mentions=25400,
        projected_vote_share=52.1,
        notes="Incumbent president, seeking 7th term",
    ),
    Candidate(
        id="c2",
        name="Robert Kyagulanyi Ssentamu (Bobi Wine)",
        party="NUP",
        district="National",
        sentiment_score=78,
        mentions=31200,
        projected_vote_share=39.4,
        notes="Main opposition candidate",
    ),
    Candidate(
        id="c3",
        name="James Nathan Nandala Mafabi",
        party="FDC",
        district="National",
        sentiment_score=48,
        mentions=4200,
        projected_vote_share=3.8,
        notes="Forum for Democratic Change",
    ),
    Candidate(
        id="c4",
        name="Gregory Mugisha Muntu Oyera",
        party="ANT",
        district="National",
        sentiment_score=58,
        mentions=3100,
        projected_vote_share=2.5,
        notes="Alliance for National Transformation",
    ),
)


# -- parliamentary projection model -----------------------------------------------


@dataclass(frozen=True, slots=True)
class RawParliamentaryCandidate:
    id: str
    name: str
    constituency: str
    party: str
    category: ParliamentaryCategory


_W = ParliamentaryCategory.WOMAN_MP
_C = ParliamentaryCategory.CONSTITUENCY

RAW_PARLIAMENTARY: tuple[RawParliamentaryCandidate, ...] = (
    RawParliamentaryCandidate("p1", "Lydia Wanyoto", "Woman MP Mbale City", "NRM", _W),
    RawParliamentaryCandidate("p2", "Connie Galiwango", "Woman MP Mbale City", "Independent", _W),
    RawParliamentaryCandidate("p3", "Sarah Wasagali", "Woman MP Mbale City", "Independent", _W),
    RawParliamentaryCandidate("p5", "Seth Wambede", "Northern City Division MP", "Independent", _C),
    RawParliamentaryCandidate(
        "p6", "Paul Wanyoto Mugoya", "Northern City Division MP", "Independent", _C
    ),
    RawParliamentaryCandidate("p9", "Asha Nabulo", "Woman MP Sironko District", "NRM", _W),
    RawParliamentaryCandidate(
        "p10", "Florence Nambozo", "Woman MP Sironko District", "Independent", _W
    ),
    RawParliamentaryCandidate("p17", "Gofrey Wakooli Matembu", "Butiru County, Manafwa", "NRM", _C),
    RawParliamentaryCandidate(
        "p23", "Fostin Wanikina", "Butiru County, Manafwa", "Independent", _C
    ),
    RawParliamentaryCandidate("p14", "Wilbroad Nakhabala", "Namisindwa County", "NUP", _C),
    RawParliamentaryCandidate("p15", "Metrine Nanzala", "Namisindwa County", "NRM", _C),
    RawParliamentaryCandidate("g1", "Betty Aol Ocan", "Gulu City East Division", "FDC", _C),
    RawParliamentaryCandidate("g2", "Martin Ojara Mapenduzi", "Gulu City East Division", "NRM", _C),
    RawParliamentaryCandidate("l1", "Jonathan Odur", "Erute South, Lira", "UPC", _C),
    RawParliamentaryCandidate("l2", "Sam Engola Okello", "Erute South, Lira", "NRM", _C),
    RawParliamentaryCandidate("s1", "Moses Attan Okia", "Soroti West Division", "FDC", _C),
    RawParliamentaryCandidate("s2", "Herbert Edmund Ariko", "Soroti West Division", "NRM", _C),
    RawParliamentaryCandidate("k1", "Muhammad Nsereko", "Kampala Central Division", "NUP", _C),
    RawParliamentaryCandidate(
        "k2", "Hamson Obua Denis", "Kampala Central Division", "NRM", _C
    ),
    RawParliamentaryCandidate("k3", "Moses Kasibante", "Kampala Central Division", "DP", _C),
    RawParliamentaryCandidate("m1", "Rwamirama Bright", "Isingiro North, Mbarara", "NRM", _C),
    RawParliamentaryCandidate("m2", "Ivan Bwowe", "Isingiro North, Mbarara", "NUP", _C),
    RawParliamentaryCandidate("e2", "Yusuf Kanakulya", "Entebbe Municipality", "Independent", _C),
    RawParliamentaryCandidate("e3", "Vicent Kayanja DePaul", "Entebbe Municipality", "DP", _C),
    RawParliamentaryCandidate("e4", "Joyce Nabatta Namuli", "Entebbe Municipality", "NUP", _C),
)

DISTRICT_COORDINATES: dict[str, tuple[float, float]] = {
    "Mbale": (1.0782, 34.1765),
    "Sironko": (1.2315, 34.2477),
    "Manafwa": (0.9908, 34.2975),
    "Namisindwa": (0.9800, 34.3600),
    "Gulu": (2.7724, 32.2881),
    "Lira": (2.2499, 32.8999),
    "Soroti": (1.7146, 33.6111),
    "Kampala": (0.3476, 32.5825),
    "Mbarara": (-0.6072, 30.6545),
    "Entebbe": (0.0512, 32.4637),
}
_COORDINATE_JITTER = 0.005

_WEST = re.compile(r"mbarara|kabale|kasese|hoima|fort portal|masindi|isingiro|ntungamo|kisoro")
_CENTRAL = re.compile(r"kampala|wakiso|mukono|masaka|mpigi|luweero|nansana|entebbe|busiro")
_NORTH = re.compile(r"gulu|lira|oyam|apac|arua|kitgum|amolatar|nebbi|yumbe|moyo|adjumani|pader")
_EAST = re.compile(r"mbale|sironko|manafwa|tororo|jinja|bugweri|kamuli|iganga|namisindwa|soroti")
_LANGO = re.compile(r"apac|oyam|lira|dokolo|kwania|otuke|ajuri|amolatar")
_TESO = re.compile(r"soroti|kumi|serere|ngora|bukedea|katakwi|amuria|kaberamaido")
_KASESE = re.compile(r"kasese")
_BUSOGA = re.compile(r"jinja|kamuli|iganga|kaliro|luuka|bugweri|mayuge|bugiri")
_URBAN = re.compile(r"city|municipality|division|kampala|wakiso")


def political_strength(party: str, constituency: str, rng: random.Random) -> float:
    """Unnormalised strength of a party's candidate in a constituency."""

    name = constituency.lower()
    west, central = bool(_WEST.search(name)), bool(_CENTRAL.search(name))
    north, east = bool(_NORTH.search(name)), bool(_EAST.search(name))
    urban = bool(_URBAN.search(name))

    if party == "NRM":
        score = 120.0
        score *= 2.5 if west else 1.0
        score *= 0.6 if central else 1.0
        score *= 1.2 if north else 1.0
        score *= 1.2 if east else 1.0
        score *= 0.7 if urban else 1.0
    elif party == "NUP":
        score = 100.0
        score *= 2.2 if central else 1.0
        score *= 1.5 if urban else 1.0
        score *= 0.4 if west else 1.0
        score *= 0.5 if north else 1.0
        score *= 1.3 if _BUSOGA.search(name) else 1.0
    elif party == "FDC":
        kasese = bool(_KASESE.search(name))
        score = 80.0
        score *= 2.5 if _TESO.search(name) else 1.0
        score *= 2.0 if kasese else 1.0
        score *= 0.5 if west and not kasese else 1.0
        score *= 1.2 if north else 1.0
    elif party == "UPC":
        score = 50.0 * (4.0 if _LANGO.search(name) else 0.3)
    elif party == "DP":
        score = 40.0 * (1.2 if central else 0.2)
    elif party == "Independent":
        score = 60.0 * (0.5 + rng.random() * 1.5)
    else:
        score = 20.0

    # individual appeal
    return score * (0.8 + rng.random() * 0.4)


def _coordinates(constituency: str, rng: random.Random) -> tuple[float, float] | None:
    for district, (lat, lng) in DISTRICT_COORDINATES.items():
        if district in constituency:
            return (
                lat + (rng.random() - 0.5) * _COORDINATE_JITTER,
                lng + (rng.random() - 0.5) * _COORDINATE_JITTER,
            )
    return None


def generate_parliamentary(
    raw: Sequence[RawParliamentaryCandidate] = RAW_PARLIAMENTARY,
    *,
    seed: int = DEFAULT_SEED,
) -> tuple[ParliamentaryCandidate, ...]:
    """Turn raw candidate rows into projected vote shares, sentiment and mentions.

    Shares inside a constituency are normalised to 100 minus a 1-6% slice for
    candidates not listed.
    """

    rng = random.Random(seed)
    strengths = {c.id: political_strength(c.party, c.constituency, rng) for c in raw}
    coordinates = {c.id: _coordinates(c.constituency, rng) for c in raw}

    groups: dict[str, list[RawParliamentaryCandidate]] = {}
    for candidate in raw:
        groups.setdefault(candidate.constituency, []).append(candidate)

    projected: list[ParliamentaryCandidate] = []
    for constituency, members in groups.items():
        total_strength = sum(strengths[c.id] for c in members) or 1.0
        available = 100.0 - (rng.random() * 5 + 1)
        urban = bool(re.search(r"City|Municipality|Division", constituency))
        for c in members:
            share = strengths[c.id] / total_strength * available
            sentiment = share * 1.5 + 20 + (rng.random() * 20 - 10)
            mentions = int((5000 if urban else 1000) * (share / 20) * (0.8 + rng.random()))
            projected.append(
                ParliamentaryCandidate(
                    id=c.id,
                    name=c.name,
                    constituency=c.constituency,
                    party=c.party,
                    category=c.category,
                    sentiment_score=float(min(98, max(10, int(sentiment)))),
                    projected_vote_share=round(share, 1),
                    mentions=mentions,
                    coordinates=coordinates[c.id],
                )
            )
    return tuple(projected)


def load_seed(reference: date, *, seed: int = DEFAULT_SEED) -> SeedData:
    return SeedData(
        incidents=seed_incidents(reference),
        presidential=PRESIDENTIAL_CANDIDATES,
        parliamentary=generate_parliamentary(seed=seed),
    )


__all__ = [
    "PRESIDENTIAL_CANDIDATES",
    "RAW_PARLIAMENTARY",
    "RawParliamentaryCandidate",
    "SeedData",
    "generate_parliamentary",
    "load_seed",
    "political_strength",
    "seed_incidents",
]
