"""Translate validated payloads into domain entities and back into documents."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from salus.domain.model import (
    Candidate,
    CollectionKind,
    Incident,
    OsintReport,
    ParliamentaryCandidate,
    TimelineEntry,
)
from salus.domain.ports.enrichment import CandidateUpdate, EnrichmentBatch
from salus.domain.time_windows import today

from .schema import (
    CandidatePayload,
    CandidateUpdatePayload,
    EnrichmentResponse,
    IncidentPayload,
    ParliamentaryCandidatePayload,
    extract_json_object,
    load_json,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from salus.domain.model import Entity
    from salus.domain.ports.stream import Frame, FrameDecoder
    from salus.domain.time_windows import Clock

log = getLogger(__name__)


def parse_incident(
    payload: IncidentPayload | Mapping[str, object],
    *,
    received_on: date | None = None,
) -> Incident:
    """Build an incident; a payload without a date is dated ``received_on``."""

    model = (
        payload if isinstance(payload, IncidentPayload) else IncidentPayload.model_validate(payload)
    )
    report = model.osint_report
    return Incident(
        id=model.id,
        date=date.fromisoformat(model.date) if model.date else (received_on or today()),
        location=model.location,
        type=model.type,
        latitude=model.latitude,
        longitude=model.longitude,
        fatalities=model.fatalities,
        injuries=model.injuries,
        description=model.description,
        verified=model.verified,
        osint_report=(
            OsintReport(
                source_reliability=report.source_reliability,
                credibility_score=report.credibility_score,
                verified_sources=tuple(report.verified_sources),
                analysis=report.ai_analysis,
                timeline=tuple(
                    TimelineEntry(time=entry.time, event=entry.event) for entry in report.timeline
                ),
            )
            if report is not None
            else None
        ),
    )


def parse_candidate(payload: CandidatePayload | Mapping[str, object]) -> Candidate:
    model = (
        payload
        if isinstance(payload, CandidatePayload)
        else CandidatePayload.model_validate(payload)
    )
    return Candidate(
        id=model.id,
        name=model.name,
        party=model.party,
        district=model.district,
        sentiment_score=model.sentiment_score,
        mentions=model.mentions,
        projected_vote_share=model.projected_vote_share,
        image_url=model.image_url,
        notes=model.notes,
    )


def parse_parliamentary_candidate(
    payload: ParliamentaryCandidatePayload | Mapping[str, object],
) -> ParliamentaryCandidate:
    model = (
        payload
        if isinstance(payload, ParliamentaryCandidatePayload)
        else ParliamentaryCandidatePayload.model_validate(payload)
    )
    return ParliamentaryCandidate(
        id=model.id,
        name=model.name,
        constituency=model.constituency,
        party=model.party,
        category=model.category,
        sentiment_score=model.sentiment_score,
        projected_vote_share=model.projected_vote_share,
        mentions=model.mentions,
        coordinates=model.coordinates,
    )


def parse_candidate_update(payload: Mapping[str, object]) -> CandidateUpdate:
    model = CandidateUpdatePayload.model_validate(payload)
    return CandidateUpdate(
        name=model.name,
        sentiment_score=model.sentiment_score,
        mentions=model.mentions,
    )


_PARSERS: dict[CollectionKind, Callable[[Mapping[str, object]], Entity]] = {
    CollectionKind.INCIDENTS: parse_incident,
    CollectionKind.PRESIDENTIAL: parse_candidate,
    CollectionKind.PARLIAMENTARY: parse_parliamentary_candidate,
}


def parse_collection(
    kind: CollectionKind,
    documents: Iterable[Mapping[str, object]],
) -> list[Entity]:
    """Translate every well-formed document; malformed ones are logged and skipped."""

    parser = _PARSERS[kind]
    entities: list[Entity] = []
    for document in documents:
        try:
            entities.append(parser(document))
        except (ValidationError, ValueError) as exc:
            log.warning("Skipping malformed %s document %r: %s", kind, document.get("id"), exc)
    return entities


def decode_incident_frame(frame: Frame, *, clock: Clock = today) -> Incident:
    """Decode one stream frame; raises ``ValueError`` for anything that is not an incident."""

    payload = load_json(frame)
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")
    return parse_incident(payload, received_on=clock())


def make_frame_decoder(clock: Clock = today) -> FrameDecoder:
    def decode(frame: Frame) -> Incident:
        return decode_incident_frame(frame, clock=clock)

    return decode


def parse_enrichment_response(text: str, *, received_on: date | None = None) -> EnrichmentBatch:
    """Parse an enrichment reply; raises ``ValueError`` if the envelope is unusable."""

    envelope = EnrichmentResponse.model_validate(extract_json_object(text))
    incidents: list[Incident] = []
    for item in envelope.incidents:
        try:
            incidents.append(parse_incident(item, received_on=received_on))
        except (ValidationError, ValueError) as exc:
            log.warning("Dropping malformed enrichment incident: %s", exc)
    updates: list[CandidateUpdate] = []
    for item in envelope.candidate_updates:
        try:
            updates.append(parse_candidate_update(item))
        except ValidationError as exc:
            log.warning("Dropping malformed candidate update: %s", exc)
    return EnrichmentBatch(incidents=tuple(incidents), candidate_updates=tuple(updates))


# -- domain -> document ----------------------------------------------------------


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json", exclude={"id"}, exclude_none=True)


def incident_to_document(incident: Incident) -> dict[str, Any]:
    report = incident.osint_report
    payload = IncidentPayload.model_validate(
        {
            "id": incident.id,
            "type": incident.type,
            "location": incident.location,
            "date": incident.date.isoformat(),
            "latitude": incident.latitude,
            "longitude": incident.longitude,
            "fatalities": incident.fatalities,
            "injuries": incident.injuries,
            "description": incident.description,
            "verified": incident.verified,
            "osintReport": (
                {
                    "sourceReliability": report.source_reliability,
                    "credibilityScore": report.credibility_score,
                    "verifiedSources": list(report.verified_sources),
                    "aiAnalysis": report.analysis,
                    "timeline": [
                        {"time": entry.time, "event": entry.event} for entry in report.timeline
                    ],
                }
                if report is not None
                else None
            ),
        }
    )
    return _dump(payload)


def candidate_to_document(candidate: Candidate) -> dict[str, Any]:
    return _dump(
        CandidatePayload(
            id=candidate.id,
            name=candidate.name,
            party=candidate.party,
            district=candidate.district,
            sentiment_score=candidate.sentiment_score,
            mentions=candidate.mentions,
            projected_vote_share=candidate.projected_vote_share,
            image_url=candidate.image_url,
            notes=candidate.notes,
        )
    )


def parliamentary_candidate_to_document(candidate: ParliamentaryCandidate) -> dict[str, Any]:
    return _dump(
        ParliamentaryCandidatePayload(
            id=candidate.id,
            name=candidate.name,
            constituency=candidate.constituency,
            party=candidate.party,
            category=candidate.category,
            sentiment_score=candidate.sentiment_score,
            projected_vote_share=candidate.projected_vote_share,
            mentions=candidate.mentions,
            coordinates=candidate.coordinates,
        )
    )


__all__ = [
    "candidate_to_document",
    "decode_incident_frame",
    "incident_to_document",
    "make_frame_decoder",
    "parliamentary_candidate_to_document",
    "parse_candidate",
    "parse_candidate_update",
    "parse_collection",
    "parse_enrichment_response",
    "parse_incident",
    "parse_parliamentary_candidate",
]
