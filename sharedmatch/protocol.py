"""Newline-delimited JSON records streamed to the caller.

Every record is a single-key object:

    {"progress": "..."}   status narration
    {"match": {...}}      one shared match, sent as soon as it is ready
    {"matches": []}       completion marker, always empty
    {"error": "..."}      terminal failure

The order of records is the protocol; `matches` and `error` are always last.
"""

import json
import logging
from typing import Any, Dict, Iterable, Iterator, Union

from .errors import ParseError
from .models import Interaction, InteractionDetails, MatchSummary

logger = logging.getLogger(__name__)

RECORD_KEYS = ("progress", "match", "matches", "error")
TERMINAL_KEYS = ("matches", "error")


def progress_message(text: str) -> Dict:
    return {"progress": text}


def match_message(summary: MatchSummary) -> Dict:
    return {"match": summary_to_dict(summary)}


def complete_message() -> Dict:
    return {"matches": []}


def error_message(text: str) -> Dict:
    return {"error": text}


def is_terminal(message: Dict) -> bool:
    return any(key in message for key in TERMINAL_KEYS)


def summary_to_dict(summary: MatchSummary) -> Dict:
    return {
        "id": summary.id,
        "map": summary.map,
        "startedAt": summary.started_at,
        "interactions": [
            {
                "type": interaction.type,
                "timestamp": interaction.timestamp,
                "details": {
                    "attacker": interaction.details.attacker,
                    "victim": interaction.details.victim,
                    "damage": interaction.details.damage,
                    "damageReason": interaction.details.damage_reason,
                },
            }
            for interaction in summary.interactions
        ],
    }


def summary_from_dict(data: Dict[str, Any]) -> MatchSummary:
    try:
        interactions = tuple(
            Interaction(
                type=item["type"],
                timestamp=item["timestamp"],
                details=InteractionDetails(
                    attacker=item["details"].get("attacker"),
                    victim=item["details"].get("victim"),
                    damage=item["details"].get("damage"),
                    damage_reason=item["details"].get("damageReason"),
                ),
            )
            for item in data.get("interactions", [])
        )
        return MatchSummary(
            id=data["id"],
            map=data["map"],
            started_at=data["startedAt"],
            interactions=interactions,
        )
    except (KeyError, TypeError, AttributeError) as exn:
        raise ParseError(f"Malformed match record: {exn}") from exn


def encode_message(message: Dict) -> bytes:
    return (json.dumps(message) + "\n").encode("utf-8")


def decode_line(line: Union[str, bytes]) -> Dict:
    """Decode one record, raising ParseError if it is not a known record."""
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    try:
        record = json.loads(line)
    except json.JSONDecodeError as exn:
        raise ParseError(f"Invalid JSON record: {exn}") from exn
    if not isinstance(record, dict) or not any(key in record for key in RECORD_KEYS):
        raise ParseError(f"Unknown record: {line.strip()[:80]}")
    return record


def iter_records(lines: Iterable[Union[str, bytes]]) -> Iterator[Dict]:
    """Yield decoded records from a line stream.

    Blank lines are skipped. Malformed lines are logged and dropped; they do
    not end the stream.
    """
    for line in lines:
        if not line or not line.strip():
            continue
        try:
            record = decode_line(line)
        except ParseError as exn:
            logger.error("Parse error: %s", exn)
            continue
        yield record
        if is_terminal(record):
            return
