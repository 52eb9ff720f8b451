"""Pure functions that decode telemetry and pick out player interactions."""

from typing import Any, Iterable, List, Mapping, Optional

from .models import (
    DAMAGE_EVENT,
    GROGGY_EVENT,
    KILL_EVENT,
    Character,
    DamageEvent,
    GroggyEvent,
    IgnoredEvent,
    Interaction,
    InteractionDetails,
    KillEvent,
    TelemetryEvent,
)


def decode_event(raw: Mapping[str, Any]) -> TelemetryEvent:
    """Map one raw telemetry record onto the event variant for its `_T` tag."""
    event_type = str(raw.get("_T") or "")
    timestamp = raw.get("_D")
    if event_type == DAMAGE_EVENT:
        return DamageEvent(
            timestamp=timestamp,
            attacker=_character(raw.get("attacker")),
            victim=_character(raw.get("victim")),
            damage=_number(raw.get("damage")),
            damage_reason=raw.get("damageReason"),
        )
    if event_type == GROGGY_EVENT:
        return GroggyEvent(
            timestamp=timestamp,
            attacker=_character(raw.get("attacker")),
            victim=_character(raw.get("victim")),
            damage=_number(raw.get("damage")),
            damage_reason=raw.get("damageReason"),
        )
    if event_type == KILL_EVENT:
        return KillEvent(
            timestamp=timestamp,
            victim=_character(raw.get("victim")),
            dbno_maker=_character(raw.get("dBNOMaker")),
            finisher=_character(raw.get("finisher")),
            killer=_character(raw.get("killer")),
            damage=_number(raw.get("damage")),
            damage_reason=raw.get("damageReason"),
        )
    return IgnoredEvent(type=event_type, timestamp=timestamp)


def decode_events(raw_events: Iterable[Any]) -> List[TelemetryEvent]:
    return [decode_event(raw) for raw in raw_events if isinstance(raw, Mapping)]


def extract_interactions(
    events: Iterable[TelemetryEvent],
    player_id: str,
    opponent_id: str,
) -> List[Interaction]:
    """Return the events where the two players damaged, downed or killed each other.

    Direction does not matter and input order is preserved. A kill qualifies
    when any of its downer, finisher or killer forms the pair with the victim.
    """
    pair = {player_id, opponent_id}
    interactions = []
    for event in events:
        if isinstance(event, (DamageEvent, GroggyEvent)):
            if not _is_pair(event.attacker, event.victim, pair):
                continue
            attacker = event.attacker
        elif isinstance(event, KillEvent):
            actors = (event.dbno_maker, event.finisher, event.killer)
            if not any(_is_pair(actor, event.victim, pair) for actor in actors):
                continue
            attacker = next((actor for actor in actors if actor is not None and actor.name), None)
        else:
            continue

        interactions.append(
            Interaction(
                type=event.type,
                timestamp=event.timestamp,
                details=InteractionDetails(
                    attacker=attacker.name if attacker else None,
                    victim=event.victim.name if event.victim else None,
                    damage=event.damage,
                    damage_reason=event.damage_reason,
                ),
            )
        )
    return interactions


def _is_pair(actor: Optional[Character], victim: Optional[Character], pair: set) -> bool:
    if actor is None or victim is None:
        return False
    if actor.account_id == victim.account_id:
        return False
    return {actor.account_id, victim.account_id} == pair


def _character(raw: Any) -> Optional[Character]:
    if not isinstance(raw, Mapping):
        return None
    account_id = raw.get("accountId")
    return Character(
        account_id=str(account_id) if account_id is not None else None,
        name=raw.get("name"),
    )


def _number(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
