"""Core domain models used by the correlation pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Optional, Sequence, Tuple, Union

DAMAGE_EVENT = "LogPlayerTakeDamage"
GROGGY_EVENT = "LogPlayerMakeGroggy"
KILL_EVENT = "LogPlayerKillV2"


@dataclass(frozen=True)
class PlayerIdentity:
    """A player resolved by name against the stats API."""

    account_id: str
    name: str
    match_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MatchDetails:
    """Metadata and participant list of one match."""

    match_id: str
    map_name: str
    created_at: datetime
    participant_ids: FrozenSet[str]
    telemetry_url: Optional[str] = None

    def has_participant(self, account_id: str) -> bool:
        return account_id in self.participant_ids


@dataclass(frozen=True)
class Character:
    """An actor or victim reference inside a telemetry event."""

    account_id: Optional[str]
    name: Optional[str]


@dataclass(frozen=True)
class DamageEvent:
    timestamp: str
    attacker: Optional[Character]
    victim: Optional[Character]
    damage: Optional[float] = None
    damage_reason: Optional[str] = None
    type: str = DAMAGE_EVENT


@dataclass(frozen=True)
class GroggyEvent:
    timestamp: str
    attacker: Optional[Character]
    victim: Optional[Character]
    damage: Optional[float] = None
    damage_reason: Optional[str] = None
    type: str = GROGGY_EVENT


@dataclass(frozen=True)
class KillEvent:
    """A kill; downer, finisher and killer may each be missing."""

    timestamp: str
    victim: Optional[Character]
    dbno_maker: Optional[Character] = None
    finisher: Optional[Character] = None
    killer: Optional[Character] = None
    damage: Optional[float] = None
    damage_reason: Optional[str] = None
    type: str = KILL_EVENT


@dataclass(frozen=True)
class IgnoredEvent:
    """Any telemetry record whose type the extractor does not consume."""

    type: str
    timestamp: Optional[str] = None


TelemetryEvent = Union[DamageEvent, GroggyEvent, KillEvent, IgnoredEvent]


@dataclass(frozen=True)
class InteractionDetails:
    attacker: Optional[str]
    victim: Optional[str]
    damage: Optional[float] = None
    damage_reason: Optional[str] = None


@dataclass(frozen=True)
class Interaction:
    """A telemetry event in which the two tracked players were the parties."""

    type: str
    timestamp: str
    details: InteractionDetails


@dataclass(frozen=True)
class MatchSummary:
    """A shared match and the interactions found in its telemetry."""

    id: str
    map: str
    started_at: str
    interactions: Sequence[Interaction] = field(default_factory=tuple)
