"""Port definitions for the stats API and for the message channel to the caller."""

from typing import Protocol, Sequence, Tuple

from .models import MatchDetails, PlayerIdentity, TelemetryEvent


class StatsApi(Protocol):
    """Client interface that adapters can implement for any stats backend."""

    def resolve_players(
        self,
        player_name: str,
        opponent_name: str,
    ) -> Tuple[PlayerIdentity, PlayerIdentity]:
        """Return both identities, or raise NotFoundError."""

    def fetch_match(self, match_id: str) -> MatchDetails:
        """Return metadata and participants of one match."""

    def fetch_telemetry(self, url: str) -> Sequence[TelemetryEvent]:
        """Return the decoded telemetry events of one match, in order."""


class MessageSink(Protocol):
    """Append-only channel of protocol records, closed exactly once."""

    @property
    def closed(self) -> bool:
        """Whether the channel no longer accepts records."""

    def emit(self, message: dict) -> bool:
        """Append a record; return False if the channel is already closed."""

    def close(self) -> None:
        """Close the channel. Further calls are no-ops."""
