"""Application service running the shared-match correlation pipeline."""

import logging
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from .errors import CallCancelled, SharedMatchError
from .interactions import extract_interactions
from .models import MatchDetails, MatchSummary, PlayerIdentity
from .ports import MessageSink, StatsApi
from .protocol import complete_message, error_message, match_message, progress_message

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_ZONE = "America/New_York"
DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"
GENERIC_FAILURE = "Failed to fetch data."


class CorrelationService:
    """Facade that streams shared matches between two players into a sink."""

    def __init__(self, api: StatsApi, display_zone: str = DEFAULT_DISPLAY_ZONE):
        self.api = api
        self.display_zone = ZoneInfo(display_zone)

    def run(self, player_name: str, opponent_name: str, sink: MessageSink) -> None:
        """Resolve both players, walk the player's recent matches and emit results.

        The sink is closed exactly once when this returns, after either the
        completion marker or a single error record.
        """
        logger.info("Correlating %s with %s", player_name, opponent_name)
        try:
            self._run(player_name, opponent_name, sink)
        except CallCancelled:
            logger.info("Consumer went away during a rate wait, stopping")
        except SharedMatchError as exn:
            logger.warning("Correlation of %s/%s failed: %s", player_name, opponent_name, exn)
            sink.emit(error_message(str(exn)))
        except Exception:
            logger.exception("Correlation of %s/%s crashed", player_name, opponent_name)
            sink.emit(error_message(GENERIC_FAILURE))
        finally:
            sink.close()

    def _run(self, player_name: str, opponent_name: str, sink: MessageSink) -> None:
        if not sink.emit(progress_message("Fetching player data...")):
            return
        player, opponent = self.api.resolve_players(player_name, opponent_name)

        match_ids = player.match_ids
        total = len(match_ids)
        if not sink.emit(
            progress_message(f"Found {total} recent matches. Checking for shared matches...")
        ):
            return

        for index, match_id in enumerate(match_ids, start=1):
            if sink.closed:
                logger.info("Consumer went away, stopping after %d/%d matches", index - 1, total)
                return
            summary = self._process_match(match_id, index, total, player, opponent, sink)
            if summary is not None and not sink.emit(match_message(summary)):
                return

        if sink.emit(progress_message("Processing complete!")):
            sink.emit(complete_message())
        logger.info("Correlation of %s/%s complete", player_name, opponent_name)

    def _process_match(
        self,
        match_id: str,
        index: int,
        total: int,
        player: PlayerIdentity,
        opponent: PlayerIdentity,
        sink: MessageSink,
    ) -> Optional[MatchSummary]:
        details = self.api.fetch_match(match_id)

        if not details.has_participant(opponent.account_id):
            logger.debug("Opponent absent from match %s", match_id)
            sink.emit(progress_message(f"Opponent not in match {index}/{total}. Skipping."))
            return None

        if not details.telemetry_url:
            logger.debug("No telemetry asset for match %s", match_id)
            sink.emit(progress_message(f"No telemetry available for match {index}/{total}. Skipping."))
            return None

        if not sink.emit(progress_message(f"Processing match {index}/{total} (ID: {match_id})...")):
            return None
        events = self.api.fetch_telemetry(details.telemetry_url)
        interactions = extract_interactions(events, player.account_id, opponent.account_id)
        logger.debug("Match %s: %d interactions", match_id, len(interactions))
        return self.summarize(details, interactions)

    def summarize(self, details: MatchDetails, interactions) -> MatchSummary:
        return MatchSummary(
            id=details.match_id,
            map=details.map_name,
            started_at=format_start_time(details.created_at, self.display_zone),
            interactions=tuple(interactions),
        )


def format_start_time(created_at: datetime, zone: ZoneInfo) -> str:
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.astimezone(zone).strftime(DISPLAY_FORMAT)
