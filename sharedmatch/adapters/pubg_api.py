"""PUBG stats API adapter for the correlation pipeline."""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Sequence, Tuple
from urllib.parse import quote

import requests

from ..errors import CallCancelled, NotFoundError, UpstreamError
from ..interactions import decode_events
from ..models import MatchDetails, PlayerIdentity, TelemetryEvent
from ..ratelimit import RateGate

logger = logging.getLogger(__name__)

API_ROOT = "https://api.pubg.com/shards"
JSON_API_TYPE = "application/vnd.api+json"
DEFAULT_TIMEOUT = (10, 60)


class PubgApiClient:
    """Fetches players, matches and telemetry, each call gated by a RateGate."""

    def __init__(
        self,
        api_key: str,
        gate: RateGate,
        shard: str = "steam",
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_wait: Optional[Callable[[float], None]] = None,
        should_stop: Optional[Callable[[], bool]] = None,
        timeout=DEFAULT_TIMEOUT,
    ):
        self.api_key = api_key
        self.gate = gate
        self.base_url = f"{API_ROOT}/{shard}"
        self.session = session or requests.Session()
        self.sleep = sleep
        self.on_wait = on_wait
        self.should_stop = should_stop
        self.timeout = timeout

    @property
    def api_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "Accept": JSON_API_TYPE}

    def resolve_players(
        self,
        player_name: str,
        opponent_name: str,
    ) -> Tuple[PlayerIdentity, PlayerIdentity]:
        names = f"{quote(player_name, safe='')},{quote(opponent_name, safe='')}"
        payload = self._get(f"{self.base_url}/players?filter[playerNames]={names}", self.api_headers)

        try:
            found = {
                item["attributes"]["name"].lower(): item
                for item in payload["data"]
                if item.get("type", "player") == "player"
            }
        except (KeyError, TypeError, AttributeError) as exn:
            raise UpstreamError(f"Malformed players payload: {exn}") from exn

        player = found.get(player_name.lower())
        opponent = found.get(opponent_name.lower())
        if player is None or opponent is None:
            raise NotFoundError("One or both players not found")
        return _identity(player), _identity(opponent)

    def fetch_match(self, match_id: str) -> MatchDetails:
        payload = self._get(f"{self.base_url}/matches/{match_id}", self.api_headers)
        try:
            attributes = payload["data"]["attributes"]
            included = payload.get("included") or []
            participant_ids = frozenset(
                str(item["attributes"]["stats"]["playerId"])
                for item in included
                if item.get("type") == "participant"
            )
            asset = next((item for item in included if item.get("type") == "asset"), None)
            telemetry_url = asset["attributes"].get("URL") if asset else None
            return MatchDetails(
                match_id=str(payload["data"].get("id", match_id)),
                map_name=attributes.get("mapName", ""),
                created_at=_parse_timestamp(attributes["createdAt"]),
                participant_ids=participant_ids,
                telemetry_url=telemetry_url or None,
            )
        except (KeyError, TypeError, AttributeError, ValueError) as exn:
            raise UpstreamError(f"Malformed match payload for {match_id}: {exn}") from exn

    def fetch_telemetry(self, url: str) -> Sequence[TelemetryEvent]:
        payload = self._get(url, {"Accept": JSON_API_TYPE})
        if not isinstance(payload, list):
            raise UpstreamError("Malformed telemetry payload: expected a list of events")
        return decode_events(payload)

    def _get(self, url: str, headers: Dict[str, str]) -> Any:
        if self.should_stop is not None and self.should_stop():
            raise CallCancelled(url)
        self.gate.wait_and_admit(sleep=self._sleep, should_stop=self.should_stop)
        logger.debug("GET %s", url)
        try:
            resp = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as exn:
            logger.warning("Request to %s failed: %s", url, exn)
            raise UpstreamError(f"Request failed: {exn}") from exn

        if not resp.ok:
            detail = _error_detail(resp)
            logger.warning("GET %s returned %s: %s", url, resp.status_code, detail)
            raise UpstreamError(detail, status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as exn:
            raise UpstreamError(f"Invalid JSON from {url}") from exn

    def _sleep(self, seconds: float) -> None:
        if self.on_wait is not None:
            self.on_wait(seconds)
        self.sleep(seconds)


def _identity(item: Dict[str, Any]) -> PlayerIdentity:
    try:
        matches = item.get("relationships", {}).get("matches", {}).get("data") or []
        return PlayerIdentity(
            account_id=str(item["id"]),
            name=item["attributes"]["name"],
            match_ids=tuple(str(match["id"]) for match in matches),
        )
    except (KeyError, TypeError, AttributeError) as exn:
        raise UpstreamError(f"Malformed player record: {exn}") from exn


def _parse_timestamp(raw: str) -> datetime:
    # The API sends UTC instants with a trailing "Z".
    value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _error_detail(resp: requests.Response) -> str:
    try:
        errors = resp.json().get("errors") or []
        detail = errors[0].get("detail") or errors[0].get("title")
        if detail:
            return str(detail)
    except (ValueError, AttributeError, IndexError, TypeError):
        pass
    return f"Stats API returned HTTP {resp.status_code}"
