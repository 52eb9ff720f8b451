from datetime import datetime, timezone

import pytest
import requests

from sharedmatch.adapters.pubg_api import PubgApiClient
from sharedmatch.errors import NotFoundError, UpstreamError
from sharedmatch.models import DamageEvent, IgnoredEvent
from sharedmatch.ratelimit import RateGate

from fakes import MATCH_PAYLOAD, PLAYERS_PAYLOAD, FakeClock, FakeResponse, FakeSession


def make_client(responses, gate=None, clock=None, waits=None):
    clock = clock or FakeClock()
    session = FakeSession(responses)
    client = PubgApiClient(
        "secret-key",
        gate=gate or RateGate(quota=10, window=60, clock=clock),
        session=session,
        sleep=clock.sleep,
        on_wait=waits.append if waits is not None else None,
    )
    return client, session


def test_resolve_players_is_case_insensitive():
    client, session = make_client([FakeResponse(PLAYERS_PAYLOAD)])

    player, opponent = client.resolve_players("player", "OPPONENT")

    assert player.account_id == "account.p"
    assert player.match_ids == ("m1", "m2")
    assert opponent.name == "Opponent"
    url, headers = session.requests[0]
    assert url == "https://api.pubg.com/shards/steam/players?filter[playerNames]=player,OPPONENT"
    assert headers["Authorization"] == "Bearer secret-key"
    assert headers["Accept"] == "application/vnd.api+json"


def test_resolve_players_raises_not_found():
    payload = {"data": PLAYERS_PAYLOAD["data"][:1]}
    client, _ = make_client([FakeResponse(payload)])

    with pytest.raises(NotFoundError):
        client.resolve_players("Player", "Opponent")


def test_fetch_match_reads_participants_and_asset():
    client, _ = make_client([FakeResponse(MATCH_PAYLOAD)])

    details = client.fetch_match("m1")

    assert details.map_name == "Savage_Main"
    assert details.created_at == datetime(2026, 3, 1, 10, 15, tzinfo=timezone.utc)
    assert details.has_participant("account.o")
    assert details.telemetry_url == "https://telemetry-cdn.example/m1.json"


def test_fetch_match_without_asset_has_no_telemetry():
    payload = {"data": MATCH_PAYLOAD["data"], "included": MATCH_PAYLOAD["included"][:3]}
    client, _ = make_client([FakeResponse(payload)])

    assert client.fetch_match("m1").telemetry_url is None


def test_error_detail_is_passed_through():
    body = {"errors": [{"title": "Not Found", "detail": "Match not found"}]}
    client, _ = make_client([FakeResponse(body, status_code=404)])

    with pytest.raises(UpstreamError) as excinfo:
        client.fetch_match("missing")

    assert str(excinfo.value) == "Match not found"
    assert excinfo.value.status_code == 404


def test_status_without_detail_gets_generic_message():
    client, _ = make_client([FakeResponse(ValueError("no json"), status_code=502)])

    with pytest.raises(UpstreamError, match="HTTP 502"):
        client.fetch_match("m1")


def test_transport_failure_is_upstream_error():
    client, _ = make_client([requests.ConnectionError("reset")])

    with pytest.raises(UpstreamError):
        client.fetch_match("m1")


def test_malformed_match_payload_is_upstream_error():
    client, _ = make_client([FakeResponse({"data": {}})])

    with pytest.raises(UpstreamError):
        client.fetch_match("m1")


def test_fetch_telemetry_sends_no_api_key():
    events = [
        {"_T": "LogMatchStart", "_D": "t0"},
        {"_T": "LogPlayerTakeDamage", "_D": "t1", "attacker": None, "victim": None},
    ]
    client, session = make_client([FakeResponse(events)])

    decoded = client.fetch_telemetry("https://telemetry-cdn.example/m1.json")

    assert isinstance(decoded[0], IgnoredEvent)
    assert isinstance(decoded[1], DamageEvent)
    _, headers = session.requests[0]
    assert "Authorization" not in headers


def test_fetch_telemetry_rejects_non_list():
    client, _ = make_client([FakeResponse({"oops": True})])

    with pytest.raises(UpstreamError):
        client.fetch_telemetry("https://telemetry-cdn.example/m1.json")


def test_calls_wait_for_the_gate():
    clock = FakeClock()
    waits = []
    gate = RateGate(quota=2, window=60, clock=clock)
    client, session = make_client(
        [FakeResponse(MATCH_PAYLOAD)] * 3,
        gate=gate,
        clock=clock,
        waits=waits,
    )

    for _ in range(3):
        client.fetch_match("m1")

    assert waits == [60.0]
    assert clock.sleeps == [60.0]
    assert len(session.requests) == 3
