from sharedmatch.interactions import decode_event, decode_events, extract_interactions
from sharedmatch.models import DamageEvent, IgnoredEvent, KillEvent

PLAYER = {"accountId": "account.p", "name": "Player"}
OPPONENT = {"accountId": "account.o", "name": "Opponent"}
STRANGER = {"accountId": "account.s", "name": "Stranger"}


def damage(attacker, victim, ts="2026-01-01T00:00:01Z", amount=25.0, kind="LogPlayerTakeDamage"):
    return {
        "_T": kind,
        "_D": ts,
        "attacker": attacker,
        "victim": victim,
        "damage": amount,
        "damageReason": "TorsoShot",
    }


def kill(victim, ts="2026-01-01T00:05:00Z", **actors):
    event = {"_T": "LogPlayerKillV2", "_D": ts, "victim": victim}
    event.update(actors)
    return event


def test_decode_event_maps_known_and_unknown_tags():
    assert isinstance(decode_event(damage(PLAYER, OPPONENT)), DamageEvent)
    assert isinstance(decode_event(kill(OPPONENT, killer=PLAYER)), KillEvent)

    other = decode_event({"_T": "LogPlayerPosition", "_D": "2026-01-01T00:00:00Z"})
    assert other == IgnoredEvent(type="LogPlayerPosition", timestamp="2026-01-01T00:00:00Z")


def test_decode_events_skips_non_objects():
    events = decode_events([damage(PLAYER, OPPONENT), "garbage", None])
    assert len(events) == 1


def test_damage_is_direction_insensitive_and_order_preserving():
    events = decode_events(
        [
            damage(PLAYER, OPPONENT, ts="t1", amount=10),
            damage(STRANGER, OPPONENT, ts="t2"),
            damage(OPPONENT, PLAYER, ts="t3", amount=30),
        ]
    )

    result = extract_interactions(events, "account.p", "account.o")

    assert [i.timestamp for i in result] == ["t1", "t3"]
    assert result[0].details.attacker == "Player"
    assert result[0].details.victim == "Opponent"
    assert result[0].details.damage == 10
    assert result[1].details.attacker == "Opponent"
    assert result[1].details.damage_reason == "TorsoShot"


def test_groggy_qualifies_with_own_type_tag():
    events = decode_events([damage(OPPONENT, PLAYER, kind="LogPlayerMakeGroggy")])

    result = extract_interactions(events, "account.p", "account.o")

    assert len(result) == 1
    assert result[0].type == "LogPlayerMakeGroggy"


def test_kill_qualifies_on_any_actor_role():
    events = decode_events(
        [
            kill(OPPONENT, ts="k1", dBNOMaker=STRANGER, finisher=PLAYER),
            kill(PLAYER, ts="k2", killer=OPPONENT),
            kill(OPPONENT, ts="k3", dBNOMaker=STRANGER, killer=STRANGER),
            kill(PLAYER, ts="k4", dBNOMaker={"accountId": "", "name": ""}, killer=OPPONENT),
        ]
    )

    result = extract_interactions(events, "account.p", "account.o")

    assert [i.timestamp for i in result] == ["k1", "k2", "k4"]
    # The downer is reported first even when it is not one of the two players.
    assert result[0].details.attacker == "Stranger"
    assert result[1].details.attacker == "Opponent"
    assert result[1].details.victim == "Player"
    # Empty placeholder roles are skipped when naming the attacker.
    assert result[2].details.attacker == "Opponent"


def test_events_missing_actors_do_not_qualify():
    events = decode_events(
        [
            {"_T": "LogPlayerTakeDamage", "_D": "t1", "victim": OPPONENT},
            kill(OPPONENT, ts="t2"),
        ]
    )

    assert extract_interactions(events, "account.p", "account.o") == []


def test_self_damage_does_not_qualify():
    events = decode_events([damage(PLAYER, PLAYER)])

    assert extract_interactions(events, "account.p", "account.p") == []
