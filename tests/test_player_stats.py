import asyncio
from datetime import datetime

import pytest

from analytics.player_stats import aggregate_player_stats, build_siege_stats
from core.result import Err, ErrorKind, Ok
from models.schemas import DeathRecord, KillRecord, PlayerStatRecord
from tests.factories import add_siege, add_stat


def _stat(id, name="p", **kw):
    return PlayerStatRecord(id=id, siege_id=1, player_name=name, **kw)


def _kill(stat_id, life, victim, pts=1):
    return KillRecord(siege_player_stat_id=stat_id, life_number=life, victim_name=victim, points_earned=pts)


def _death(stat_id, life, killer):
    return DeathRecord(siege_player_stat_id=stat_id, life_number=life, killer_name=killer)


def test_kills_and_deaths_attach_to_their_own_player():
    stats = [_stat(1, "Arthas"), _stat(2, "Jaina")]
    kills = [_kill(1, 1, "Jaina"), _kill(2, 1, "Arthas"), _kill(1, 2, "Thrall"), _kill(1, 2, "Uther")]
    deaths = [_death(2, 1, "Arthas"), _death(1, 1, "Jaina")]

    res = aggregate_player_stats(stats, kills, deaths)

    assert isinstance(res, Ok)
    arthas, jaina = res.value
    assert [k.victim_name for k in arthas.kills_by_life] == ["Jaina", "Thrall", "Uther"]
    assert [d.killer_name for d in arthas.deaths_by_life] == ["Jaina"]
    assert len(jaina.kills_by_life) == 1
    assert len(jaina.deaths_by_life) == 1


def test_records_for_unknown_stat_ids_are_dropped():
    res = aggregate_player_stats([_stat(1)], [_kill(99, 1, "ghost")], [_death(99, 1, "ghost")])

    (player,) = res.value
    assert player.kills_by_life == []
    assert player.deaths_by_life == []


def test_fetch_order_is_kept_without_sorting_by_life():
    kills = [_kill(1, 3, "c"), _kill(1, 1, "a"), _kill(1, 2, "b")]

    (player,) = aggregate_player_stats([_stat(1)], kills, []).value

    assert [k.life_number for k in player.kills_by_life] == [3, 1, 2]


def test_missing_guild_and_numbers_get_defaults():
    stat = PlayerStatRecord.model_validate({
        "id": 1, "siege_id": 1, "player_name": "Solo",
        "guild_name": None, "kills": None, "deaths": None, "points": None,
    })

    (player,) = aggregate_player_stats([stat], [], []).value

    assert player.guild_name == "No Guild"
    assert (player.kills, player.deaths, player.points) == (0, 0, 0)


def test_empty_stats_is_not_found():
    res = aggregate_player_stats([], [_kill(1, 1, "x")], [])

    assert isinstance(res, Err)
    assert res.kind is ErrorKind.NOT_FOUND


@pytest.mark.parametrize("strategy", ["stat_ids", "siege_id"])
def test_build_siege_stats_from_database(db, repo, strategy):
    siege = add_siege(db, datetime(2024, 5, 1))
    other = add_siege(db, datetime(2024, 5, 2))
    add_stat(db, siege, "Arthas", "Alliance", kills=2, deaths=1, points=30,
             kill_rows=[(1, "Thrall", 10), (2, "Jaina", 20)],
             death_rows=[(1, "Thrall")])
    add_stat(db, siege, "Thrall", None, kills=1, deaths=1,
             kill_rows=[(1, "Arthas", 15)],
             death_rows=[(2, "Arthas")])
    add_stat(db, other, "Outsider", "Horde", kill_rows=[(1, "Arthas", 5)])

    res = asyncio.run(build_siege_stats(repo, siege.id, strategy=strategy))

    assert isinstance(res, Ok)
    by_name = {p.player_name: p for p in res.value}
    assert set(by_name) == {"Arthas", "Thrall"}
    assert len(by_name["Arthas"].kills_by_life) == 2
    assert len(by_name["Arthas"].deaths_by_life) == 1
    assert by_name["Thrall"].guild_name == "No Guild"
    assert by_name["Thrall"].points == 0
    assert by_name["Thrall"].kills_by_life[0].victim_name == "Arthas"


@pytest.mark.parametrize("strategy", ["stat_ids", "siege_id"])
def test_build_siege_stats_without_rows_is_not_found(db, repo, strategy):
    siege = add_siege(db, datetime(2024, 5, 1))

    res = asyncio.run(build_siege_stats(repo, siege.id, strategy=strategy))

    assert isinstance(res, Err)
    assert res.kind is ErrorKind.NOT_FOUND
