import asyncio
from collections import defaultdict
from typing import Sequence

from core.result import Err, ErrorKind, Ok, Result
from models.schemas import (
    NO_GUILD,
    PlayerStatRecord, KillRecord, DeathRecord,
    PlayerStatOut, KillByLife, DeathByLife,
)
from services.siege_repository import SiegeRepository


def aggregate_player_stats(
    stats: Sequence[PlayerStatRecord],
    kills: Sequence[KillRecord],
    deaths: Sequence[DeathRecord],
) -> Result[list[PlayerStatOut]]:
    """
    Attach per-life kills and deaths to each player's stat row.

    Child rows are indexed by stat id in a single pass, then looked up per
    player. Within a player, kills/deaths keep the order they were fetched
    in; life numbers are not re-sorted. Rows pointing at a stat id outside
    ``stats`` are ignored.
    """
    if not stats:
        return Err(ErrorKind.NOT_FOUND, "stats not found for this siege")

    kills_by_stat: dict[int, list[KillByLife]] = defaultdict(list)
    for k in kills:
        kills_by_stat[k.siege_player_stat_id].append(
            KillByLife(
                life_number=k.life_number,
                victim_name=k.victim_name,
                points_earned=k.points_earned,
            )
        )

    deaths_by_stat: dict[int, list[DeathByLife]] = defaultdict(list)
    for d in deaths:
        deaths_by_stat[d.siege_player_stat_id].append(
            DeathByLife(life_number=d.life_number, killer_name=d.killer_name)
        )

    return Ok([
        PlayerStatOut(
            player_name=s.player_name,
            guild_name=s.guild_name or NO_GUILD,
            kills=s.kills,
            deaths=s.deaths,
            points=s.points,
            kills_by_life=kills_by_stat.get(s.id, []),
            deaths_by_life=deaths_by_stat.get(s.id, []),
        )
        for s in stats
    ])


async def build_siege_stats(
    repo: SiegeRepository,
    siege_id,
    strategy: str = "stat_ids",
) -> Result[list[PlayerStatOut]]:
    """
    Load a siege's player stats with their kills/deaths and aggregate them.

    ``strategy="stat_ids"`` looks children up by the stat ids just loaded;
    ``strategy="siege_id"`` relies on the denormalized siege id column and
    fetches all three record sets at once.
    """
    if strategy == "siege_id":
        stats_res, kills_res, deaths_res = await asyncio.gather(
            repo.player_stats(siege_id),
            repo.kills_for(siege_id=siege_id),
            repo.deaths_for(siege_id=siege_id),
        )
        if isinstance(stats_res, Err):
            return stats_res
    else:
        stats_res = await repo.player_stats(siege_id)
        if isinstance(stats_res, Err):
            return stats_res
        if not stats_res.value:
            return Err(ErrorKind.NOT_FOUND, "stats not found for this siege")

        stat_ids = [s.id for s in stats_res.value]
        kills_res, deaths_res = await asyncio.gather(
            repo.kills_for(stat_ids=stat_ids),
            repo.deaths_for(stat_ids=stat_ids),
        )

    for res in (kills_res, deaths_res):
        if isinstance(res, Err):
            return res

    return aggregate_player_stats(stats_res.value, kills_res.value, deaths_res.value)
