"""
Per-siege highlights: the top guild and the MVP.

Both come from the ranking tables (highest score, first-inserted wins a
tie). ``enrich_sieges`` resolves them for a whole list of sieges at once.
"""
import asyncio
import logging
from typing import Sequence

from core.result import Err, Ok, Result
from models.schemas import NO_RESULT, SiegeRecord, GuildRankingRecord, PlayerRankingRecord
from services.siege_repository import SiegeRepository

logger = logging.getLogger(__name__)


async def top_guild(repo: SiegeRepository, siege_id) -> Result[GuildRankingRecord | None]:
    res = await repo.guild_rankings(siege_id, limit=1)
    if isinstance(res, Err):
        return res
    return Ok(res.value[0] if res.value else None)


async def mvp(repo: SiegeRepository, siege_id) -> Result[PlayerRankingRecord | None]:
    res = await repo.player_rankings(siege_id, limit=1)
    if isinstance(res, Err):
        return res
    return Ok(res.value[0] if res.value else None)


async def _highlight_names(repo: SiegeRepository, siege: SiegeRecord) -> tuple[str, str]:
    # each lookup falls back on its own; one crashing does not cost the other
    guild_res, mvp_res = await asyncio.gather(
        top_guild(repo, siege.id),
        mvp(repo, siege.id),
        return_exceptions=True,
    )

    guild_name = NO_RESULT
    match guild_res:
        case Ok(value=GuildRankingRecord() as g):
            guild_name = g.guild_name
        case Err(message=msg):
            logger.warning("topGuild fallback for siege %s: %s", siege.id, msg)
        case Exception() as exc:
            logger.error("topGuild lookup crashed for siege %s", siege.id, exc_info=exc)

    mvp_name = NO_RESULT
    match mvp_res:
        case Ok(value=PlayerRankingRecord() as p):
            mvp_name = p.player_name
        case Err(message=msg):
            logger.warning("mvp fallback for siege %s: %s", siege.id, msg)
        case Exception() as exc:
            logger.error("mvp lookup crashed for siege %s", siege.id, exc_info=exc)

    return guild_name, mvp_name


async def enrich_sieges(repo: SiegeRepository, sieges: Sequence[SiegeRecord]) -> list[dict]:
    """
    Return each siege as a dict with ``topGuild`` and ``mvp`` added.

    All lookups run concurrently; results line up with the input order.
    A failed lookup only affects its own siege, which gets ``"—"``.
    """
    names = await asyncio.gather(*(_highlight_names(repo, s) for s in sieges))

    enriched = []
    for siege, (guild_name, mvp_name) in zip(sieges, names):
        item = siege.model_dump(mode="json")
        item["topGuild"] = guild_name
        item["mvp"] = mvp_name
        enriched.append(item)
    return enriched
