import asyncio

from fastapi import APIRouter, Depends, HTTPException, Request

from analytics.highlights import enrich_sieges, mvp, top_guild
from analytics.player_stats import build_siege_stats
from core.config import Settings
from core.result import Err, ErrorKind, Ok, Result
from models.schemas import NO_RESULT, RankingsOut
from services.siege_repository import SiegeRepository

router = APIRouter(prefix="/sieges", tags=["sieges"])


def get_repository(request: Request) -> SiegeRepository:
    return request.app.state.repository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _unwrap(result: Result, error_message: str):
    """Map a repository result onto the response: value, 404 or 500."""
    match result:
        case Ok(value=value):
            return value
        case Err(kind=ErrorKind.NOT_FOUND, message=message):
            raise HTTPException(status_code=404, detail=message)
        case Err():
            raise HTTPException(status_code=500, detail=error_message)


# ── list ─────────────────────────────────────────────────────────────────────
@router.get("")
async def list_sieges(repo: SiegeRepository = Depends(get_repository)):
    sieges = _unwrap(await repo.list_sieges(), "Error fetching sieges")
    return await enrich_sieges(repo, sieges)


# ── per siege ────────────────────────────────────────────────────────────────
@router.get("/{siege_id}/rankings", response_model=RankingsOut)
async def siege_rankings(siege_id: str, repo: SiegeRepository = Depends(get_repository)):
    guilds_res, players_res = await asyncio.gather(
        repo.guild_rankings(siege_id),
        repo.player_rankings(siege_id),
    )
    return RankingsOut(
        guilds=_unwrap(guilds_res, "Error fetching rankings"),
        players=_unwrap(players_res, "Error fetching rankings"),
    )


@router.get("/{siege_id}/topGuild")
async def siege_top_guild(siege_id: str, repo: SiegeRepository = Depends(get_repository)):
    guild = _unwrap(await top_guild(repo, siege_id), "Error fetching topGuild")
    if guild is None:
        return {"guild_name": NO_RESULT}
    return guild.model_dump()


@router.get("/{siege_id}/mvp")
async def siege_mvp(siege_id: str, repo: SiegeRepository = Depends(get_repository)):
    player = _unwrap(await mvp(repo, siege_id), "Error fetching MVP")
    if player is None:
        return {"player_name": NO_RESULT}
    return player.model_dump()


@router.get("/{siege_id}/stats")
async def siege_stats(
    siege_id: str,
    repo: SiegeRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    _unwrap(await repo.get_siege(siege_id), "Error fetching player stats")

    stats = await build_siege_stats(repo, siege_id, strategy=settings.STATS_CHILD_FILTER)
    players = _unwrap(stats, "Error fetching player stats")
    return [p.model_dump() for p in players]
