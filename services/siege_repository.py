import logging
from typing import Iterable, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from core.result import Err, ErrorKind, Ok, Result
from models.models import (
    Siege, SiegeGuildRanking, SiegePlayerRanking,
    SiegePlayerStat, SiegePlayerKill, SiegePlayerDeath,
)
from models.schemas import (
    SiegeRecord, GuildRankingRecord, PlayerRankingRecord,
    PlayerStatRecord, KillRecord, DeathRecord,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


def siege_key(siege_id) -> Optional[int]:
    """Path ids arrive as strings; anything non-numeric simply matches nothing."""
    try:
        return int(siege_id)
    except (TypeError, ValueError):
        return None


class SiegeRepository:
    """
    Read-only access to the siege tables.

    Each method opens its own session, so independent calls can be awaited
    concurrently. Failures never raise: they come back as ``Err``.
    """

    def __init__(self, sessionmaker: async_sessionmaker):
        self._sessionmaker = sessionmaker

    async def _fetch(self, label: str, stmt, record: Type[R]) -> Result[list[R]]:
        try:
            async with self._sessionmaker() as session:
                rows = (await session.execute(stmt)).mappings().all()
        except (SQLAlchemyError, OSError):
            logger.exception("Error fetching %s", label)
            return Err(ErrorKind.FETCH, f"failed to fetch {label}")

        try:
            return Ok([record.model_validate(dict(r)) for r in rows])
        except ValidationError as e:
            logger.error("Malformed %s row: %s", label, e)
            return Err(ErrorKind.DECODE, f"malformed {label} row")

    # ── sieges ──────────────────────────────────────────────────────────────
    # SELECT *: columns the mapping does not declare still reach the response.
    @staticmethod
    def _all_siege_columns():
        return select(text("*")).select_from(Siege.__table__)

    async def list_sieges(self) -> Result[list[SiegeRecord]]:
        stmt = self._all_siege_columns().order_by(Siege.date.desc(), Siege.id)
        return await self._fetch("sieges", stmt, SiegeRecord)

    async def get_siege(self, siege_id) -> Result[SiegeRecord]:
        key = siege_key(siege_id)
        if key is None:
            return Err(ErrorKind.NOT_FOUND, "siege not found")

        stmt = self._all_siege_columns().where(Siege.id == key)
        result = await self._fetch("siege", stmt, SiegeRecord)
        if isinstance(result, Err):
            return result
        if not result.value:
            return Err(ErrorKind.NOT_FOUND, "siege not found")
        return Ok(result.value[0])

    # ── rankings ────────────────────────────────────────────────────────────
    # Ties on score go to the row inserted first (lowest id).
    async def guild_rankings(self, siege_id, limit: Optional[int] = None) -> Result[list[GuildRankingRecord]]:
        key = siege_key(siege_id)
        if key is None:
            return Ok([])

        stmt = (
            select(SiegeGuildRanking.guild_name, SiegeGuildRanking.score)
            .where(SiegeGuildRanking.siege_id == key)
            .order_by(SiegeGuildRanking.score.desc().nulls_last(), SiegeGuildRanking.id)
            .limit(limit)
        )
        return await self._fetch("guild rankings", stmt, GuildRankingRecord)

    async def player_rankings(self, siege_id, limit: Optional[int] = None) -> Result[list[PlayerRankingRecord]]:
        key = siege_key(siege_id)
        if key is None:
            return Ok([])

        stmt = (
            select(SiegePlayerRanking.player_name, SiegePlayerRanking.score)
            .where(SiegePlayerRanking.siege_id == key)
            .order_by(SiegePlayerRanking.score.desc().nulls_last(), SiegePlayerRanking.id)
            .limit(limit)
        )
        return await self._fetch("player rankings", stmt, PlayerRankingRecord)

    # ── player stats ────────────────────────────────────────────────────────
    async def player_stats(self, siege_id) -> Result[list[PlayerStatRecord]]:
        key = siege_key(siege_id)
        if key is None:
            return Ok([])

        stmt = (
            select(
                SiegePlayerStat.id,
                SiegePlayerStat.siege_id,
                SiegePlayerStat.player_name,
                SiegePlayerStat.guild_name,
                SiegePlayerStat.kills,
                SiegePlayerStat.deaths,
                SiegePlayerStat.points,
            )
            .where(SiegePlayerStat.siege_id == key)
            .order_by(SiegePlayerStat.id)
        )
        return await self._fetch("player stats", stmt, PlayerStatRecord)

    async def kills_for(
        self,
        siege_id=None,
        stat_ids: Optional[Iterable[int]] = None,
    ) -> Result[list[KillRecord]]:
        stmt = select(
            SiegePlayerKill.siege_player_stat_id,
            SiegePlayerKill.life_number,
            SiegePlayerKill.victim_name,
            SiegePlayerKill.points_earned,
        ).order_by(SiegePlayerKill.id)

        stmt = self._filter_children(stmt, SiegePlayerKill, siege_id, stat_ids)
        if stmt is None:
            return Ok([])
        return await self._fetch("kills", stmt, KillRecord)

    async def deaths_for(
        self,
        siege_id=None,
        stat_ids: Optional[Iterable[int]] = None,
    ) -> Result[list[DeathRecord]]:
        stmt = select(
            SiegePlayerDeath.siege_player_stat_id,
            SiegePlayerDeath.life_number,
            SiegePlayerDeath.killer_name,
        ).order_by(SiegePlayerDeath.id)

        stmt = self._filter_children(stmt, SiegePlayerDeath, siege_id, stat_ids)
        if stmt is None:
            return Ok([])
        return await self._fetch("deaths", stmt, DeathRecord)

    @staticmethod
    def _filter_children(stmt, table, siege_id, stat_ids):
        """
        Kill/death rows can be narrowed by the denormalized ``siege_id`` or by
        membership in the stat ids already loaded for the siege.
        Returns None when the filter cannot match anything.
        """
        if stat_ids is not None:
            ids = list(stat_ids)
            if not ids:
                return None
            return stmt.where(table.siege_player_stat_id.in_(ids))

        key = siege_key(siege_id)
        if key is None:
            return None
        return stmt.where(table.siege_id == key)
