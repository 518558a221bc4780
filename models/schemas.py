"""
Record types for rows coming out of the siege tables, plus response shapes.

Rows are validated here on their way out of the data access layer, so a row
missing a required column fails immediately instead of surfacing as a
``null`` deep inside a response.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

NO_GUILD = "No Guild"
NO_RESULT = "—"


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    @field_validator("kills", "deaths", "points", "score", "points_earned",
                     mode="before", check_fields=False)
    @classmethod
    def _zero_if_missing(cls, v):
        return 0 if v is None else v


# ── rows ─────────────────────────────────────────────────────────────────────
class SiegeRecord(BaseModel):
    # sieges may carry descriptive columns beyond id/date; keep them all
    model_config = ConfigDict(extra="allow")

    id:   int
    date: datetime


class GuildRankingRecord(_Record):
    guild_name: str
    score:      int | float = 0


class PlayerRankingRecord(_Record):
    player_name: str
    score:       int | float = 0


class PlayerStatRecord(_Record):
    id:          int
    siege_id:    int
    player_name: str
    guild_name:  Optional[str] = None
    kills:       int = 0
    deaths:      int = 0
    points:      int | float = 0


class KillRecord(_Record):
    siege_player_stat_id: int
    life_number:          int
    victim_name:          str
    points_earned:        int | float = 0


class DeathRecord(_Record):
    siege_player_stat_id: int
    life_number:          int
    killer_name:          str


# ── responses ────────────────────────────────────────────────────────────────
class KillByLife(BaseModel):
    life_number:   int
    victim_name:   str
    points_earned: int | float


class DeathByLife(BaseModel):
    life_number: int
    killer_name: str


class PlayerStatOut(BaseModel):
    player_name:    str
    guild_name:     str
    kills:          int
    deaths:         int
    points:         int | float
    kills_by_life:  list[KillByLife] = Field(default_factory=list)
    deaths_by_life: list[DeathByLife] = Field(default_factory=list)


class RankingsOut(BaseModel):
    guilds:  list[GuildRankingRecord]
    players: list[PlayerRankingRecord]
