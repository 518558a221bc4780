from sqlalchemy import (
    Column, Integer, String, DateTime, Text,
    ForeignKey, Index
)
from models.base import Base


# Plain column mappings: every read selects columns explicitly, so no
# relationships are declared.
class Siege(Base):
    __tablename__ = "sieges"

    id     = Column(Integer, primary_key=True)
    date   = Column(DateTime, nullable=False, index=True)
    name   = Column(String(128))
    server = Column(String(64))
    notes  = Column(Text)

    def __repr__(self):
        return f"<Siege {self.id} {self.name or ''} @ {self.date}>"


class SiegeGuildRanking(Base):
    __tablename__ = "siege_guild_rankings"
    __table_args__ = (
        Index("idx_sgr_siege_score", "siege_id", "score"),
    )

    id         = Column(Integer, primary_key=True)
    siege_id   = Column(Integer, ForeignKey("sieges.id", ondelete="CASCADE"), nullable=False)
    guild_name = Column(String(64))
    score      = Column(Integer)


class SiegePlayerRanking(Base):
    __tablename__ = "siege_player_rankings"
    __table_args__ = (
        Index("idx_spr_siege_score", "siege_id", "score"),
    )

    id          = Column(Integer, primary_key=True)
    siege_id    = Column(Integer, ForeignKey("sieges.id", ondelete="CASCADE"), nullable=False)
    player_name = Column(String(64))
    score       = Column(Integer)


class SiegePlayerStat(Base):
    __tablename__ = "siege_player_stats"

    id          = Column(Integer, primary_key=True)
    siege_id    = Column(Integer, ForeignKey("sieges.id", ondelete="CASCADE"), nullable=False, index=True)
    player_name = Column(String(64))
    guild_name  = Column(String(64), nullable=True)    # NULL → "No Guild"
    kills       = Column(Integer)
    deaths      = Column(Integer)
    points      = Column(Integer)

    def __repr__(self):
        return f"<SiegePlayerStat {self.player_name} {self.kills}/{self.deaths}>"


class SiegePlayerKill(Base):
    __tablename__ = "siege_player_kills"

    id                   = Column(Integer, primary_key=True)
    siege_player_stat_id = Column(Integer, ForeignKey("siege_player_stats.id", ondelete="CASCADE"), nullable=False, index=True)
    siege_id             = Column(Integer, index=True)    # denormalized copy of stat.siege_id
    life_number          = Column(Integer)
    victim_name          = Column(String(64))
    points_earned        = Column(Integer)


class SiegePlayerDeath(Base):
    __tablename__ = "siege_player_deaths"

    id                   = Column(Integer, primary_key=True)
    siege_player_stat_id = Column(Integer, ForeignKey("siege_player_stats.id", ondelete="CASCADE"), nullable=False, index=True)
    siege_id             = Column(Integer, index=True)
    life_number          = Column(Integer)
    killer_name          = Column(String(64))
