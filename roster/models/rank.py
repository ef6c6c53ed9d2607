"""ORM models for ranks and promotion history."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from roster.models.base import Base


class Rank(Base):
    """Military rank. Lower order is more junior (0 = Private)."""

    __tablename__ = "ranks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    abbreviation = Column(String(32), nullable=False)
    order = Column(Integer, nullable=True)
    insignia_url = Column(String(1024), nullable=True)


class RankHistory(Base):
    """Promotion record. legacy_promoted_by points into system_users."""

    __tablename__ = "rank_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    personnel_id = Column(
        Integer, ForeignKey("personnel.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rank_id = Column(Integer, ForeignKey("ranks.id", ondelete="CASCADE"), nullable=False)
    promotion_date = Column(DateTime(timezone=True), nullable=False)
    promoted_by = Column(Integer, ForeignKey("personnel.id", ondelete="SET NULL"), nullable=True)
    legacy_promoted_by = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
