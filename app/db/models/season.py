from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Season(Base):
    __tablename__ = "seasons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    serie_id: Mapped[int] = mapped_column(Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    air_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    overview: Mapped[str | None] = mapped_column(Text, nullable=True)
    poster: Mapped[str] = mapped_column(String(256), nullable=False)

    serie = relationship("Serie", back_populates="seasons")
    episodes = relationship(
        "Episode",
        back_populates="season",
        cascade="all, delete-orphan",
        order_by="Episode.number",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("serie_id", "number", name="uq_seasons_serie_number"),
    )


class Episode(Base):
    __tablename__ = "episodes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    serie_id: Mapped[int] = mapped_column(Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False, index=True)
    season_id: Mapped[int] = mapped_column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    air_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    overview: Mapped[str | None] = mapped_column(Text, nullable=True)

    season = relationship("Season", back_populates="episodes")

    __table_args__ = (
        UniqueConstraint("season_id", "number", name="uq_episodes_season_number"),
    )
