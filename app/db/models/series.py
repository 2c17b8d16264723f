from datetime import date

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


series_genres = Table(
    "series_genres",
    Base.metadata,
    Column("serie_id", Integer, ForeignKey("series.id", ondelete="CASCADE"), primary_key=True),
    Column("genre_id", Integer, ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True),
)


class Genre(Base):
    __tablename__ = "genres"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)


class Serie(Base):
    __tablename__ = "series"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    air_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    in_production: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tagline: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str] = mapped_column(String(2), nullable=False)
    network: Mapped[str | None] = mapped_column(String(128), nullable=True)
    url: Mapped[str | None] = mapped_column(String(256), nullable=True)

    genres = relationship("Genre", secondary=series_genres, lazy="selectin", order_by="Genre.id")
    seasons = relationship(
        "Season",
        back_populates="serie",
        cascade="all, delete-orphan",
        order_by="Season.number",
        passive_deletes=True,
    )
    ratings = relationship("UserSerieRating", cascade="all, delete-orphan", passive_deletes=True)
    states = relationship("UserSerieState", cascade="all, delete-orphan", passive_deletes=True)
