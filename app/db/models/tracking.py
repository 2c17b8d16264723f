from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


WATCH_STATES = ("want to watch", "watching", "watched")


class UserSerieRating(Base):
    __tablename__ = "users_series_rating"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    serie_id: Mapped[int] = mapped_column(Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False, index=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "serie_id", name="uq_users_series_rating_user_serie"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="chk_users_series_rating_range"),
    )


class UserSerieState(Base):
    __tablename__ = "users_series_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    serie_id: Mapped[int] = mapped_column(Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(32), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "serie_id", name="uq_users_series_state_user_serie"),
        CheckConstraint(
            "state IN ('want to watch', 'watching', 'watched')", name="chk_users_series_state_value"
        ),
    )
