"""Bulk import of series/seasons/episodes rows (as read from the CSV exports)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.catalog.genres import GenreService
from app.core.validation.pipeline import is_absent
from app.core.validation.rules import to_bool, to_date, to_int
from app.db.models.season import Episode, Season
from app.db.models.series import Serie

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


@dataclass
class ImportReport:
    series: int = 0
    seasons: int = 0
    episodes: int = 0
    skipped: int = 0


def _text(row: Row, key: str) -> str | None:
    value = row.get(key)
    if is_absent(value):
        return None
    # Exports escape newlines as a literal "\n".
    return str(value).replace("\\n", "\n")


class CatalogImporter:
    """Insert rows, mapping the ids used in the files to the ids the store assigns.

    Seasons are matched to series by ``serieId``; episodes to seasons by
    ``(serieId, season)``. Rows pointing at something unknown are skipped.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.report = ImportReport()
        self._series: dict[str, int] = {}
        self._seasons: dict[tuple[str, int], int] = {}

    async def import_series(self, rows: Iterable[Row]) -> None:
        genres = GenreService(self.db)
        for row in rows:
            serie = Serie(
                name=_text(row, "name") or "",
                air_date=to_date(row.get("airDate")),
                in_production=bool(to_bool(row.get("inProduction"))),
                tagline=_text(row, "tagline"),
                image=_text(row, "image") or "",
                description=_text(row, "description"),
                language=(_text(row, "language") or "")[:2],
                network=_text(row, "network"),
                url=_text(row, "homepage") or _text(row, "url"),
            )
            for name in (_text(row, "genres") or "").split(","):
                name = name.strip()
                if name:
                    serie.genres.append(await genres.get_or_create(name))
            self.db.add(serie)
            await self.db.flush()
            self._series[str(row.get("id"))] = serie.id
            self.report.series += 1

    async def import_seasons(self, rows: Iterable[Row]) -> None:
        for row in rows:
            csv_serie_id = str(row.get("serieId"))
            serie_id = self._series.get(csv_serie_id)
            number = to_int(row.get("number"))
            if serie_id is None or number is None:
                logger.warning("import.season_skipped serie=%s number=%s", csv_serie_id, row.get("number"))
                self.report.skipped += 1
                continue
            season = Season(
                serie_id=serie_id,
                name=_text(row, "name") or "",
                number=number,
                air_date=to_date(row.get("airDate")),
                overview=_text(row, "overview"),
                poster=_text(row, "poster") or "",
            )
            self.db.add(season)
            await self.db.flush()
            self._seasons[(csv_serie_id, number)] = season.id
            self.report.seasons += 1

    async def import_episodes(self, rows: Iterable[Row]) -> None:
        for row in rows:
            csv_serie_id = str(row.get("serieId"))
            season_id = self._seasons.get((csv_serie_id, to_int(row.get("season")) or 0))
            number = to_int(row.get("number"))
            if season_id is None or number is None:
                logger.warning(
                    "import.episode_skipped serie=%s season=%s number=%s",
                    csv_serie_id,
                    row.get("season"),
                    row.get("number"),
                )
                self.report.skipped += 1
                continue
            self.db.add(
                Episode(
                    serie_id=self._series[csv_serie_id],
                    season_id=season_id,
                    name=_text(row, "name") or "",
                    number=number,
                    air_date=to_date(row.get("airDate")),
                    overview=_text(row, "overview"),
                )
            )
            self.report.episodes += 1
        await self.db.flush()

    async def run(self, series: Iterable[Row], seasons: Iterable[Row], episodes: Iterable[Row]) -> ImportReport:
        await self.import_series(series)
        await self.import_seasons(seasons)
        await self.import_episodes(episodes)
        await self.db.commit()
        logger.info(
            "import.done series=%s seasons=%s episodes=%s skipped=%s",
            self.report.series,
            self.report.seasons,
            self.report.episodes,
            self.report.skipped,
        )
        return self.report
