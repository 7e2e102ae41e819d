"""
Service de l'image de synthèse / Summary image service.
Génère cache/summary.png après chaque rafraichissement réussi (best-effort).
Renders cache/summary.png after every successful refresh (best-effort).
"""

import asyncio
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime

import matplotlib

matplotlib.use("Agg")

from matplotlib.figure import Figure  # noqa: E402
from sqlalchemy import func, select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from countries_api.models.country import Country  # noqa: E402

logger = logging.getLogger(__name__)

TOP_N = 5


@dataclass
class SummaryEntry:
    name: str
    estimated_gdp: float | None


@dataclass
class SummarySnapshot:
    total_countries: int
    refreshed_at: datetime
    top: list[SummaryEntry]


def escape_markup(text: str) -> str:
    """
    Neutraliser le balisage mathtext de matplotlib / Neutralise matplotlib mathtext markup.
    Un '$' non échappé ouvre une formule / An unescaped '$' starts a formula.
    """
    return str(text).replace("$", r"\$")


def format_gdp(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:,.2f}"


def summary_lines(snapshot: SummarySnapshot) -> list[str]:
    """Lignes du top 5, déjà échappées / Top 5 lines, already escaped."""
    if not snapshot.top:
        return ["No GDP data available."]
    return [
        escape_markup(f"{rank}. {entry.name} - {format_gdp(entry.estimated_gdp)}")
        for rank, entry in enumerate(snapshot.top, start=1)
    ]


def render_summary(snapshot: SummarySnapshot, path: str) -> str:
    """Dessiner et écrire le PNG de façon atomique / Draw and atomically write the PNG."""
    fig = Figure(figsize=(10, 6), dpi=100, facecolor="white")
    fig.text(0.04, 0.92, "Countries Summary", fontsize=22, fontweight="bold", color="#111111")
    fig.text(0.04, 0.84, escape_markup(f"Total countries: {snapshot.total_countries}"),
             fontsize=14, color="#222222")
    fig.text(0.04, 0.79, escape_markup(f"Last refreshed at: {snapshot.refreshed_at.isoformat()}"),
             fontsize=14, color="#222222")
    fig.text(0.04, 0.70, "Top 5 countries by estimated GDP:", fontsize=14, color="#222222")

    y = 0.64
    for line in summary_lines(snapshot):
        fig.text(0.07, y, line, fontsize=12, color="#333333")
        y -= 0.05

    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=".summary-", suffix=".png", dir=directory)
    try:
        with os.fdopen(fd, "wb") as fh:
            fig.savefig(fh, format="png")
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    return path


class SummaryImageService:
    """Image de synthèse après commit / Post-commit summary image."""

    def __init__(self, image_path: str):
        self.image_path = image_path

    @staticmethod
    async def load_snapshot(session: AsyncSession, refreshed_at: datetime) -> SummarySnapshot:
        """Relire les données validées / Re-read committed data."""
        total = await session.scalar(select(func.count(Country.id)))
        result = await session.execute(
            select(Country.name, Country.estimated_gdp)
            .where(Country.estimated_gdp.is_not(None))
            .order_by(Country.estimated_gdp.desc(), Country.id)
            .limit(TOP_N)
        )
        top = [SummaryEntry(name=name, estimated_gdp=gdp) for name, gdp in result.all()]
        return SummarySnapshot(total_countries=total or 0, refreshed_at=refreshed_at, top=top)

    async def generate(
        self, session_factory: async_sessionmaker[AsyncSession], refreshed_at: datetime
    ) -> str | None:
        """
        Générer l'image; une erreur est journalisée, jamais propagée.
        Generate the image; failures are logged, never raised.
        """
        try:
            async with session_factory() as session:
                snapshot = await self.load_snapshot(session, refreshed_at)
            path = await asyncio.to_thread(render_summary, snapshot, self.image_path)
        except Exception:
            logger.exception("Summary image generation failed")
            return None
        logger.info("Summary image written to %s", path)
        return path
