"""Tests du pipeline de rafraichissement / Refresh pipeline tests."""

import random

import pytest
from sqlalchemy import func, select

from countries_api.exceptions import DataSourceUnavailable, RefreshInProgress
from countries_api.models.country import Country
from countries_api.services.refresh import RefreshGuard, RefreshPipeline
from countries_api.services.summary_image import SummaryImageService


def make_pipeline(session_factory, upstream, image_path, guard=None, rng=None):
    return RefreshPipeline(
        session_factory,
        upstream.service(),
        SummaryImageService(image_path),
        guard or RefreshGuard(),
        rng=rng,
    )


async def test_run_applies_policy_table(session_factory, upstream, image_path):
    result = await make_pipeline(session_factory, upstream, image_path).run()
    assert (result.inserted, result.updated, result.skipped) == (5, 0, 0)
    assert result.image_path == image_path

    async with session_factory() as session:
        countries = {c.name: c for c in (await session.execute(select(Country))).scalars()}

    antarctica = countries["Antarctica"]
    assert (antarctica.currency_code, antarctica.exchange_rate, antarctica.estimated_gdp) == (None, None, 0)

    atlantis = countries["Atlantis"]
    assert (atlantis.currency_code, atlantis.exchange_rate, atlantis.estimated_gdp) == ("ATL", None, None)

    nigeria = countries["Nigeria"]
    assert nigeria.exchange_rate == 1600.23
    assert 206139589 * 1000 / 1600.23 - 0.01 <= nigeria.estimated_gdp <= 206139589 * 2000 / 1600.23 + 0.01
    assert nigeria.capital == "Abuja"
    assert nigeria.flag_url == "https://flagcdn.com/ng.svg"
    assert nigeria.last_refreshed_at is not None


async def test_run_skips_nameless_records(session_factory, upstream, image_path):
    upstream.countries = upstream.countries + [{"population": 5}, {"name": "  "}, "junk"]
    result = await make_pipeline(session_factory, upstream, image_path).run()
    assert result.inserted == 5
    assert result.skipped == 3


async def test_unavailable_source_writes_nothing(session_factory, upstream, image_path):
    upstream.rates = {"result": "error"}
    with pytest.raises(DataSourceUnavailable):
        await make_pipeline(session_factory, upstream, image_path).run()
    async with session_factory() as session:
        assert await session.scalar(select(func.count(Country.id))) == 0


async def test_second_run_updates_in_place(session_factory, upstream, image_path):
    pipeline = make_pipeline(session_factory, upstream, image_path, rng=random.Random(7))
    await pipeline.run()
    async with session_factory() as session:
        ids_before = dict((await session.execute(select(Country.name, Country.id))).all())

    upstream.countries = [dict(c, name=c["name"].lower()) for c in upstream.countries]
    result = await pipeline.run()
    assert (result.inserted, result.updated) == (0, 5)

    async with session_factory() as session:
        ids_after = dict((await session.execute(select(Country.name, Country.id))).all())
    assert ids_after == ids_before


async def test_guard_rejects_overlapping_refresh(session_factory, upstream, image_path):
    guard = RefreshGuard()
    pipeline = make_pipeline(session_factory, upstream, image_path, guard=guard)
    async with guard.hold():
        assert guard.busy
        with pytest.raises(RefreshInProgress):
            await pipeline.run()
    assert not guard.busy
    result = await pipeline.run()
    assert result.inserted == 5


async def test_guard_released_after_failure(session_factory, upstream, image_path):
    guard = RefreshGuard()
    upstream.countries_status = 502
    with pytest.raises(DataSourceUnavailable):
        await make_pipeline(session_factory, upstream, image_path, guard=guard).run()
    assert not guard.busy
