"""Tests for the article library and reading progress."""

from __future__ import annotations

import pytest

from bloom.conftest import ALICE
from bloom.errors import InvalidInputError, NotFoundError
from bloom.models.content import ProgressStatus
from bloom.services.container import Services


class TestContent:
    def test_articles_come_from_catalog(self, services: Services) -> None:
        assert {a.id for a in services.content.list_articles()} >= {"art-1", "art-2"}
        assert services.content.get_article("art-1").title

    def test_unknown_article(self, services: Services) -> None:
        with pytest.raises(NotFoundError):
            services.content.get_article("art-404")

    @pytest.mark.asyncio
    async def test_start_then_complete(self, services: Services) -> None:
        started = await services.content.update_progress(ALICE, "art-1", "started")
        assert started.progress_percentage == 10
        done = await services.content.update_progress(ALICE, "art-1", ProgressStatus.completed)
        assert done.id == started.id
        assert done.progress_percentage == 100
        assert len(await services.content.list_progress(ALICE)) == 1

    @pytest.mark.asyncio
    async def test_restart_keeps_percentage(self, services: Services) -> None:
        await services.content.update_progress(ALICE, "art-2", "completed")
        again = await services.content.update_progress(ALICE, "art-2", "started")
        assert again.status == ProgressStatus.started
        assert again.progress_percentage == 100

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["not_started", "finished"])
    async def test_rejected_statuses(self, services: Services, status: str) -> None:
        with pytest.raises(InvalidInputError):
            await services.content.update_progress(ALICE, "art-1", status)

    @pytest.mark.asyncio
    async def test_progress_for_unknown_article(self, services: Services) -> None:
        with pytest.raises(NotFoundError):
            await services.content.update_progress(ALICE, "art-404", "started")
