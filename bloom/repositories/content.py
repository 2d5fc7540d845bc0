"""Article library and per-user reading progress."""

from __future__ import annotations

from bloom.catalog import Catalog
from bloom.errors import InvalidInputError, NotFoundError
from bloom.models.base import utc_now
from bloom.models.content import Article, ProgressStatus, UserContentProgress
from bloom.repositories.base import Repository
from bloom.storage import EntityStore

# Progress recorded the first time an article is opened
_STARTED_PCT = 10


class ContentRepository(Repository[UserContentProgress]):
    model = UserContentProgress
    resource = "Content progress"

    def __init__(self, store: EntityStore, key: str, catalog: Catalog) -> None:
        super().__init__(store, key)
        self._catalog = catalog

    def list_articles(self) -> list[Article]:
        return list(self._catalog.articles)

    def get_article(self, article_id: str) -> Article:
        article = self._catalog.article(article_id)
        if article is None:
            raise NotFoundError("Article", article_id)
        return article

    async def list_progress(self, user_id: str) -> list[UserContentProgress]:
        return await self._for_user(user_id)

    async def update_progress(
        self, user_id: str, content_id: str, status: ProgressStatus | str
    ) -> UserContentProgress:
        """Record that the user started or completed an article.

        One progress record per (user, article).  Completion always sets 100%;
        starting a new article sets 10%; restarting keeps the current percentage.
        """
        self.get_article(content_id)
        try:
            status = ProgressStatus(status)
        except ValueError as exc:
            raise InvalidInputError(f"Unknown progress status: {status}") from exc
        if status == ProgressStatus.not_started:
            raise InvalidInputError("Progress can only move to started or completed")

        result: list[UserContentProgress] = []

        def _apply(rows: list[UserContentProgress]) -> list[UserContentProgress]:
            out = []
            for row in rows:
                if row.user_id == user_id and row.content_id == content_id:
                    pct = 100 if status == ProgressStatus.completed else row.progress_percentage
                    row = row.model_copy(
                        update={"status": status, "progress_percentage": pct, "last_accessed": utc_now()}
                    )
                    result.append(row)
                out.append(row)
            if not result:
                row = UserContentProgress(
                    user_id=user_id,
                    content_id=content_id,
                    status=status,
                    progress_percentage=100 if status == ProgressStatus.completed else _STARTED_PCT,
                )
                result.append(row)
                out.append(row)
            return out

        await self._mutate(_apply)
        return result[0]
