"""Article library and reading progress."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from bloom.dependencies import AppServices, CurrentUser
from bloom.models.content import Article, ProgressUpdate, UserContentProgress

router = APIRouter(prefix="/content", tags=["content"])


@router.get("/articles", response_model=list[Article])
async def list_articles(services: AppServices) -> Any:
    return services.content.list_articles()


@router.get("/articles/{article_id}", response_model=Article)
async def get_article(article_id: str, services: AppServices) -> Any:
    return services.content.get_article(article_id)


@router.get("/progress", response_model=list[UserContentProgress])
async def list_progress(user: CurrentUser, services: AppServices) -> Any:
    return await services.content.list_progress(user.user_id)


@router.put("/progress/{content_id}", response_model=UserContentProgress)
async def update_progress(
    content_id: str, user: CurrentUser, body: ProgressUpdate, services: AppServices
) -> Any:
    return await services.content.update_progress(user.user_id, content_id, body.status)
