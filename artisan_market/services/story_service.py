import math
from typing import Any, Dict

from sqlalchemy.orm import Session

from artisan_market.data.models.story import DEFAULT_STORY_AVATAR, StoryModel
from artisan_market.domain.errors import NotFoundError
from artisan_market.repos.story_repo import StoryRepo
from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)


class StoryService:
    """Customer stories. Public reads only ever see approved stories."""

    def __init__(self, db: Session):
        self.repo = StoryRepo(db)

    def list_public(self, featured_only: bool = False, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        page = max(1, page)
        limit = max(1, min(limit, 50))
        items, total = self.repo.list_approved(featured_only, page, limit)
        return {
            "success": True,
            "data": items,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            },
        }

    def get_public(self, story_id: int) -> StoryModel:
        story = self.repo.get_approved(story_id)
        if not story:
            raise NotFoundError("Story not found")
        return story

    def submit(self, data: Dict[str, Any]) -> StoryModel:
        if not data.get("image"):
            data["image"] = DEFAULT_STORY_AVATAR
        story = self.repo.create(StoryModel(is_approved=False, featured=False, **data))
        logger.info(f"Story {story.id} submitted by {story.name}, awaiting approval")
        return story

    # admin

    def list_pending(self):
        return self.repo.list_pending()

    def approve(self, story_id: int, featured: bool = False) -> StoryModel:
        story = self.repo.get(story_id)
        if not story:
            raise NotFoundError("Story not found")
        story.is_approved = True
        story.featured = featured
        logger.info(f"Story {story_id} approved (featured={featured})")
        return self.repo.save(story)

    def reject(self, story_id: int):
        story = self.repo.get(story_id)
        if not story:
            raise NotFoundError("Story not found")
        self.repo.delete(story)
        logger.info(f"Story {story_id} rejected and removed")
