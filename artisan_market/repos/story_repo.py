from typing import List, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from artisan_market.data.models.story import StoryModel


class StoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_approved(self, featured_only: bool, page: int, limit: int) -> Tuple[List[StoryModel], int]:
        conditions = [StoryModel.is_approved.is_(True)]
        if featured_only:
            conditions.append(StoryModel.featured.is_(True))

        total = self.db.execute(select(func.count(StoryModel.id)).where(*conditions)).scalar_one()
        items = list(
            self.db.execute(
                select(StoryModel)
                .where(*conditions)
                .order_by(StoryModel.featured.desc(), StoryModel.created_at.desc(), StoryModel.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            ).scalars()
        )
        return items, total

    def list_pending(self) -> List[StoryModel]:
        return list(
            self.db.execute(
                select(StoryModel)
                .where(StoryModel.is_approved.is_(False))
                .order_by(StoryModel.created_at.desc(), StoryModel.id.desc())
            ).scalars()
        )

    def get(self, story_id: int) -> StoryModel | None:
        return self.db.get(StoryModel, story_id)

    def get_approved(self, story_id: int) -> StoryModel | None:
        return self.db.execute(
            select(StoryModel).where(StoryModel.id == story_id, StoryModel.is_approved.is_(True))
        ).scalar_one_or_none()

    def create(self, story: StoryModel) -> StoryModel:
        self.db.add(story)
        self.db.commit()
        self.db.refresh(story)
        return story

    def save(self, story: StoryModel) -> StoryModel:
        self.db.add(story)
        self.db.commit()
        self.db.refresh(story)
        return story

    def delete(self, story: StoryModel):
        self.db.delete(story)
        self.db.commit()
