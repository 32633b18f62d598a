# artisan_market/api/routers/stories.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from artisan_market.api.deps import require_admin
from artisan_market.api.errors import http_error
from artisan_market.data.database import get_db
from artisan_market.domain.errors import NotFoundError
from artisan_market.domain.schemas import (
    StatusMessageOut,
    StoryAdminEnvelope,
    StoryAdminListOut,
    StoryApproveIn,
    StoryCreate,
    StoryEnvelope,
    StoryListOut,
)
from artisan_market.services.story_service import StoryService

router = APIRouter(prefix="/api/stories", tags=["stories"])


def get_service(db: Session):
    return StoryService(db)


@router.get("/", response_model=StoryListOut)
def list_stories(
    featured: bool = False,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    db: Session = Depends(get_db),
):
    return get_service(db).list_public(featured, page, limit)


@router.post("/", response_model=StoryEnvelope, status_code=201)
def submit_story(payload: StoryCreate, db: Session = Depends(get_db)):
    story = get_service(db).submit(payload.model_dump())
    return {
        "success": True,
        "message": "Thank you for sharing your story! It will be reviewed and published soon.",
        "data": story,
    }


#admin, declared before /{story_id}

@router.get("/admin/pending", response_model=StoryAdminListOut, dependencies=[Depends(require_admin)])
def pending_stories(db: Session = Depends(get_db)):
    return {"success": True, "data": get_service(db).list_pending()}


@router.put("/admin/{story_id}/approve", response_model=StoryAdminEnvelope, dependencies=[Depends(require_admin)])
def approve_story(story_id: int, payload: StoryApproveIn | None = None, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        story = svc.approve(story_id, payload.featured if payload else False)
    except NotFoundError as e:
        raise http_error(e)
    return {"success": True, "message": "Story approved", "data": story}


@router.delete("/admin/{story_id}/reject", response_model=StatusMessageOut, dependencies=[Depends(require_admin)])
def reject_story(story_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        svc.reject(story_id)
    except NotFoundError as e:
        raise http_error(e)
    return {"status": "success", "message": "Story rejected and removed"}


@router.get("/{story_id}", response_model=StoryEnvelope)
def get_story(story_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return {"success": True, "data": svc.get_public(story_id)}
    except NotFoundError as e:
        raise http_error(e)
