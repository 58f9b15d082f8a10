import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from api.aggregates import list_liked_videos
from api.auth.utils import get_current_user
from api.db.models import LikeTarget, User
from api.db.session import get_session
from api.relationships import toggle_like
from api.responses import api_response
from api.utils import Page, parse_id

logger = logging.getLogger("likes")

router = APIRouter(tags=["likes"])


def _toggle_response(db_session: Session, current_user: User, kind: LikeTarget, target_id: str):
    target_id = parse_id(target_id, kind.value)
    result = toggle_like(db_session, current_user, kind, target_id)
    noun = kind.value.capitalize()
    return api_response(
        {"is_liked": result.active, "total_likes": result.total},
        f"{noun} liked successfully" if result.active else f"{noun} unliked successfully",
    )


@router.post("/toggle/v/{video_id}")
def toggle_video_like(
    video_id: str,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return _toggle_response(db_session, current_user, LikeTarget.VIDEO, video_id)


@router.post("/toggle/c/{comment_id}")
def toggle_comment_like(
    comment_id: str,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return _toggle_response(db_session, current_user, LikeTarget.COMMENT, comment_id)


@router.post("/toggle/t/{tweet_id}")
def toggle_tweet_like(
    tweet_id: str,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return _toggle_response(db_session, current_user, LikeTarget.TWEET, tweet_id)


@router.get("/videos")
def get_liked_videos(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Videos the current user liked, newest like first.
    """
    data = list_liked_videos(db_session, current_user, Page.from_query(page, limit))
    logger.info(f"Fetched {len(data['items'])} liked videos for user {current_user.id}")
    return api_response(data, "Liked videos fetched successfully")
