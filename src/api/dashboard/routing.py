import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from api.aggregates import get_channel_stats
from api.auth.utils import get_current_user
from api.db.models import User
from api.db.session import get_session
from api.responses import api_response
from api.utils import Page, parse_id
from api.videos.routing import list_videos

logger = logging.getLogger("dashboard")

router = APIRouter(tags=["dashboard"])


@router.get("/stats")
def get_my_channel_stats(
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Totals for the current user's channel: videos, subscribers, views, likes, comments.
    """
    stats = get_channel_stats(db_session, current_user.id)
    return api_response(stats.model_dump(), "Channel stats fetched successfully")


@router.get("/stats/{channel_id}")
def get_channel_stats_by_id(
    channel_id: str,
    db_session: Session = Depends(get_session),
):
    channel_id = parse_id(channel_id, "channel")
    stats = get_channel_stats(db_session, channel_id)
    return api_response(stats.model_dump(), "Channel stats fetched successfully")


@router.get("/videos")
def get_channel_videos(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort_by: str = "created_at",
    sort_type: str = "desc",
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    The current user's own videos, published or not.
    """
    data = list_videos(
        db_session, Page.from_query(page, limit), owner_id=current_user.id,
        sort_by=sort_by, sort_type=sort_type,
    )
    logger.info(f"Retrieved {len(data['items'])} channel videos for user {current_user.id}")
    return api_response(data, "Channel videos fetched successfully")
