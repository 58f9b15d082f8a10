import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlmodel import Session, col, select

from api.auth.utils import get_current_user
from api.db.models import Subscription, User
from api.db.session import get_session
from api.ownership import get_or_404
from api.relationships import toggle_subscription
from api.responses import api_response
from api.utils import Page, parse_id

logger = logging.getLogger("subscriptions")

router = APIRouter(tags=["subscriptions"])


def _list_linked_users(db_session: Session, pager: Page, match_column, user_column, user_id: str) -> dict:
    """Page through one side of the subscription graph, newest first."""
    total = db_session.exec(
        select(func.count()).select_from(Subscription).where(match_column == user_id)
    ).one()
    rows = db_session.exec(
        select(Subscription, User)
        .join(User, User.id == user_column)
        .where(match_column == user_id)
        .order_by(col(Subscription.created_at).desc(), col(Subscription.id))
        .offset(pager.offset)
        .limit(pager.limit)
    ).all()
    items = [
        {"id": sub.id, "subscribed_at": sub.created_at, "user": user.public_profile()}
        for sub, user in rows
    ]
    return pager.envelope(total, items)


@router.post("/c/{channel_id}")
def toggle_channel_subscription(
    channel_id: str,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    channel_id = parse_id(channel_id, "channel")
    result = toggle_subscription(db_session, current_user, channel_id)
    return api_response(
        {"is_subscribed": result.active, "subscribers_count": result.total},
        "Subscribed successfully" if result.active else "Unsubscribed successfully",
    )


@router.get("/c/{channel_id}")
def get_channel_subscribers(
    channel_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db_session: Session = Depends(get_session),
):
    channel_id = parse_id(channel_id, "channel")
    get_or_404(db_session, User, channel_id, "Channel")
    data = _list_linked_users(
        db_session, Page.from_query(page, limit),
        Subscription.channel_id, Subscription.subscriber_id, channel_id,
    )
    return api_response(data, "Subscribers fetched successfully")


@router.get("/u/{subscriber_id}")
def get_subscribed_channels(
    subscriber_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db_session: Session = Depends(get_session),
):
    subscriber_id = parse_id(subscriber_id, "subscriber")
    get_or_404(db_session, User, subscriber_id, "Subscriber")
    data = _list_linked_users(
        db_session, Page.from_query(page, limit),
        Subscription.subscriber_id, Subscription.channel_id, subscriber_id,
    )
    return api_response(data, "Subscribed channels fetched successfully")
