"""
Derived numbers and cross-referenced listings.

Nothing here is stored; every figure is computed from joins at read time.
The channel figures come from independent queries, so they agree with each
other only as far as no write lands between them.
"""
import logging
import math

from pydantic import BaseModel
from sqlalchemy import func
from sqlmodel import Session, col, select

from api.db.models import Comment, Like, LikeTarget, Playlist, PlaylistItem, Subscription, User, Video
from api.ownership import get_or_404, identity_of
from api.utils import Page
from api.videos.models import video_payload

logger = logging.getLogger("aggregates")


class ChannelStats(BaseModel):
    total_videos: int
    total_subscribers: int
    total_views: int
    total_likes: int
    total_comments: int
    average_views_per_video: int


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def get_channel_stats(db_session: Session, channel_id: str) -> ChannelStats:
    get_or_404(db_session, User, channel_id, "Channel")

    total_videos = db_session.exec(
        select(func.count()).select_from(Video).where(Video.owner_id == channel_id)
    ).one()

    total_subscribers = db_session.exec(
        select(func.count()).select_from(Subscription).where(Subscription.channel_id == channel_id)
    ).one()

    total_views = db_session.exec(
        select(func.coalesce(func.sum(Video.views), 0)).where(Video.owner_id == channel_id)
    ).one()

    total_likes = db_session.exec(
        select(func.count())
        .select_from(Like)
        .join(Video, Video.id == Like.target_id)
        .where(Like.target_kind == LikeTarget.VIDEO, Video.owner_id == channel_id)
    ).one()

    total_comments = db_session.exec(
        select(func.count())
        .select_from(Comment)
        .join(Video, Video.id == Comment.video_id)
        .where(Video.owner_id == channel_id)
    ).one()

    average = round_half_up(total_views / total_videos) if total_videos else 0

    logger.info(f"Computed stats for channel {channel_id}: {total_videos} videos, {total_views} views")
    return ChannelStats(
        total_videos=total_videos,
        total_subscribers=total_subscribers,
        total_views=int(total_views),
        total_likes=total_likes,
        total_comments=total_comments,
        average_views_per_video=average,
    )


def list_liked_videos(db_session: Session, actor, page: Page) -> dict:
    """Newest-first page of the videos an actor liked.

    Likes whose video no longer exists are dropped by the inner join, before
    pagination, so both `total` and the page only ever cover live videos.
    """
    actor_id = identity_of(actor)
    conditions = (
        Like.liked_by == actor_id,
        Like.target_kind == LikeTarget.VIDEO,
    )

    total = db_session.exec(
        select(func.count())
        .select_from(Like)
        .join(Video, Video.id == Like.target_id)
        .where(*conditions)
    ).one()

    rows = db_session.exec(
        select(Like, Video, User)
        .join(Video, Video.id == Like.target_id)
        .join(User, User.id == Video.owner_id)
        .where(*conditions)
        .order_by(col(Like.created_at).desc(), col(Like.id))
        .offset(page.offset)
        .limit(page.limit)
    ).all()

    items = [
        {
            "id": like.id,
            "liked_at": like.created_at,
            "video": video_payload(video, owner),
        }
        for like, video, owner in rows
    ]
    return page.envelope(total, items)


def list_playlist_videos(db_session: Session, playlist: Playlist, page: Page) -> dict:
    """Page through a playlist in its stored order.

    The page is cut from the reference sequence itself; references to
    videos that have since been deleted are skipped, so a page can come
    back shorter than `limit`.
    """
    references = db_session.exec(
        select(PlaylistItem.video_id)
        .where(PlaylistItem.playlist_id == playlist.id)
        .order_by(col(PlaylistItem.position), col(PlaylistItem.added_at))
    ).all()
    window = page.window(list(references))

    found = {}
    if window:
        rows = db_session.exec(
            select(Video, User)
            .join(User, User.id == Video.owner_id)
            .where(col(Video.id).in_(window))
        ).all()
        found = {video.id: video_payload(video, owner) for video, owner in rows}

    items = [found[video_id] for video_id in window if video_id in found]

    total = db_session.exec(
        select(func.count())
        .select_from(PlaylistItem)
        .join(Video, Video.id == PlaylistItem.video_id)
        .where(PlaylistItem.playlist_id == playlist.id)
    ).one()

    return page.envelope(total, items)
