"""
Like / subscription toggling.

A toggle deletes the join row between an actor and a target when it exists
and creates it otherwise. The unique constraints on `Like` and
`Subscription` back the at-most-one-row invariant; when a concurrent request
wins the insert, the loser re-reads and reports the state it finds.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, select

from api.config import settings
from api.db.models import Comment, Like, LikeTarget, Subscription, Tweet, User, Video
from api.errors import Internal, InvalidOperation
from api.ownership import get_or_404, identity_of

logger = logging.getLogger("relationships")

RowT = TypeVar("RowT", bound=SQLModel)

LIKE_TARGETS = {
    LikeTarget.VIDEO: (Video, "Video"),
    LikeTarget.COMMENT: (Comment, "Comment"),
    LikeTarget.TWEET: (Tweet, "Tweet"),
}


@dataclass(frozen=True)
class ToggleResult:
    active: bool
    total: int


def toggle_row(
    db_session: Session,
    lookup: Callable[[], Optional[RowT]],
    create: Callable[[], RowT],
    max_attempts: Optional[int] = None,
) -> bool:
    """Flip a join row and return whether it exists afterwards."""
    max_attempts = max_attempts or settings.TOGGLE_MAX_ATTEMPTS
    existing = lookup()
    if existing is not None:
        db_session.delete(existing)
        db_session.commit()
        return False

    for attempt in range(1, max_attempts + 1):
        db_session.add(create())
        try:
            db_session.commit()
            return True
        except IntegrityError:
            db_session.rollback()
            logger.warning(f"Toggle insert conflicted (attempt {attempt}/{max_attempts}), re-reading")
            if lookup() is not None:
                # A concurrent request created the same row
                return True

    raise Internal("Could not update relationship, please retry")


def count_likes(db_session: Session, kind: LikeTarget, target_id: str) -> int:
    return db_session.exec(
        select(func.count()).select_from(Like).where(
            Like.target_kind == kind,
            Like.target_id == target_id,
        )
    ).one()


def count_subscribers(db_session: Session, channel_id: str) -> int:
    return db_session.exec(
        select(func.count()).select_from(Subscription).where(Subscription.channel_id == channel_id)
    ).one()


def toggle_like(db_session: Session, actor, kind: LikeTarget, target_id: str) -> ToggleResult:
    model, noun = LIKE_TARGETS[kind]
    get_or_404(db_session, model, target_id, noun)
    actor_id = identity_of(actor)

    def lookup() -> Optional[Like]:
        return db_session.exec(
            select(Like).where(
                Like.liked_by == actor_id,
                Like.target_kind == kind,
                Like.target_id == target_id,
            )
        ).first()

    active = toggle_row(
        db_session,
        lookup,
        lambda: Like(liked_by=actor_id, target_kind=kind, target_id=target_id),
    )
    total = count_likes(db_session, kind, target_id)
    logger.info(f"User {actor_id} {'liked' if active else 'unliked'} {kind.value} {target_id}")
    return ToggleResult(active=active, total=total)


def toggle_subscription(db_session: Session, actor, channel_id: str) -> ToggleResult:
    actor_id = identity_of(actor)
    if actor_id == identity_of(channel_id):
        raise InvalidOperation("You cannot subscribe to yourself")
    get_or_404(db_session, User, channel_id, "Channel")

    def lookup() -> Optional[Subscription]:
        return db_session.exec(
            select(Subscription).where(
                Subscription.subscriber_id == actor_id,
                Subscription.channel_id == channel_id,
            )
        ).first()

    active = toggle_row(
        db_session,
        lookup,
        lambda: Subscription(subscriber_id=actor_id, channel_id=channel_id),
    )
    total = count_subscribers(db_session, channel_id)
    logger.info(f"User {actor_id} {'subscribed to' if active else 'unsubscribed from'} channel {channel_id}")
    return ToggleResult(active=active, total=total)
