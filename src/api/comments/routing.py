import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlmodel import Session, col, select

from api.auth.utils import get_current_user
from api.db.models import Comment, User, Video, get_utc_now
from api.db.session import get_session
from api.ownership import get_or_404, get_owned_or_404
from api.responses import api_response
from api.utils import Page, parse_id

from .models import CommentContent, comment_payload

# Set up logging
logger = logging.getLogger("comments")

router = APIRouter(tags=["comments"])


@router.get("/video/{video_id}")
def get_video_comments(
    video_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db_session: Session = Depends(get_session),
):
    """
    Get comments for a video, newest first.
    """
    video_id = parse_id(video_id, "video")
    get_or_404(db_session, Video, video_id, "Video")
    pager = Page.from_query(page, limit)

    total = db_session.exec(
        select(func.count()).select_from(Comment).where(Comment.video_id == video_id)
    ).one()
    rows = db_session.exec(
        select(Comment, User)
        .join(User, User.id == Comment.owner_id)
        .where(Comment.video_id == video_id)
        .order_by(col(Comment.created_at).desc(), col(Comment.id))
        .offset(pager.offset)
        .limit(pager.limit)
    ).all()

    items = [comment_payload(comment, owner) for comment, owner in rows]
    return api_response(pager.envelope(total, items), "Comments fetched successfully")


@router.post("/video/{video_id}")
def add_comment(
    video_id: str,
    payload: CommentContent,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Create a comment on a video.
    """
    video_id = parse_id(video_id, "video")
    get_or_404(db_session, Video, video_id, "Video")

    comment = Comment(owner_id=current_user.id, video_id=video_id, content=payload.content)
    db_session.add(comment)
    db_session.commit()
    db_session.refresh(comment)

    logger.info(f"User {current_user.id} commented on video {video_id}")
    return api_response(comment_payload(comment, current_user), "Comment added successfully", status_code=201)


@router.patch("/{comment_id}")
def update_comment(
    comment_id: str,
    payload: CommentContent,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Update a comment (only by the comment author).
    """
    comment_id = parse_id(comment_id, "comment")
    comment = get_owned_or_404(db_session, Comment, comment_id, current_user, "Comment", "update")

    comment.content = payload.content
    comment.updated_at = get_utc_now()
    db_session.add(comment)
    db_session.commit()
    db_session.refresh(comment)

    logger.info(f"User {current_user.id} updated comment {comment_id}")
    return api_response(comment_payload(comment, current_user), "Comment updated successfully")


@router.delete("/{comment_id}")
def delete_comment(
    comment_id: str,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Delete a comment (only by the comment author).
    """
    comment_id = parse_id(comment_id, "comment")
    comment = get_owned_or_404(db_session, Comment, comment_id, current_user, "Comment", "delete")

    db_session.delete(comment)
    db_session.commit()

    logger.info(f"User {current_user.id} deleted comment {comment_id}")
    return api_response({}, "Comment deleted successfully")
