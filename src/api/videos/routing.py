import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy import func, update
from sqlmodel import Session, col, select

from api.auth.utils import get_current_user
from api.db.models import User, Video, get_utc_now
from api.db.session import get_session
from api.errors import Internal, InvalidInput
from api.media.storage import MediaStore, get_media_store
from api.ownership import get_or_404, get_owned_or_404
from api.responses import api_response
from api.utils import Page, clean_text, parse_id

from .models import SORTABLE_FIELDS, VideoUpdate, video_payload

# Set up logging
logger = logging.getLogger("videos")

router = APIRouter(tags=["videos"])


def _delete_media_quietly(media: MediaStore, url: Optional[str]) -> None:
    """Blob cleanup never blocks the database change that triggered it."""
    if not url:
        return
    try:
        media.delete(url)
    except Exception as e:
        logger.error(f"Failed to delete media {url}: {e}")


def _upload(media: MediaStore, upload: UploadFile, folder: str):
    return media.upload(upload.file, upload.filename or "", upload.content_type, folder)


def list_videos(
    db_session: Session,
    page: Page,
    owner_id: Optional[str] = None,
    query: str = "",
    sort_by: str = "created_at",
    sort_type: str = "desc",
) -> dict:
    """Filtered, sorted page of videos with their owners."""
    if sort_by not in SORTABLE_FIELDS:
        raise InvalidInput(f"Cannot sort videos by '{sort_by}'")
    sort_column = col(SORTABLE_FIELDS[sort_by])
    order = sort_column.asc() if sort_type == "asc" else sort_column.desc()

    conditions = []
    if query:
        conditions.append(col(Video.title).ilike(f"%{query}%"))
    if owner_id:
        conditions.append(Video.owner_id == owner_id)

    total = db_session.exec(select(func.count()).select_from(Video).where(*conditions)).one()
    rows = db_session.exec(
        select(Video, User)
        .join(User, User.id == Video.owner_id)
        .where(*conditions)
        .order_by(order, col(Video.id))
        .offset(page.offset)
        .limit(page.limit)
    ).all()
    return page.envelope(total, [video_payload(video, owner) for video, owner in rows])


@router.get("/")
def get_all_videos(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    query: str = "",
    sort_by: str = "created_at",
    sort_type: str = "desc",
    user_id: Optional[str] = None,
    db_session: Session = Depends(get_session),
):
    """
    List videos.
    - Query params: query (title substring), user_id, sort_by, sort_type, page, limit
    """
    owner_id = parse_id(user_id, "user") if user_id else None
    data = list_videos(db_session, Page.from_query(page, limit), owner_id, query.strip(), sort_by, sort_type)
    return api_response(data, "Videos fetched successfully")


@router.post("/")
def publish_video(
    title: str = Form(""),
    description: str = Form(""),
    duration: float = Form(0),
    video_file: Optional[UploadFile] = File(None),
    thumbnail: Optional[UploadFile] = File(None),
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    media: MediaStore = Depends(get_media_store),
):
    """
    Publish a new video. Both files go to the media store before the row is written.
    """
    title, description = clean_text(title), clean_text(description)
    if not title or not description:
        raise InvalidInput("Title and description are required")
    if not video_file or not video_file.filename:
        raise InvalidInput("Video file is required")
    if not thumbnail or not thumbnail.filename:
        raise InvalidInput("Thumbnail is required")
    if duration < 0:
        raise InvalidInput("Duration cannot be negative")

    uploaded_video = _upload(media, video_file, "videos")
    uploaded_thumb = _upload(media, thumbnail, "thumbnails")
    if uploaded_video is None or uploaded_thumb is None:
        _delete_media_quietly(media, uploaded_video.url if uploaded_video else None)
        _delete_media_quietly(media, uploaded_thumb.url if uploaded_thumb else None)
        raise Internal("Failed to upload video or thumbnail")

    video = Video(
        owner_id=current_user.id,
        title=title,
        description=description,
        video_file=uploaded_video.url,
        thumbnail=uploaded_thumb.url,
        duration=duration,
    )
    db_session.add(video)
    db_session.commit()
    db_session.refresh(video)

    logger.info(f"User {current_user.id} published video {video.id}")
    return api_response(video_payload(video, current_user), "Video published successfully", status_code=201)


@router.get("/{video_id}")
def get_video_by_id(
    video_id: str,
    db_session: Session = Depends(get_session),
):
    """
    Fetch a video and count the view.
    """
    video_id = parse_id(video_id, "video")
    video = get_or_404(db_session, Video, video_id, "Video")

    db_session.exec(update(Video).where(Video.id == video_id).values(views=Video.views + 1))
    db_session.commit()
    db_session.refresh(video)

    owner = db_session.get(User, video.owner_id)
    return api_response(video_payload(video, owner), "Video fetched successfully")


@router.patch("/{video_id}")
def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    media: MediaStore = Depends(get_media_store),
):
    """
    Update title, description and/or thumbnail (owner only).
    """
    video_id = parse_id(video_id, "video")
    changes = VideoUpdate(title=title, description=description)
    has_thumbnail = bool(thumbnail and thumbnail.filename)
    if changes.title is None and changes.description is None and not has_thumbnail:
        raise InvalidInput("At least one field is required to update")

    video = get_owned_or_404(db_session, Video, video_id, current_user, "Video", "update")

    if has_thumbnail:
        uploaded = _upload(media, thumbnail, "thumbnails")
        if uploaded is None:
            raise Internal("Failed to upload thumbnail")
        _delete_media_quietly(media, video.thumbnail)
        video.thumbnail = uploaded.url

    if changes.title is not None:
        video.title = changes.title
    if changes.description is not None:
        video.description = changes.description
    video.updated_at = get_utc_now()

    db_session.add(video)
    db_session.commit()
    db_session.refresh(video)

    logger.info(f"User {current_user.id} updated video {video_id}")
    return api_response(video_payload(video, current_user), "Video updated successfully")


@router.delete("/{video_id}")
def delete_video(
    video_id: str,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    media: MediaStore = Depends(get_media_store),
):
    """
    Delete a video. Stored blobs are removed on a best-effort basis.
    """
    video_id = parse_id(video_id, "video")
    video = get_owned_or_404(db_session, Video, video_id, current_user, "Video", "delete")

    _delete_media_quietly(media, video.video_file)
    _delete_media_quietly(media, video.thumbnail)

    db_session.delete(video)
    db_session.commit()

    logger.info(f"User {current_user.id} deleted video {video_id}")
    return api_response({}, "Video deleted successfully")


@router.patch("/{video_id}/publish")
def toggle_publish_status(
    video_id: str,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    video_id = parse_id(video_id, "video")
    video = get_owned_or_404(
        db_session, Video, video_id, current_user, "Video", "change the publish status of"
    )
    video.is_published = not video.is_published
    video.updated_at = get_utc_now()
    db_session.add(video)
    db_session.commit()
    db_session.refresh(video)

    state = "published" if video.is_published else "unpublished"
    logger.info(f"User {current_user.id} set video {video_id} {state}")
    return api_response(video_payload(video, current_user), f"Video is now {state}")
