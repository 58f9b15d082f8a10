import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, delete, select

from api.aggregates import list_playlist_videos
from api.auth.utils import get_current_user
from api.db.models import Playlist, PlaylistItem, User, Video, get_utc_now
from api.db.session import get_session
from api.errors import InvalidInput, NotFound
from api.ownership import get_or_404, get_owned_or_404
from api.responses import api_response
from api.utils import Page, parse_id

from .models import PlaylistCreate, PlaylistUpdate, playlist_payload

# Set up logging
logger = logging.getLogger("playlists")

router = APIRouter(tags=["playlists"])


def _video_count(db_session: Session, playlist_id: str) -> int:
    return db_session.exec(
        select(func.count())
        .select_from(PlaylistItem)
        .join(Video, Video.id == PlaylistItem.video_id)
        .where(PlaylistItem.playlist_id == playlist_id)
    ).one()


def _find_item(db_session: Session, playlist_id: str, video_id: str) -> Optional[PlaylistItem]:
    return db_session.exec(
        select(PlaylistItem).where(
            PlaylistItem.playlist_id == playlist_id,
            PlaylistItem.video_id == video_id,
        )
    ).first()


def _touch(db_session: Session, playlist: Playlist) -> None:
    playlist.updated_at = get_utc_now()
    db_session.add(playlist)
    db_session.commit()
    db_session.refresh(playlist)


# Playlist CRUD Endpoints
@router.post("/")
def create_playlist(
    payload: PlaylistCreate,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Create a new, empty playlist.
    """
    playlist = Playlist(owner_id=current_user.id, name=payload.name, description=payload.description or "")
    db_session.add(playlist)
    db_session.commit()
    db_session.refresh(playlist)

    logger.info(f"User {current_user.id} created playlist '{playlist.name}'")
    return api_response(
        playlist_payload(playlist, current_user, total_videos=0),
        "Playlist created successfully",
        status_code=201,
    )


@router.get("/user/{user_id}")
def get_user_playlists(
    user_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db_session: Session = Depends(get_session),
):
    """
    Get the playlists of a user with their video counts.
    """
    user_id = parse_id(user_id, "user")
    owner = get_or_404(db_session, User, user_id, "User")
    pager = Page.from_query(page, limit)

    total = db_session.exec(
        select(func.count()).select_from(Playlist).where(Playlist.owner_id == user_id)
    ).one()
    playlists = db_session.exec(
        select(Playlist)
        .where(Playlist.owner_id == user_id)
        .order_by(col(Playlist.created_at).desc(), col(Playlist.id))
        .offset(pager.offset)
        .limit(pager.limit)
    ).all()

    items = [
        playlist_payload(playlist, owner, total_videos=_video_count(db_session, playlist.id))
        for playlist in playlists
    ]
    return api_response(pager.envelope(total, items), "User playlists fetched successfully")


@router.get("/{playlist_id}")
def get_playlist_by_id(
    playlist_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = "20",
    db_session: Session = Depends(get_session),
):
    """
    Get a playlist and one page of its videos in playlist order.
    """
    playlist_id = parse_id(playlist_id, "playlist")
    playlist = get_or_404(db_session, Playlist, playlist_id, "Playlist")
    owner = db_session.get(User, playlist.owner_id)

    videos = list_playlist_videos(db_session, playlist, Page.from_query(page, limit))
    return api_response(
        {"playlist": playlist_payload(playlist, owner), **videos},
        "Playlist fetched successfully",
    )


@router.patch("/{playlist_id}")
def update_playlist(
    playlist_id: str,
    payload: PlaylistUpdate,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Update playlist name and/or description.
    """
    playlist_id = parse_id(playlist_id, "playlist")
    if payload.name is None and payload.description is None:
        raise InvalidInput("At least one field (name or description) is required to update")

    playlist = get_owned_or_404(db_session, Playlist, playlist_id, current_user, "Playlist", "update")
    if payload.name is not None:
        playlist.name = payload.name
    if payload.description is not None:
        playlist.description = payload.description
    _touch(db_session, playlist)

    logger.info(f"User {current_user.id} updated playlist {playlist_id}")
    return api_response(
        playlist_payload(playlist, current_user, total_videos=_video_count(db_session, playlist_id)),
        "Playlist updated successfully",
    )


@router.delete("/{playlist_id}")
def delete_playlist(
    playlist_id: str,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Delete a playlist and all its items.
    """
    playlist_id = parse_id(playlist_id, "playlist")
    playlist = get_owned_or_404(db_session, Playlist, playlist_id, current_user, "Playlist", "delete")

    # Delete playlist items first (due to foreign key constraint)
    db_session.exec(delete(PlaylistItem).where(PlaylistItem.playlist_id == playlist_id))
    db_session.delete(playlist)
    db_session.commit()

    logger.info(f"User {current_user.id} deleted playlist {playlist_id}")
    return api_response({}, "Playlist deleted successfully")


# Playlist Item Management
@router.patch("/add/{video_id}/{playlist_id}")
def add_video_to_playlist(
    video_id: str,
    playlist_id: str,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Append a video to the end of a playlist.
    """
    video_id = parse_id(video_id, "video")
    playlist_id = parse_id(playlist_id, "playlist")

    playlist = get_owned_or_404(db_session, Playlist, playlist_id, current_user, "Playlist", "modify")
    get_or_404(db_session, Video, video_id, "Video")

    existing_item = _find_item(db_session, playlist_id, video_id)
    if existing_item:
        raise InvalidInput("Video already exists in playlist")

    # Get next position
    max_position = db_session.exec(
        select(func.max(PlaylistItem.position)).where(PlaylistItem.playlist_id == playlist_id)
    ).one()
    position = 0 if max_position is None else max_position + 1

    db_session.add(PlaylistItem(playlist_id=playlist_id, video_id=video_id, position=position))
    try:
        db_session.commit()
    except IntegrityError:
        # A concurrent add won the unique (playlist, video) slot
        db_session.rollback()
        raise InvalidInput("Video already exists in playlist")
    _touch(db_session, playlist)

    logger.info(f"User {current_user.id} added video {video_id} to playlist {playlist_id}")
    return api_response(
        playlist_payload(playlist, current_user, total_videos=_video_count(db_session, playlist_id)),
        "Video added to playlist",
    )


@router.patch("/remove/{video_id}/{playlist_id}")
def remove_video_from_playlist(
    video_id: str,
    playlist_id: str,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Remove a video from a playlist, keeping the order of the rest.
    """
    video_id = parse_id(video_id, "video")
    playlist_id = parse_id(playlist_id, "playlist")

    playlist = get_owned_or_404(db_session, Playlist, playlist_id, current_user, "Playlist", "modify")

    item = _find_item(db_session, playlist_id, video_id)
    if not item:
        raise NotFound("Video not found in playlist")

    db_session.delete(item)
    _touch(db_session, playlist)

    logger.info(f"User {current_user.id} removed video {video_id} from playlist {playlist_id}")
    return api_response(
        playlist_payload(playlist, current_user, total_videos=_video_count(db_session, playlist_id)),
        "Video removed from playlist",
    )
