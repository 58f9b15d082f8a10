import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["RATE_LIMIT_ENABLED"] = "0"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from main import app  # noqa: E402
from api.db.models import Comment, User, Video
from api.db.session import engine
from api.media.storage import UploadedMedia, get_media_store

PASSWORD = "Passw0rd1"


class FakeMediaStore:
    """In-process stand-in for the S3 bucket."""

    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.fail_uploads = False
        self.fail_deletes = False

    def upload(self, fileobj, filename, content_type, folder):
        if self.fail_uploads:
            return None
        key = f"{folder}/{len(self.objects) + 1}-{filename}"
        self.objects[key] = fileobj.read()
        return UploadedMedia(url=f"https://media.test/{key}", key=key)

    def delete(self, url_or_key):
        if self.fail_deletes:
            raise RuntimeError("media service unavailable")
        self.deleted.append(url_or_key)


@pytest.fixture(autouse=True)
def schema():
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def db():
    with Session(engine) as session:
        yield session


@pytest.fixture
def media():
    store = FakeMediaStore()
    app.dependency_overrides[get_media_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_media_store, None)


@pytest.fixture
def client(media):
    return TestClient(app)


@pytest.fixture
def signup(client):
    """Register a user through the API and return (headers, user_id)."""
    def _signup(username: str):
        r = client.post(
            "/api/auth/signup",
            json={"username": username, "email": f"{username}@example.com", "password": PASSWORD},
        )
        assert r.status_code == 201, r.text
        data = r.json()["data"]
        return {"Authorization": f"Bearer {data['access_token']}"}, data["user"]["id"]
    return _signup


@pytest.fixture
def publish(client):
    """Publish a video through the API and return its id."""
    def _publish(headers: dict, title: str = "A video"):
        r = client.post(
            "/api/videos/",
            headers=headers,
            data={"title": title, "description": "About it", "duration": "12.5"},
            files={
                "video_file": ("clip.mp4", b"video-bytes", "video/mp4"),
                "thumbnail": ("thumb.jpg", b"thumb-bytes", "image/jpeg"),
            },
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]["id"]
    return _publish


@pytest.fixture
def make_user(db):
    def _make_user(username: str) -> User:
        user = User(username=username, email=f"{username}@example.com", hashed_password="not-a-hash")
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_video(db):
    def _make_video(owner: User, title: str = "video", views: int = 0) -> Video:
        video = Video(
            owner_id=owner.id,
            title=title,
            description="",
            video_file=f"https://media.test/videos/{title}.mp4",
            thumbnail=f"https://media.test/thumbnails/{title}.jpg",
            views=views,
        )
        db.add(video)
        db.commit()
        db.refresh(video)
        return video
    return _make_video


@pytest.fixture
def make_comment(db):
    def _make_comment(owner: User, video: Video, content: str = "nice") -> Comment:
        comment = Comment(owner_id=owner.id, video_id=video.id, content=content)
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment
    return _make_comment
