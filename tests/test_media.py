import io

import boto3
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from api.media.storage import MediaStore


def _client():
    return boto3.client(
        "s3", region_name="us-east-1", aws_access_key_id="test", aws_secret_access_key="test"
    )


def test_keys_are_recovered_from_urls():
    store = MediaStore(_client(), "media", "https://cdn.example.com/")
    assert store.url_for("videos/a.mp4") == "https://cdn.example.com/videos/a.mp4"
    assert store.key_for("https://cdn.example.com/videos/a.mp4") == "videos/a.mp4"
    assert store.key_for("videos/a.mp4") == "videos/a.mp4"
    assert store.key_for("s3://media/thumbnails/b.jpg") == "thumbnails/b.jpg"
    assert store.key_for("http://minio:9000/media/videos/c.mp4") == "videos/c.mp4"


def test_delete_issues_delete_object():
    client = _client()
    store = MediaStore(client, "media")
    with Stubber(client) as stub:
        stub.add_response("delete_object", {}, {"Bucket": "media", "Key": "videos/a.mp4"})
        store.delete("s3://media/videos/a.mp4")
        stub.assert_no_pending_responses()


class RecordingClient:
    def __init__(self, error=None):
        self.error = error
        self.uploads = []

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        if self.error:
            raise self.error
        self.uploads.append((bucket, key, ExtraArgs, fileobj.read()))


def test_upload_stores_under_folder_and_returns_url():
    client = RecordingClient()
    store = MediaStore(client, "media", "https://cdn.example.com")
    uploaded = store.upload(io.BytesIO(b"bytes"), "Clip.MP4", "video/mp4", "videos")

    bucket, key, extra, body = client.uploads[0]
    assert bucket == "media"
    assert key == uploaded.key
    assert key.startswith("videos/") and key.endswith(".mp4")
    assert extra == {"ContentType": "video/mp4"}
    assert body == b"bytes"
    assert uploaded.url == f"https://cdn.example.com/{key}"


def test_failed_upload_returns_none():
    error = ClientError({"Error": {"Code": "500", "Message": "boom"}}, "PutObject")
    store = MediaStore(RecordingClient(error), "media")
    assert store.upload(io.BytesIO(b"bytes"), "clip.mp4", None, "videos") is None
