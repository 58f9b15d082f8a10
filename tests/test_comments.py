import uuid

from fastapi.testclient import TestClient


def test_comment_lifecycle(client: TestClient, signup, publish):
    headers, _ = signup("talker")
    video_id = publish(headers)

    r = client.post(f"/api/comments/video/{video_id}", headers=headers, json={"content": "  first!  "})
    assert r.status_code == 201
    comment = r.json()["data"]
    assert comment["content"] == "first!"
    assert comment["owner"]["username"] == "talker"

    r = client.patch(f"/api/comments/{comment['id']}", headers=headers, json={"content": "edited"})
    assert r.json()["data"]["content"] == "edited"

    r = client.get(f"/api/comments/video/{video_id}")
    assert r.json()["data"]["total"] == 1

    assert client.delete(f"/api/comments/{comment['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/comments/video/{video_id}").json()["data"]["total"] == 0


def test_comment_on_missing_video(client: TestClient, signup):
    headers, _ = signup("talker")
    r = client.post(f"/api/comments/video/{uuid.uuid4()}", headers=headers, json={"content": "hello"})
    assert r.status_code == 404
    assert r.json()["message"] == "Video not found"
