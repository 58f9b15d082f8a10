import uuid

import pytest
from fastapi.testclient import TestClient

from api.db.models import Tweet
from api.errors import Forbidden, NotFound
from api.ownership import assert_owner, get_owned_or_404


def test_assert_owner_compares_canonical_identities(db, make_user):
    owner = make_user("owner")
    tweet = Tweet(owner_id=owner.id, content="hi")

    # Same identity in three representations
    assert_owner(tweet, owner)
    assert_owner(tweet, owner.id)
    assert_owner(tweet, uuid.UUID(owner.id))

    with pytest.raises(Forbidden):
        assert_owner(tweet, str(uuid.uuid4()))
    with pytest.raises(Forbidden):
        assert_owner(tweet, None)


def test_missing_entity_is_not_found_for_any_actor(db, make_user):
    stranger = make_user("stranger")
    with pytest.raises(NotFound):
        get_owned_or_404(db, Tweet, str(uuid.uuid4()), stranger, "Tweet", "delete")


def test_cannot_modify_other_users_comment(client: TestClient, signup, publish):
    headers1, _ = signup("user3")
    headers2, _ = signup("user4")
    video_id = publish(headers1)

    r = client.post(f"/api/comments/video/{video_id}", headers=headers1, json={"content": "mine"})
    comment_id = r.json()["data"]["id"]

    r = client.patch(f"/api/comments/{comment_id}", headers=headers2, json={"content": "hijacked"})
    assert r.status_code == 403
    r = client.delete(f"/api/comments/{comment_id}", headers=headers2)
    assert r.status_code == 403

    r = client.get(f"/api/comments/video/{video_id}")
    assert [c["content"] for c in r.json()["data"]["items"]] == ["mine"]


def test_cannot_touch_other_users_tweet_video_or_playlist(client: TestClient, signup, publish):
    headers1, _ = signup("user6")
    headers2, _ = signup("user7")

    tweet_id = client.post("/api/tweets/", headers=headers1, json={"content": "hello"}).json()["data"]["id"]
    assert client.delete(f"/api/tweets/{tweet_id}", headers=headers2).status_code == 403

    video_id = publish(headers1)
    assert client.delete(f"/api/videos/{video_id}", headers=headers2).status_code == 403
    assert client.patch(f"/api/videos/{video_id}/publish", headers=headers2).status_code == 403

    playlist_id = client.post("/api/playlists/", headers=headers1, json={"name": "Mine"}).json()["data"]["id"]
    assert client.patch(f"/api/playlists/add/{video_id}/{playlist_id}", headers=headers2).status_code == 403
    assert client.delete(f"/api/playlists/{playlist_id}", headers=headers2).status_code == 403

    # All still intact for the owner
    assert client.get(f"/api/videos/{video_id}").json()["data"]["is_published"] is True
    assert client.get(f"/api/playlists/{playlist_id}").status_code == 200
    assert client.get("/api/tweets/").json()["data"]["total"] == 1


def test_not_found_takes_precedence_over_forbidden(client: TestClient, signup):
    headers, _ = signup("user8")
    missing = str(uuid.uuid4())
    assert client.delete(f"/api/tweets/{missing}", headers=headers).status_code == 404
    assert client.patch(f"/api/comments/{missing}", headers=headers, json={"content": "x"}).status_code == 404
    assert client.delete(f"/api/playlists/{missing}", headers=headers).status_code == 404
