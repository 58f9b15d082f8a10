import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func
from sqlmodel import select

from api.db.models import Subscription
from api.errors import InvalidOperation, NotFound
from api.relationships import toggle_subscription


def test_self_subscription_is_rejected(db, make_user):
    user = make_user("selfie")
    with pytest.raises(InvalidOperation, match="cannot subscribe to yourself"):
        toggle_subscription(db, user, user.id)
    # Same identity passed in another representation
    with pytest.raises(InvalidOperation):
        toggle_subscription(db, uuid.UUID(user.id), user.id.upper())
    assert db.exec(select(func.count()).select_from(Subscription)).one() == 0


def test_subscription_toggle_round_trip(db, make_user):
    channel, fan, other = make_user("channel"), make_user("fan"), make_user("other")
    toggle_subscription(db, other, channel.id)

    on = toggle_subscription(db, fan, channel.id)
    assert on.active is True
    assert on.total == 2

    off = toggle_subscription(db, fan, channel.id)
    assert off.active is False
    assert off.total == 1


def test_subscribe_to_missing_channel(db, make_user):
    fan = make_user("fan")
    with pytest.raises(NotFound, match="Channel not found"):
        toggle_subscription(db, fan, str(uuid.uuid4()))


def test_subscription_endpoints(client: TestClient, signup):
    channel_headers, channel_id = signup("chan")
    fan_headers, fan_id = signup("follower")

    r = client.post(f"/api/subscriptions/c/{channel_id}", headers=fan_headers)
    assert r.status_code == 200
    assert r.json()["data"] == {"is_subscribed": True, "subscribers_count": 1}

    r = client.get(f"/api/subscriptions/c/{channel_id}")
    data = r.json()["data"]
    assert data["total"] == 1
    assert data["items"][0]["user"]["username"] == "follower"

    r = client.get(f"/api/subscriptions/u/{fan_id}")
    assert r.json()["data"]["items"][0]["user"]["id"] == channel_id

    r = client.post(f"/api/subscriptions/c/{channel_id}", headers=channel_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "You cannot subscribe to yourself"

    r = client.post(f"/api/subscriptions/c/{channel_id}", headers=fan_headers)
    assert r.json()["data"] == {"is_subscribed": False, "subscribers_count": 0}

    r = client.get(f"/api/subscriptions/c/{uuid.uuid4()}")
    assert r.status_code == 404
