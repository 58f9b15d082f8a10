from fastapi.testclient import TestClient

from api.utils import Page


def test_page_clamps_free_form_values():
    assert Page.from_query(0, 0) == Page(page=1, limit=1)
    assert Page.from_query(-3, -10) == Page(page=1, limit=1)
    assert Page.from_query("2", "1000") == Page(page=2, limit=100)
    assert Page.from_query("abc", None) == Page(page=1, limit=10)
    assert Page.from_query(3, 5).offset == 10


def test_page_window_slices_a_sequence():
    page = Page.from_query(2, 2)
    assert page.window(["a", "b", "c", "d", "e"]) == ["c", "d"]
    assert Page.from_query(4, 2).window(["a", "b", "c"]) == []


def test_list_tweets_pagination(client: TestClient, signup):
    headers, user_id = signup("user5")
    for n in range(3):
        r = client.post("/api/tweets/", headers=headers, json={"content": f"tweet {n}"})
        assert r.status_code == 201

    r = client.get(f"/api/tweets/user/{user_id}?limit=2&page=1")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["total"] == 3
    assert data["page"] == 1
    assert data["limit"] == 2
    assert len(data["items"]) == 2
    assert data["items"][0]["owner"]["username"] == "user5"

    r = client.get(f"/api/tweets/user/{user_id}?limit=2&page=2")
    assert len(r.json()["data"]["items"]) == 1

    r = client.get("/api/tweets/?limit=0&page=0")
    data = r.json()["data"]
    assert data["page"] == 1
    assert data["limit"] == 1
    assert len(data["items"]) == 1


def test_non_numeric_paging_falls_back_to_defaults(client: TestClient, signup):
    headers, _ = signup("pager")
    client.post("/api/tweets/", headers=headers, json={"content": "only tweet"})

    r = client.get("/api/tweets/?page=abc&limit=xyz")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["page"] == 1
    assert data["limit"] == 10
    assert data["total"] == 1

    r = client.get("/api/videos/?page=two&limit=")
    assert r.status_code == 200
    assert r.json()["data"]["page"] == 1
