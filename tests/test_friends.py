import pytest

from app.models import Friend

VALID = {
    "name": "Example",
    "desc": "A blog about things",
    "avatar": "https://example.com/avatar.png",
    "url": "https://example.com",
}


def test_list_friends_hides_pending_from_visitors(client, seed):
    admin, admin_headers = seed.user("root", admin=True)
    seed.friend(admin, name="accepted", accepted=1)
    seed.friend(admin, name="pending", accepted=0)

    visitor = client.get("/friend").json()
    assert [f["name"] for f in visitor["friend_list"]] == ["accepted"]
    assert visitor["apply_list"] is None

    everything = client.get("/friend", headers=admin_headers).json()
    assert [f["name"] for f in everything["friend_list"]] == ["accepted", "pending"]


def test_list_friends_returns_callers_application(client, seed):
    uid, headers = seed.user("alice")
    seed.friend(uid, name="mine", accepted=0)

    body = client.get("/friend", headers=headers).json()
    assert body["friend_list"] == []
    assert body["apply_list"]["name"] == "mine"
    assert body["apply_list"]["accepted"] == 0


@pytest.mark.parametrize(
    "field, value",
    [
        ("name", "n" * 21),
        ("desc", "d" * 101),
        ("avatar", "a" * 101),
        ("url", "u" * 101),
        ("name", ""),
        ("url", ""),
    ],
)
def test_create_friend_rejects_bad_lengths(client, seed, field, value):
    _, headers = seed.user("alice")
    resp = client.post("/friend", headers=headers, json={**VALID, field: value})
    assert resp.status_code == 400
    assert resp.text == "Invalid input"


def test_create_friend_accepts_limits_exactly(client, seed):
    _, headers = seed.user("alice")
    body = {"name": "n" * 20, "desc": "d" * 100, "avatar": "a" * 100, "url": "u" * 100}
    assert client.post("/friend", headers=headers, json=body).text == "OK"


def test_create_friend_requires_auth(client):
    resp = client.post("/friend", json=VALID)
    assert resp.status_code == 401


def test_create_friend_once_per_user(client, seed):
    uid, headers = seed.user("alice")
    assert client.post("/friend", headers=headers, json=VALID).text == "OK"

    resp = client.post("/friend", headers=headers, json=VALID)
    assert resp.status_code == 400
    assert resp.text == "Already sent"

    mine = client.get("/friend", headers=headers).json()["apply_list"]
    assert mine["uid"] == uid
    assert mine["accepted"] == 0


def test_admin_friends_are_accepted_immediately(client, seed):
    _, headers = seed.user("root", admin=True)
    assert client.post("/friend", headers=headers, json=VALID).text == "OK"
    assert client.post("/friend", headers=headers, json={**VALID, "name": "Other"}).text == "OK"

    names = [f["name"] for f in client.get("/friend").json()["friend_list"]]
    assert names == ["Example", "Other"]


def test_update_friend_by_owner_resets_acceptance(client, seed):
    uid, headers = seed.user("alice")
    friend_id = seed.friend(uid, name="old", accepted=1)

    resp = client.put(
        f"/friend/{friend_id}",
        headers=headers,
        json={"name": "new", "desc": "", "url": "", "accepted": 1},
    )
    assert resp.text == "OK"
    friend = seed.get(Friend, friend_id)
    assert friend.name == "new"
    assert friend.desc == "a friendly site"
    assert friend.url == "https://example.com"
    assert friend.accepted == 0


def test_update_friend_by_admin_can_accept(client, seed):
    uid, _ = seed.user("alice")
    _, admin_headers = seed.user("root", admin=True)
    friend_id = seed.friend(uid, accepted=0)

    resp = client.put(
        f"/friend/{friend_id}",
        headers=admin_headers,
        json={"name": "", "desc": "", "url": "", "accepted": 1},
    )
    assert resp.text == "OK"
    assert seed.get(Friend, friend_id).accepted == 1


def test_update_friend_errors(client, seed):
    owner, _ = seed.user("alice")
    _, other_headers = seed.user("bob")
    friend_id = seed.friend(owner)
    body = {"name": "x", "desc": "y", "url": "z"}

    assert client.put(f"/friend/{friend_id}", json=body).status_code == 401
    assert client.put("/friend/999", headers=other_headers, json=body).status_code == 404
    resp = client.put(f"/friend/{friend_id}", headers=other_headers, json=body)
    assert resp.status_code == 403
    assert resp.text == "Permission denied"


def test_delete_friend(client, seed):
    owner, owner_headers = seed.user("alice")
    _, other_headers = seed.user("bob")
    friend_id = seed.friend(owner)

    assert client.delete(f"/friend/{friend_id}").status_code == 401
    assert client.delete(f"/friend/{friend_id}", headers=other_headers).status_code == 403
    assert client.delete(f"/friend/{friend_id}", headers=owner_headers).text == "OK"
    assert seed.get(Friend, friend_id) is None
    assert client.delete(f"/friend/{friend_id}", headers=owner_headers).status_code == 404


@pytest.mark.parametrize("field, limit", [("name", 20), ("desc", 100), ("avatar", 100), ("url", 100)])
def test_update_friend_rejects_over_length_fields(client, seed, field, limit):
    uid, headers = seed.user("alice")
    friend_id = seed.friend(uid, name="old")
    body = {"name": "", "desc": "", "url": "", field: "x" * (limit + 1)}

    resp = client.put(f"/friend/{friend_id}", headers=headers, json=body)
    assert resp.status_code == 400
    assert resp.text == "Invalid input"
    assert seed.get(Friend, friend_id).name == "old"


def test_friend_json_uses_camel_case_timestamps(client, seed):
    uid, headers = seed.user("alice")
    seed.friend(uid)

    body = client.get("/friend", headers=headers).json()
    assert set(body) == {"friend_list", "apply_list"}
    friend = body["friend_list"][0]
    assert "createdAt" in friend and "updatedAt" in friend
    assert "created_at" not in friend
