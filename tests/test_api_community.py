def new_post(client, user_id, content="Sending light to everyone"):
    return client.post("/api/community/posts", json={"user_id": user_id, "content": content})


def new_event(client, **overrides):
    payload = {
        "title": "Full moon meditation",
        "description": "Group meditation",
        "event_date": "2030-05-01T19:00:00",
        "event_time": "7:00 PM",
        **overrides,
    }
    return client.post("/api/community/events", json=payload)


def test_create_and_list_posts(client, user) -> None:
    assert new_post(client, user["id"], content="").status_code == 400
    assert new_post(client, 999).status_code == 404

    post = new_post(client, user["id"]).get_json()
    assert post["user"]["name"] == "Test User"
    assert post["reaction_count"] == 0

    new_post(client, user["id"], content="Second")
    posts = client.get("/api/community/posts").get_json()
    assert [p["content"] for p in posts] == ["Second", "Sending light to everyone"]
    assert len(client.get(f"/api/users/{user['id']}/posts").get_json()) == 2


def test_only_owner_edits_or_deletes_post(client, user, other_user) -> None:
    post = new_post(client, user["id"]).get_json()
    url = f"/api/community/posts/{post['id']}"

    assert client.put(url, json={"user_id": other_user["id"], "content": "hijack"}).status_code == 403
    response = client.put(url, json={"user_id": user["id"], "content": "Edited"})
    assert response.status_code == 200
    assert response.get_json()["content"] == "Edited"

    assert client.delete(f"{url}?user_id={other_user['id']}").status_code == 403
    assert client.delete(f"{url}?user_id={user['id']}").status_code == 200
    assert client.get("/api/community/posts").get_json() == []
    assert client.delete(f"{url}?user_id={user['id']}").status_code == 404


def test_reaction_toggles(client, user, other_user) -> None:
    post = new_post(client, user["id"]).get_json()
    url = f"/api/community/posts/{post['id']}/react"

    response = client.post(url, json={"user_id": other_user["id"]})
    assert response.status_code == 201
    assert response.get_json()["action"] == "added"
    assert len(client.get(f"/api/community/posts/{post['id']}/reactions").get_json()) == 1

    response = client.post(url, json={"user_id": other_user["id"]})
    assert response.get_json()["action"] == "removed"
    assert client.get(f"/api/community/posts/{post['id']}/reactions").get_json() == []

    assert client.post("/api/community/posts/999/react", json={"user_id": user["id"]}).status_code == 404


def test_comments(client, user, other_user) -> None:
    post = new_post(client, user["id"]).get_json()
    url = f"/api/community/posts/{post['id']}/comments"

    assert client.post(url, json={"user_id": other_user["id"], "content": ""}).status_code == 400
    comment = client.post(url, json={"user_id": other_user["id"], "content": "Beautiful"}).get_json()
    assert comment["user"]["name"] == "Other User"
    assert [c["content"] for c in client.get(url).get_json()] == ["Beautiful"]

    assert client.delete(f"{url}/{comment['id']}?user_id={user['id']}").status_code == 403
    assert client.delete(f"{url}/{comment['id']}?user_id={other_user['id']}").status_code == 200
    assert client.get(url).get_json() == []


def test_events_listed_soonest_first(client) -> None:
    new_event(client, title="Later", event_date="2031-01-01")
    new_event(client, title="Sooner", event_date="2030-01-01")

    events = client.get("/api/community/events").get_json()
    assert [e["title"] for e in events] == ["Sooner", "Later"]
    assert client.get(f"/api/community/events/{events[0]['id']}").get_json()["title"] == "Sooner"
    assert client.get("/api/community/events/999").status_code == 404


def test_event_validation(client) -> None:
    response = new_event(client, event_time="")
    assert response.status_code == 400
    assert "event_time" in response.get_json()["error"]
    assert new_event(client, event_date="whenever").status_code == 400
    assert new_event(client, status="postponed").status_code == 400


def test_event_registration(client, user, other_user) -> None:
    event = new_event(client, max_attendees=1).get_json()
    url = f"/api/community/events/{event['id']}/register"

    assert client.post(url, json={"user_id": user["id"]}).status_code == 201
    assert client.post(url, json={"user_id": user["id"]}).status_code == 409

    response = client.post(url, json={"user_id": other_user["id"]})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Event is full"
    assert client.get(f"/api/community/events/{event['id']}").get_json()["attendee_count"] == 1


def test_cannot_register_for_cancelled_event(client, user) -> None:
    event = new_event(client, status="cancelled").get_json()
    response = client.post(f"/api/community/events/{event['id']}/register", json={"user_id": user["id"]})
    assert response.status_code == 400


def test_reaction_requires_existing_user(client, user) -> None:
    post = new_post(client, user["id"]).get_json()
    response = client.post(f"/api/community/posts/{post['id']}/react", json={"user_id": 999})
    assert response.status_code == 404
    assert client.get(f"/api/community/posts/{post['id']}/reactions").get_json() == []


def test_non_string_post_content_is_rejected(client, user) -> None:
    assert new_post(client, user["id"], content=42).status_code == 400
    post = new_post(client, user["id"]).get_json()
    url = f"/api/community/posts/{post['id']}/comments"
    assert client.post(url, json={"user_id": user["id"], "content": {"text": "hi"}}).status_code == 400
