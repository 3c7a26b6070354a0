"""
活动接口：创建、报名与候补、收藏、评论与投票
"""

from datetime import datetime, timedelta

from conftest import register, create_event, event_payload


def notifications(client, user):
    return client.get("/api/notifications", headers=user["headers"]).json()["data"]["notifications"]


class TestEventCrud:
    """活动增删改查"""

    def test_create_counts_creator(self, client):
        alice = register(client, "alice")

        event = create_event(client, alice["headers"])

        assert event["current_players"] == 1
        assert event["creator_name"] == "alice"

        detail = client.get(f"/api/events/{event['id']}").json()["data"]
        assert [(p["username"], p["status"]) for p in detail["participants"]] == [("alice", "confirmed")]
        assert detail["is_bookmarked"] is False
        assert detail["participation_status"] is None

        mine = client.get(f"/api/events/{event['id']}", headers=alice["headers"]).json()["data"]
        assert mine["participation_status"] == "confirmed"

    def test_create_requires_auth(self, client):
        response = client.post("/api/events", json=event_payload())
        assert response.status_code == 401

    def test_create_rejects_bad_input(self, client):
        alice = register(client, "alice")
        payload = event_payload()

        response = client.post("/api/events", json=event_payload(
            start_date=payload["end_date"], end_date=payload["start_date"]
        ), headers=alice["headers"])
        assert response.status_code == 422

        response = client.post("/api/events", json=event_payload(max_players=0), headers=alice["headers"])
        assert response.status_code == 422

    def test_list_filters_and_order(self, client):
        alice = register(client, "alice")
        later = create_event(client, alice["headers"], title="Late tennis", sport_type="Tennis")
        start = datetime.utcnow().replace(microsecond=0) + timedelta(days=2)
        earlier = create_event(
            client, alice["headers"], title="Early football",
            start_date=start.isoformat(), end_date=(start + timedelta(hours=1)).isoformat(),
        )

        events = client.get("/api/events").json()["data"]["events"]
        assert [e["id"] for e in events] == [earlier["id"], later["id"]]
        assert all(e["confirmed_players"] == 1 and e["waiting_players"] == 0 for e in events)

        tennis = client.get("/api/events", params={"sport_type": "Tennis"}).json()["data"]["events"]
        assert [e["id"] for e in tennis] == [later["id"]]

        found = client.get("/api/events", params={"search": "early"}).json()["data"]["events"]
        assert [e["id"] for e in found] == [earlier["id"]]

    def test_update_and_delete_only_by_creator(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        event = create_event(client, alice["headers"])

        response = client.put(f"/api/events/{event['id']}", json={"title": "Hacked"}, headers=bob["headers"])
        assert response.status_code == 403

        response = client.put(f"/api/events/{event['id']}", json={"title": "Moved indoors"}, headers=alice["headers"])
        assert response.status_code == 200
        assert response.json()["data"]["event"]["title"] == "Moved indoors"

        assert client.delete(f"/api/events/{event['id']}", headers=bob["headers"]).status_code == 403
        assert client.delete(f"/api/events/{event['id']}", headers=alice["headers"]).status_code == 200
        assert client.get(f"/api/events/{event['id']}").status_code == 404

    def test_update_rejects_capacity_below_confirmed(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        event = create_event(client, alice["headers"], max_players=3)
        client.post(f"/api/events/{event['id']}/join", headers=bob["headers"])

        response = client.put(f"/api/events/{event['id']}", json={"max_players": 1}, headers=alice["headers"])

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_CAPACITY"

    def test_missing_event(self, client):
        alice = register(client, "alice")
        assert client.get("/api/events/9999").status_code == 404
        assert client.post("/api/events/9999/join", headers=alice["headers"]).status_code == 404


class TestParticipation:
    """报名、候补与转正"""

    def test_full_event_puts_user_on_waiting_list(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        carol = register(client, "carol")
        event = create_event(client, alice["headers"], max_players=2)

        joined = client.post(f"/api/events/{event['id']}/join", headers=bob["headers"]).json()["data"]
        assert joined == {"status": "confirmed", "current_players": 2}

        waiting = client.post(f"/api/events/{event['id']}/join", headers=carol["headers"]).json()["data"]
        assert waiting == {"status": "waiting", "current_players": 2}

        again = client.post(f"/api/events/{event['id']}/join", headers=carol["headers"])
        assert again.status_code == 400
        assert again.json()["detail"]["code"] == "ALREADY_JOINED"

    def test_leave_promotes_first_waiting(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        carol = register(client, "carol")
        dave = register(client, "dave")
        event = create_event(client, alice["headers"], max_players=2)
        for user in (bob, carol, dave):
            client.post(f"/api/events/{event['id']}/join", headers=user["headers"])

        response = client.delete(f"/api/events/{event['id']}/leave", headers=bob["headers"])
        assert response.status_code == 200
        assert response.json()["data"]["current_players"] == 2

        detail = client.get(f"/api/events/{event['id']}").json()["data"]
        statuses = {p["username"]: p["status"] for p in detail["participants"]}
        assert statuses == {"alice": "confirmed", "carol": "confirmed", "dave": "waiting"}

        assert "join_accepted" in [n["type"] for n in notifications(client, carol)]
        assert notifications(client, dave) == []

    def test_capacity_increase_promotes_waiting(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        event = create_event(client, alice["headers"], max_players=1)
        client.post(f"/api/events/{event['id']}/join", headers=bob["headers"])

        response = client.put(f"/api/events/{event['id']}", json={"max_players": 2}, headers=alice["headers"])

        assert response.json()["data"]["event"]["current_players"] == 2
        mine = client.get(f"/api/events/{event['id']}", headers=bob["headers"]).json()["data"]
        assert mine["participation_status"] == "confirmed"

    def test_leave_without_joining(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        event = create_event(client, alice["headers"])

        response = client.delete(f"/api/events/{event['id']}/leave", headers=bob["headers"])

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "NOT_PARTICIPANT"

    def test_join_notifies_creator(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        event = create_event(client, alice["headers"])

        client.post(f"/api/events/{event['id']}/join", headers=bob["headers"])

        received = notifications(client, alice)
        assert [n["type"] for n in received] == ["join_request"]
        assert received[0]["related_id"] == event["id"]


class TestBookmark:
    def test_toggle(self, client):
        alice = register(client, "alice")
        event = create_event(client, alice["headers"])
        url = f"/api/events/{event['id']}/bookmark"

        assert client.post(url, headers=alice["headers"]).json()["data"]["is_bookmarked"] is True
        detail = client.get(f"/api/events/{event['id']}", headers=alice["headers"]).json()["data"]
        assert detail["is_bookmarked"] is True

        assert client.post(url, headers=alice["headers"]).json()["data"]["is_bookmarked"] is False


class TestEventComments:
    """活动评论"""

    def test_comments_replies_and_notifications(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        carol = register(client, "carol")
        event = create_event(client, alice["headers"])
        url = f"/api/events/{event['id']}/comments"

        first = client.post(url, json={"content": "Who brings the ball?"}, headers=bob["headers"])
        assert first.status_code == 201
        first = first.json()["data"]["comment"]

        reply = client.post(url, json={"content": "I will", "parent_comment_id": first["id"]},
                            headers=carol["headers"]).json()["data"]["comment"]
        assert reply["parent_comment_id"] == first["id"]

        client.post(url, json={"content": "Thanks all"}, headers=alice["headers"])

        comments = client.get(f"/api/events/{event['id']}").json()["data"]["comments"]
        assert [c["content"] for c in comments] == ["Thanks all", "I will", "Who brings the ball?"]

        assert [n["type"] for n in notifications(client, alice)] == ["comment", "comment"]
        assert [n["type"] for n in notifications(client, bob)] == ["comment"]
        assert notifications(client, carol) == []

    def test_comment_validation(self, client):
        alice = register(client, "alice")
        event = create_event(client, alice["headers"])
        url = f"/api/events/{event['id']}/comments"

        assert client.post(url, json={"content": "   "}, headers=alice["headers"]).status_code == 400
        assert client.post(url, json={"content": "x" * 1001}, headers=alice["headers"]).status_code == 400

        response = client.post(url, json={"content": "hi", "parent_comment_id": 9999}, headers=alice["headers"])
        assert response.status_code == 404

    def test_vote_toggle_arithmetic(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        event = create_event(client, alice["headers"])
        comment = client.post(f"/api/events/{event['id']}/comments", json={"content": "Great pitch"},
                              headers=alice["headers"]).json()["data"]["comment"]
        url = f"/api/events/{event['id']}/comments/{comment['id']}/vote"

        def vote(user, vote_type):
            return client.post(url, json={"vote_type": vote_type}, headers=user["headers"]).json()["data"]

        assert vote(bob, "up") == {"comment_id": comment["id"], "thumbs_up": 1, "thumbs_down": 0, "user_vote": "up"}
        assert vote(bob, "down")["thumbs_up"] == 0
        result = vote(alice, "down")
        assert (result["thumbs_up"], result["thumbs_down"]) == (0, 2)
        result = vote(bob, "down")
        assert (result["thumbs_up"], result["thumbs_down"], result["user_vote"]) == (0, 1, None)

        comments = client.get(f"/api/events/{event['id']}", headers=alice["headers"]).json()["data"]["comments"]
        assert comments[0]["user_vote"] == "down"

        assert client.post(url, json={"vote_type": "meh"}, headers=bob["headers"]).status_code == 422

    def test_delete_removes_whole_thread(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        carol = register(client, "carol")
        event = create_event(client, alice["headers"])
        url = f"/api/events/{event['id']}/comments"

        root = client.post(url, json={"content": "root"}, headers=bob["headers"]).json()["data"]["comment"]
        child = client.post(url, json={"content": "child", "parent_comment_id": root["id"]},
                            headers=carol["headers"]).json()["data"]["comment"]
        grandchild = client.post(url, json={"content": "grandchild", "parent_comment_id": child["id"]},
                                 headers=bob["headers"]).json()["data"]["comment"]
        keep = client.post(url, json={"content": "unrelated"}, headers=carol["headers"]).json()["data"]["comment"]

        assert client.delete(f"{url}/{root['id']}", headers=carol["headers"]).status_code == 403

        response = client.delete(f"{url}/{root['id']}", headers=bob["headers"])
        assert response.status_code == 200
        assert sorted(response.json()["data"]["deleted_ids"]) == sorted([root["id"], child["id"], grandchild["id"]])

        comments = client.get(f"/api/events/{event['id']}").json()["data"]["comments"]
        assert [c["id"] for c in comments] == [keep["id"]]

        # 活动发起人可删除他人评论
        assert client.delete(f"{url}/{keep['id']}", headers=alice["headers"]).status_code == 200
        assert client.delete(f"{url}/{keep['id']}", headers=alice["headers"]).status_code == 404

    def test_delete_event_cascades_comments(self, client):
        alice = register(client, "alice")
        event = create_event(client, alice["headers"])
        client.post(f"/api/events/{event['id']}/comments", json={"content": "bye"}, headers=alice["headers"])
        client.post(f"/api/events/{event['id']}/bookmark", headers=alice["headers"])

        assert client.delete(f"/api/events/{event['id']}", headers=alice["headers"]).status_code == 200
        assert client.get("/api/events").json()["data"]["events"] == []
        bookmarks = client.get("/api/users/bookmarks", headers=alice["headers"]).json()["data"]
        assert bookmarks["bookmarked_events"] == []
