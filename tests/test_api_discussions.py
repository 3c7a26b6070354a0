"""
讨论帖接口：发帖、列表排序与分页、投票、评论
"""

from conftest import register


def create_discussion(client, user, **overrides):
    payload = {
        "title": "Best boots for artificial grass?",
        "content": "Looking for recommendations under $100.",
        "category": "Equipment",
    }
    payload.update(overrides)
    response = client.post("/api/discussions", json=payload, headers=user["headers"])
    assert response.status_code == 201, response.text
    return response.json()["data"]["discussion"]


class TestDiscussionCrud:
    """发帖、更新、删除"""

    def test_create_and_get(self, client):
        alice = register(client, "alice")

        created = create_discussion(client, alice)
        assert created["creator_username"] == "alice"
        assert (created["votes_up"], created["votes_down"], created["comment_count"]) == (0, 0, 0)

        data = client.get(f"/api/discussions/{created['id']}").json()["data"]
        assert data["discussion"]["title"] == created["title"]
        assert data["comments"] == []

    def test_update_and_delete_only_by_creator(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        discussion = create_discussion(client, alice)
        url = f"/api/discussions/{discussion['id']}"

        assert client.put(url, json={"title": "Mine now"}, headers=bob["headers"]).status_code == 403

        response = client.put(url, json={"category": "Gear"}, headers=alice["headers"])
        assert response.status_code == 200
        updated = response.json()["data"]["discussion"]
        assert updated["category"] == "Gear"
        assert updated["title"] == discussion["title"]

        assert client.delete(url, headers=bob["headers"]).status_code == 403
        assert client.delete(url, headers=alice["headers"]).status_code == 200
        assert client.get(url).status_code == 404

    def test_create_requires_auth(self, client):
        response = client.post("/api/discussions", json={"title": "t", "content": "c", "category": "x"})
        assert response.status_code == 401


class TestDiscussionList:
    """列表：分类、搜索、排序、分页"""

    def test_filters_sort_and_pagination(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        boots = create_discussion(client, alice)
        tactics = create_discussion(client, alice, title="4-4-2 or 4-3-3?", content="Discuss.", category="Tactics")
        rules = create_discussion(client, bob, title="Offside explained", content="Rules thread", category="Rules")

        client.post(f"/api/discussions/{tactics['id']}/vote", json={"vote_type": "up"}, headers=bob["headers"])
        client.post(f"/api/discussions/{rules['id']}/vote", json={"vote_type": "down"}, headers=alice["headers"])
        client.post(f"/api/discussions/{boots['id']}/comments", json={"content": "Try Copa"}, headers=bob["headers"])

        newest = client.get("/api/discussions").json()["data"]
        assert [d["id"] for d in newest["discussions"]] == [rules["id"], tactics["id"], boots["id"]]
        assert newest["pagination"] == {"page": 1, "limit": 10, "total": 3, "pages": 1}

        popular = client.get("/api/discussions", params={"sort": "popular"}).json()["data"]
        assert [d["id"] for d in popular["discussions"]] == [tactics["id"], boots["id"], rules["id"]]

        commented = client.get("/api/discussions", params={"sort": "comments"}).json()["data"]
        assert commented["discussions"][0]["id"] == boots["id"]
        assert commented["discussions"][0]["comment_count"] == 1

        tactics_only = client.get("/api/discussions", params={"category": "Tactics"}).json()["data"]
        assert [d["id"] for d in tactics_only["discussions"]] == [tactics["id"]]

        searched = client.get("/api/discussions", params={"search": "offside"}).json()["data"]
        assert [d["id"] for d in searched["discussions"]] == [rules["id"]]

        page2 = client.get("/api/discussions", params={"limit": 2, "page": 2}).json()["data"]
        assert [d["id"] for d in page2["discussions"]] == [boots["id"]]
        assert page2["pagination"]["pages"] == 2

    def test_invalid_sort(self, client):
        assert client.get("/api/discussions", params={"sort": "random"}).status_code == 422


class TestDiscussionVotes:
    """讨论帖投票"""

    def test_vote_toggle(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        discussion = create_discussion(client, alice)
        url = f"/api/discussions/{discussion['id']}/vote"

        def vote(vote_type):
            return client.post(url, json={"vote_type": vote_type}, headers=bob["headers"]).json()["data"]

        assert vote("up") == {"discussion_id": discussion["id"], "votes_up": 1, "votes_down": 0, "user_vote": "up"}
        assert vote("down")["votes_up"] == 0
        assert vote("down") == {"discussion_id": discussion["id"], "votes_up": 0, "votes_down": 0, "user_vote": None}

        vote("up")
        detail = client.get(f"/api/discussions/{discussion['id']}", headers=bob["headers"]).json()["data"]
        assert detail["discussion"]["user_vote"] == "up"

    def test_vote_missing_discussion(self, client):
        bob = register(client, "bob")
        response = client.post("/api/discussions/9999/vote", json={"vote_type": "up"}, headers=bob["headers"])
        assert response.status_code == 404


class TestDiscussionComments:
    """讨论帖评论"""

    def test_comment_thread(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        discussion = create_discussion(client, alice)
        url = f"/api/discussions/{discussion['id']}/comments"

        parent = client.post(url, json={"content": "Adidas Copa"}, headers=bob["headers"]).json()["data"]["comment"]
        reply = client.post(url, json={"content": "Agreed", "parent_comment_id": parent["id"]},
                            headers=alice["headers"]).json()["data"]["comment"]

        vote = client.post(f"{url}/{reply['id']}/vote", json={"vote_type": "up"}, headers=bob["headers"])
        assert vote.json()["data"]["thumbs_up"] == 1

        data = client.get(f"/api/discussions/{discussion['id']}").json()["data"]
        assert data["discussion"]["comment_count"] == 2
        assert {c["id"] for c in data["comments"]} == {parent["id"], reply["id"]}

        deleted = client.delete(f"{url}/{parent['id']}", headers=alice["headers"]).json()["data"]["deleted_ids"]
        assert sorted(deleted) == sorted([parent["id"], reply["id"]])

    def test_parent_from_other_target_rejected(self, client):
        alice = register(client, "alice")
        first = create_discussion(client, alice)
        second = create_discussion(client, alice, title="Second")
        parent = client.post(f"/api/discussions/{first['id']}/comments", json={"content": "hi"},
                             headers=alice["headers"]).json()["data"]["comment"]

        response = client.post(f"/api/discussions/{second['id']}/comments",
                               json={"content": "cross-post", "parent_comment_id": parent["id"]},
                               headers=alice["headers"])
        assert response.status_code == 404
