"""
用户接口：注册、登录、资料、成员列表
"""

from conftest import register, create_event


class TestAuth:
    """注册与登录"""

    def test_register_returns_token_and_profile(self, client):
        data = register(client, "alice", full_name="Alice Adams")

        assert data["token"]
        assert data["user"]["username"] == "alice"
        assert data["user"]["full_name"] == "Alice Adams"
        assert "password" not in data["user"]

    def test_duplicate_username_or_email(self, client):
        register(client, "alice")

        response = client.post("/api/users/register", json={
            "username": "alice", "email": "other@example.com", "password": "secret123"
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "USER_EXISTS"

        response = client.post("/api/users/register", json={
            "username": "alice2", "email": "alice@example.com", "password": "secret123"
        })
        assert response.status_code == 400

    def test_register_validation(self, client):
        response = client.post("/api/users/register", json={
            "username": "al", "email": "not-an-email", "password": "123"
        })
        assert response.status_code == 422

    def test_login(self, client):
        register(client, "alice")

        response = client.post("/api/users/login", json={
            "email": "alice@example.com", "password": "secret123"
        })
        assert response.status_code == 200
        assert response.json()["data"]["user"]["username"] == "alice"

    def test_login_wrong_password(self, client):
        register(client, "alice")

        response = client.post("/api/users/login", json={
            "email": "alice@example.com", "password": "wrong-password"
        })
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "INVALID_CREDENTIALS"

    def test_profile_requires_token(self, client):
        response = client.get("/api/users/profile")
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"

    def test_invalid_token(self, client):
        response = client.get("/api/users/profile", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401


class TestProfile:
    """个人资料"""

    def test_get_and_update_profile(self, client):
        alice = register(client, "alice")

        response = client.put("/api/users/profile", json={
            "bio": "Weekend striker", "profile_image": "https://img.example.com/a.png"
        }, headers=alice["headers"])
        assert response.status_code == 200

        profile = client.get("/api/users/profile", headers=alice["headers"]).json()["data"]["user"]
        assert profile["bio"] == "Weekend striker"
        assert profile["profile_image"] == "https://img.example.com/a.png"
        assert profile["email"] == "alice@example.com"

    def test_my_events_and_bookmarks(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        own = create_event(client, alice["headers"], title="Alice's match")
        other = create_event(client, bob["headers"], title="Bob's match")

        client.post(f"/api/events/{other['id']}/join", headers=alice["headers"])
        client.post(f"/api/events/{other['id']}/bookmark", headers=alice["headers"])

        events = client.get("/api/users/events", headers=alice["headers"]).json()["data"]
        assert [e["id"] for e in events["created_events"]] == [own["id"]]
        participating = {e["id"]: e["status"] for e in events["participating_events"]}
        assert participating[other["id"]] == "confirmed"

        bookmarks = client.get("/api/users/bookmarks", headers=alice["headers"]).json()["data"]
        assert [e["id"] for e in bookmarks["bookmarked_events"]] == [other["id"]]


class TestMembers:
    """成员列表与公开资料"""

    def test_list_and_search(self, client):
        register(client, "alice", full_name="Alice Adams")
        register(client, "bob")
        register(client, "carol")

        data = client.get("/api/users", params={"limit": 2}).json()["data"]
        assert len(data["users"]) == 2
        assert data["pagination"]["total"] == 3
        assert data["pagination"]["pages"] == 2

        data = client.get("/api/users", params={"search": "adams"}).json()["data"]
        assert [u["username"] for u in data["users"]] == ["alice"]
        assert "email" not in data["users"][0]

    def test_public_profile(self, client):
        alice = register(client, "alice")

        response = client.get(f"/api/users/{alice['user']['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["user"]["username"] == "alice"

        assert client.get("/api/users/9999").status_code == 404
        assert client.get("/api/users/9999/events").status_code == 404
