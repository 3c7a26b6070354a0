"""
应用入口、投票规则与演示数据
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from kickmates.app import app
from kickmates.db.init_db import main as init_database
from kickmates.services.comment_service import resolve_vote


class TestHealth:
    def test_root(self, client):
        assert client.get("/").json()["status"] == "ok"

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["services"]["database"] == "healthy"


class TestResolveVote:
    """投票切换规则"""

    @pytest.mark.parametrize("previous, requested, expected", [
        (None, "up", (1, 0, "up")),
        (None, "down", (0, 1, "down")),
        ("up", "up", (-1, 0, None)),
        ("down", "down", (0, -1, None)),
        ("up", "down", (-1, 1, "down")),
        ("down", "up", (1, -1, "up")),
    ])
    def test_transitions(self, previous, requested, expected):
        assert resolve_vote(previous, requested) == expected


class TestSeedData:
    """演示数据脚本"""

    def test_seeded_database_is_usable(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'seed.db'}")
        asyncio.run(init_database(seed=True))

        with TestClient(app) as client:
            login = client.post("/api/users/login", json={
                "email": "john@example.com", "password": "password123"
            })
            events = client.get("/api/events").json()["data"]["events"]
            discussions = client.get("/api/discussions").json()["data"]["discussions"]

        assert login.status_code == 200
        assert len(events) == 2
        assert len(discussions) == 1

    def test_clear_removes_rows(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'seed.db'}")
        asyncio.run(init_database(seed=True))
        asyncio.run(init_database(clear=True))

        with TestClient(app) as client:
            assert client.get("/api/events").json()["data"]["events"] == []
            assert client.get("/api/users").json()["data"]["pagination"]["total"] == 0
