"""
测试公共配置

- 降低 bcrypt 轮数、固定 JWT 密钥（需在导入应用之前设置）
- client：每个测试使用独立的 SQLite 文件
"""

import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET_KEY", "kickmates-test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from kickmates.app import app


@pytest.fixture
def client(tmp_path, monkeypatch):
    """绑定临时数据库的 TestClient（进入上下文时执行 lifespan 建表）"""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'kickmates-test.db'}")
    with TestClient(app) as test_client:
        yield test_client


def register(client, username: str, password: str = "secret123", **profile) -> dict:
    """
    注册用户

    Returns:
        {"token", "user", "headers"}
    """
    response = client.post("/api/users/register", json={
        "username": username,
        "email": f"{username}@example.com",
        "password": password,
        **profile,
    })
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    data["headers"] = {"Authorization": f"Bearer {data['token']}"}
    return data


def event_payload(**overrides) -> dict:
    """一周后开始、持续两小时的活动"""
    start = datetime.utcnow().replace(microsecond=0) + timedelta(days=7)
    payload = {
        "title": "Sunday Five-a-side",
        "description": "Friendly game, all levels welcome",
        "sport_type": "Football",
        "location": "Riverside Park",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(hours=2)).isoformat(),
        "max_players": 10,
    }
    payload.update(overrides)
    return payload


def create_event(client, headers: dict, **overrides) -> dict:
    response = client.post("/api/events", json=event_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["event"]
