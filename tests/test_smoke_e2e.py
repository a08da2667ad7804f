import pytest
from fastapi.testclient import TestClient

from shared.utils.object_id import new_object_id
from services.social_api.main import create_app
from tests.helpers import make_manager


@pytest.fixture
def client():
    app = create_app(redis_manager=make_manager())
    with TestClient(app) as test_client:
        yield test_client


def test_smoke_user_thought_reaction_flow(client):
    resp = client.post("/", json={"username": "al", "email": "al@x.com"})
    assert resp.status_code == 201
    user = resp.json()
    assert user["id"]
    assert user["friendCount"] == 0

    resp = client.post("/thoughts", json={"thoughtText": "hi", "username": "al", "userId": user["id"]})
    assert resp.status_code == 201
    thought = resp.json()
    assert thought["thoughtText"] == "hi"
    assert thought["reactionCount"] == 0

    resp = client.get(f"/{user['id']}")
    assert resp.status_code == 200
    assert len(resp.json()["thoughts"]) == 1
    assert resp.json()["thoughts"][0]["id"] == thought["id"]

    resp = client.post(
        f"/thoughts/{thought['id']}/reactions",
        json={"reactionBody": "lol", "username": "bo"}
    )
    assert resp.status_code == 201
    reactions = resp.json()["reactions"]
    assert len(reactions) == 1
    assert reactions[0]["reactionBody"] == "lol"
    assert "createdAt" in reactions[0]

    resp = client.delete(f"/thoughts/{thought['id']}/reactions/{reactions[0]['reactionId']}")
    assert resp.status_code == 200
    assert resp.json()["reactions"] == []


def test_smoke_friends_and_deletes(client):
    al = client.post("/", json={"username": "al", "email": "al@x.com"}).json()
    bo = client.post("/", json={"username": "bo", "email": "bo@x.com"}).json()

    resp = client.post(f"/{al['id']}/friends/{bo['id']}")
    assert resp.status_code == 200
    assert resp.json()["friends"] == [bo["id"]]

    resp = client.get("/")
    assert resp.status_code == 200
    listed = {u["username"]: u for u in resp.json()}
    assert listed["al"]["friends"][0]["username"] == "bo"
    assert listed["al"]["friendCount"] == 1

    resp = client.delete(f"/{al['id']}/friends/{bo['id']}")
    assert resp.status_code == 200
    assert resp.json()["friendCount"] == 0

    resp = client.delete(f"/{bo['id']}")
    assert resp.status_code == 204
    assert resp.content == b""

    resp = client.get(f"/{bo['id']}")
    assert resp.status_code == 404
    assert resp.json() == {"message": "User not found"}



def test_smoke_malformed_friend_id_keeps_user_list_readable(client):
    al = client.post("/", json={"username": "al", "email": "al@x.com"}).json()
    client.post("/thoughts", json={"thoughtText": "hi", "username": "al", "userId": al["id"]})
    bo = client.post("/", json={"username": "bo", "email": "bo@x.com"}).json()

    resp = client.post(f"/{bo['id']}/friends/thoughts:{al['id']}")
    assert resp.status_code == 400
    assert "friends" in resp.json()["message"]

    resp = client.get(f"/{bo['id']}")
    assert resp.status_code == 200
    assert resp.json()["friends"] == []

    resp = client.get("/")
    assert resp.status_code == 200
    assert len(resp.json()) == 2


def test_smoke_thought_routes(client):
    al = client.post("/", json={"username": "al", "email": "al@x.com"}).json()
    thought = client.post(
        "/thoughts", json={"thoughtText": "hi", "username": "al", "userId": al["id"]}
    ).json()

    resp = client.get("/thoughts")
    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()] == [thought["id"]]

    resp = client.put(f"/thoughts/{thought['id']}", json={"thoughtText": "edited"})
    assert resp.status_code == 200
    assert resp.json()["thoughtText"] == "edited"

    resp = client.delete(f"/thoughts/{thought['id']}")
    assert resp.status_code == 204

    resp = client.get(f"/thoughts/{thought['id']}")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Thought not found"}


def test_smoke_error_bodies(client):
    resp = client.post("/", json={"username": "al"})
    assert resp.status_code == 400
    assert "email" in resp.json()["message"]

    resp = client.post("/thoughts", json={"thoughtText": "", "username": "al", "userId": new_object_id()})
    assert resp.status_code == 400

    resp = client.post("/", content="not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert "message" in resp.json()

    resp = client.delete(f"/thoughts/{new_object_id()}")
    assert resp.status_code == 404


def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
