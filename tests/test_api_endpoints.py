import asyncio
import pytest
from fastapi import HTTPException

from shared.utils.object_id import new_object_id
from services.social_api.models.user import CreateUserRequest, UpdateUserRequest
from services.social_api.models.thought import (
    CreateThoughtRequest,
    UpdateThoughtRequest,
    CreateReactionRequest,
)
from services.social_api.repository import SocialRepository
from services.social_api.router import (
    list_users,
    get_user,
    create_user,
    update_user,
    delete_user,
    add_friend,
    remove_friend,
    list_thoughts,
    get_thought,
    create_thought,
    update_thought,
    delete_thought,
    add_reaction,
    remove_reaction,
)
from tests.helpers import BrokenRedis, make_manager


@pytest.fixture
def repository():
    repo = SocialRepository(make_manager())
    asyncio.run(repo.initialize())
    return repo


def new_user(repository, username="al", email="al@x.com"):
    req = CreateUserRequest(username=username, email=email)
    return asyncio.run(create_user(req, repository=repository))


def new_thought(repository, user, text="hi"):
    req = CreateThoughtRequest(thought_text=text, username=user.username, user_id=user.id)
    return asyncio.run(create_thought(req, repository=repository))


def status_of(coro):
    with pytest.raises(HTTPException) as excinfo:
        asyncio.run(coro)
    return excinfo.value.status_code, excinfo.value.detail


def test_create_user_endpoint(repository):
    resp = new_user(repository)
    assert resp.id
    assert resp.friend_count == 0
    assert resp.model_dump(by_alias=True)["friendCount"] == 0


def test_create_user_endpoint_rejects_duplicates(repository):
    new_user(repository)
    code, detail = status_of(create_user(
        CreateUserRequest(username="al", email="other@x.com"), repository=repository
    ))
    assert code == 400
    assert "username" in detail


def test_create_user_endpoint_rejects_missing_email(repository):
    code, detail = status_of(create_user(CreateUserRequest(username="al"), repository=repository))
    assert code == 400
    assert detail.startswith("User validation failed")


def test_get_user_endpoint(repository):
    user = new_user(repository)
    new_thought(repository, user)
    resp = asyncio.run(get_user(user.id, repository=repository))
    assert resp.id == user.id
    assert len(resp.thoughts) == 1


def test_list_users_endpoint(repository):
    new_user(repository, "al", "al@x.com")
    new_user(repository, "bo", "bo@x.com")
    resp = asyncio.run(list_users(repository=repository))
    assert [u.username for u in resp] == ["al", "bo"]


def test_update_user_endpoint(repository):
    user = new_user(repository)
    resp = asyncio.run(update_user(
        user.id, UpdateUserRequest(email="new@x.com"), repository=repository
    ))
    assert resp.email == "new@x.com"
    assert resp.username == "al"

    code, _ = status_of(update_user(
        user.id, UpdateUserRequest(email="bad"), repository=repository
    ))
    assert code == 400


def test_delete_user_endpoint(repository):
    user = new_user(repository)
    resp = asyncio.run(delete_user(user.id, repository=repository))
    assert resp.status_code == 204
    assert resp.body == b""


@pytest.mark.parametrize("call", [
    lambda repo, missing: get_user(missing, repository=repo),
    lambda repo, missing: delete_user(missing, repository=repo),
    lambda repo, missing: update_user(missing, UpdateUserRequest(username="x"), repository=repo),
    lambda repo, missing: add_friend(missing, new_object_id(), repository=repo),
    lambda repo, missing: remove_friend(missing, new_object_id(), repository=repo),
])
def test_user_endpoints_report_not_found(repository, call):
    code, detail = status_of(call(repository, new_object_id()))
    assert code == 404
    assert detail == "User not found"


@pytest.mark.parametrize("call", [
    lambda repo, missing: get_thought(missing, repository=repo),
    lambda repo, missing: delete_thought(missing, repository=repo),
    lambda repo, missing: update_thought(missing, UpdateThoughtRequest(thought_text="x"), repository=repo),
    lambda repo, missing: add_reaction(
        missing, CreateReactionRequest(reaction_body="lol", username="bo"), repository=repo
    ),
    lambda repo, missing: remove_reaction(missing, new_object_id(), repository=repo),
])
def test_thought_endpoints_report_not_found(repository, call):
    code, detail = status_of(call(repository, new_object_id()))
    assert code == 404
    assert detail == "Thought not found"


def test_friend_endpoints(repository):
    al = new_user(repository, "al", "al@x.com")
    bo = new_user(repository, "bo", "bo@x.com")

    resp = asyncio.run(add_friend(al.id, bo.id, repository=repository))
    resp = asyncio.run(add_friend(al.id, bo.id, repository=repository))
    assert resp.friends == [bo.id]
    assert resp.friend_count == 1

    resp = asyncio.run(remove_friend(al.id, bo.id, repository=repository))
    assert resp.friends == []
    assert resp.friend_count == 0


def test_create_thought_endpoint(repository):
    user = new_user(repository)
    resp = new_thought(repository, user)
    assert resp.user_id == user.id
    assert resp.reaction_count == 0
    assert resp.model_dump(by_alias=True)["thoughtText"] == "hi"


def test_create_thought_endpoint_validates_length(repository):
    user = new_user(repository)
    code, detail = status_of(create_thought(
        CreateThoughtRequest(thought_text="x" * 281, username="al", user_id=user.id),
        repository=repository
    ))
    assert code == 400
    assert detail.startswith("Thought validation failed")


def test_create_thought_endpoint_for_missing_owner(repository):
    code, detail = status_of(create_thought(
        CreateThoughtRequest(thought_text="hi", username="al", user_id=new_object_id()),
        repository=repository
    ))
    assert code == 404
    assert detail == "User not found"


def test_update_and_delete_thought_endpoints(repository):
    user = new_user(repository)
    thought = new_thought(repository, user)

    resp = asyncio.run(update_thought(
        thought.id, UpdateThoughtRequest(thought_text="edited"), repository=repository
    ))
    assert resp.thought_text == "edited"

    resp = asyncio.run(delete_thought(thought.id, repository=repository))
    assert resp.status_code == 204

    resp = asyncio.run(list_thoughts(repository=repository))
    assert resp == []


def test_reaction_endpoints(repository):
    user = new_user(repository)
    thought = new_thought(repository, user)

    resp = asyncio.run(add_reaction(
        thought.id, CreateReactionRequest(reaction_body="lol", username="bo"), repository=repository
    ))
    assert resp.reaction_count == 1
    reaction_id = resp.reactions[0].reaction_id

    resp = asyncio.run(remove_reaction(thought.id, new_object_id(), repository=repository))
    assert resp.reaction_count == 1

    resp = asyncio.run(remove_reaction(thought.id, reaction_id, repository=repository))
    assert resp.reaction_count == 0


def test_reads_report_store_failures_as_500():
    repo = SocialRepository(make_manager(BrokenRedis()))
    asyncio.run(repo.initialize())
    code, _ = status_of(list_users(repository=repo))
    assert code == 500
    code, _ = status_of(get_thought(new_object_id(), repository=repo))
    assert code == 500


def test_writes_report_store_failures_as_400():
    repo = SocialRepository(make_manager(BrokenRedis()))
    asyncio.run(repo.initialize())
    code, _ = status_of(create_user(
        CreateUserRequest(username="al", email="al@x.com"), repository=repo
    ))
    assert code == 400
    code, _ = status_of(delete_thought(new_object_id(), repository=repo))
    assert code == 400
