"""
Routers for the Social API Service.

Reads report store failures as 500. Writes report every failure other than a
missing record as 400.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Depends, Request, Response

from shared.utils.exceptions import StoreError
from services.social_api.models.user import (
    CreateUserRequest,
    UpdateUserRequest,
    UserResponse,
    UserDetailResponse,
    MessageResponse
)
from services.social_api.models.thought import (
    CreateThoughtRequest,
    UpdateThoughtRequest,
    CreateReactionRequest,
    ThoughtResponse
)
from services.social_api.repository import SocialRepository

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": MessageResponse},
    404: {"model": MessageResponse},
    500: {"model": MessageResponse},
}

user_router = APIRouter(tags=["users"], responses=ERROR_RESPONSES)
thought_router = APIRouter(prefix="/thoughts", tags=["thoughts"], responses=ERROR_RESPONSES)


async def get_repository(request: Request) -> SocialRepository:
    """Get the repository created at application startup.

    Returns:
        SocialRepository: The repository instance.
    """
    return request.app.state.repository


def user_not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="User not found")


def thought_not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Thought not found")


# User endpoints
@user_router.get("/", response_model=List[UserDetailResponse])
async def list_users(repository: SocialRepository = Depends(get_repository)):
    """List all users with their thoughts and friends expanded.

    Raises:
        HTTPException: 500 if the store fails.
    """
    try:
        return await repository.list_users()
    except StoreError as e:
        logger.error(f"Error listing users: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@user_router.get("/{user_id}", response_model=UserDetailResponse)
async def get_user(user_id: str, repository: SocialRepository = Depends(get_repository)):
    """Get a user with their thoughts and friends expanded.

    Args:
        user_id: The ID of the user.
        repository: The social repository.

    Returns:
        UserDetailResponse: The user.

    Raises:
        HTTPException: 404 if the user is not found, 500 if the store fails.
    """
    try:
        user = await repository.get_user(user_id)
    except StoreError as e:
        logger.error(f"Error getting user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if not user:
        raise user_not_found()
    return user


@user_router.post("/", response_model=UserResponse, status_code=201)
async def create_user(
    request: CreateUserRequest,
    repository: SocialRepository = Depends(get_repository)
):
    """Create a new user.

    Args:
        request: The create user request.
        repository: The social repository.

    Returns:
        UserResponse: The created user.

    Raises:
        HTTPException: 400 if the user is invalid or cannot be stored.
    """
    try:
        user = await repository.create_user(request.username, request.email)
    except Exception as e:
        logger.error(f"Error creating user: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return UserResponse.from_user(user)


@user_router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    repository: SocialRepository = Depends(get_repository)
):
    """Update a user's username and/or email.

    Raises:
        HTTPException: 404 if the user is not found, 400 on any other failure.
    """
    try:
        user = await repository.update_user(user_id, request.model_dump(exclude_unset=True))
    except Exception as e:
        logger.error(f"Error updating user {user_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if not user:
        raise user_not_found()
    return UserResponse.from_user(user)


@user_router.delete("/{user_id}", status_code=204, response_class=Response)
async def delete_user(user_id: str, repository: SocialRepository = Depends(get_repository)):
    """Delete a user.

    Raises:
        HTTPException: 404 if the user is not found, 400 on any other failure.
    """
    try:
        deleted = await repository.delete_user(user_id)
    except Exception as e:
        logger.error(f"Error deleting user {user_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if not deleted:
        raise user_not_found()
    return Response(status_code=204)


@user_router.post("/{user_id}/friends/{friend_id}", response_model=UserResponse)
async def add_friend(
    user_id: str,
    friend_id: str,
    repository: SocialRepository = Depends(get_repository)
):
    """Add a friend to a user's friend list.

    Raises:
        HTTPException: 404 if the user is not found, 400 on any other failure.
    """
    try:
        user = await repository.add_friend(user_id, friend_id)
    except Exception as e:
        logger.error(f"Error adding friend {friend_id} to user {user_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if not user:
        raise user_not_found()
    return UserResponse.from_user(user)


@user_router.delete("/{user_id}/friends/{friend_id}", response_model=UserResponse)
async def remove_friend(
    user_id: str,
    friend_id: str,
    repository: SocialRepository = Depends(get_repository)
):
    """Remove a friend from a user's friend list.

    Raises:
        HTTPException: 404 if the user is not found, 400 on any other failure.
    """
    try:
        user = await repository.remove_friend(user_id, friend_id)
    except Exception as e:
        logger.error(f"Error removing friend {friend_id} from user {user_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if not user:
        raise user_not_found()
    return UserResponse.from_user(user)


# Thought endpoints
@thought_router.get("", response_model=List[ThoughtResponse])
async def list_thoughts(repository: SocialRepository = Depends(get_repository)):
    """List all thoughts.

    Raises:
        HTTPException: 500 if the store fails.
    """
    try:
        thoughts = await repository.list_thoughts()
    except StoreError as e:
        logger.error(f"Error listing thoughts: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return [ThoughtResponse.from_thought(thought) for thought in thoughts]


@thought_router.get("/{thought_id}", response_model=ThoughtResponse)
async def get_thought(thought_id: str, repository: SocialRepository = Depends(get_repository)):
    """Get a thought by ID.

    Raises:
        HTTPException: 404 if the thought is not found, 500 if the store fails.
    """
    try:
        thought = await repository.get_thought(thought_id)
    except StoreError as e:
        logger.error(f"Error getting thought {thought_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if not thought:
        raise thought_not_found()
    return ThoughtResponse.from_thought(thought)


@thought_router.post("", response_model=ThoughtResponse, status_code=201)
async def create_thought(
    request: CreateThoughtRequest,
    repository: SocialRepository = Depends(get_repository)
):
    """Create a thought and add it to its owner's thoughts.

    Args:
        request: The create thought request.
        repository: The social repository.

    Returns:
        ThoughtResponse: The created thought.

    Raises:
        HTTPException: 404 if the owner is not found (the thought is kept),
            400 on any other failure.
    """
    try:
        thought, owner_found = await repository.create_thought(
            request.thought_text, request.username, request.user_id
        )
    except Exception as e:
        logger.error(f"Error creating thought: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if not owner_found:
        raise user_not_found()
    return ThoughtResponse.from_thought(thought)


@thought_router.put("/{thought_id}", response_model=ThoughtResponse)
async def update_thought(
    thought_id: str,
    request: UpdateThoughtRequest,
    repository: SocialRepository = Depends(get_repository)
):
    """Update a thought's text and/or username.

    Raises:
        HTTPException: 404 if the thought is not found, 400 on any other failure.
    """
    try:
        thought = await repository.update_thought(thought_id, request.model_dump(exclude_unset=True))
    except Exception as e:
        logger.error(f"Error updating thought {thought_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if not thought:
        raise thought_not_found()
    return ThoughtResponse.from_thought(thought)


@thought_router.delete("/{thought_id}", status_code=204, response_class=Response)
async def delete_thought(thought_id: str, repository: SocialRepository = Depends(get_repository)):
    """Delete a thought.

    Raises:
        HTTPException: 404 if the thought is not found, 400 on any other failure.
    """
    try:
        deleted = await repository.delete_thought(thought_id)
    except Exception as e:
        logger.error(f"Error deleting thought {thought_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if not deleted:
        raise thought_not_found()
    return Response(status_code=204)


@thought_router.post("/{thought_id}/reactions", response_model=ThoughtResponse, status_code=201)
async def add_reaction(
    thought_id: str,
    request: CreateReactionRequest,
    repository: SocialRepository = Depends(get_repository)
):
    """Add a reaction to a thought.

    Raises:
        HTTPException: 404 if the thought is not found, 400 on any other failure.
    """
    try:
        thought = await repository.add_reaction(thought_id, request.reaction_body, request.username)
    except Exception as e:
        logger.error(f"Error adding reaction to thought {thought_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if not thought:
        raise thought_not_found()
    return ThoughtResponse.from_thought(thought)


@thought_router.delete("/{thought_id}/reactions/{reaction_id}", response_model=ThoughtResponse)
async def remove_reaction(
    thought_id: str,
    reaction_id: str,
    repository: SocialRepository = Depends(get_repository)
):
    """Remove a reaction from a thought.

    Raises:
        HTTPException: 404 if the thought is not found, 400 on any other failure.
    """
    try:
        thought = await repository.remove_reaction(thought_id, reaction_id)
    except Exception as e:
        logger.error(f"Error removing reaction {reaction_id} from thought {thought_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if not thought:
        raise thought_not_found()
    return ThoughtResponse.from_thought(thought)
