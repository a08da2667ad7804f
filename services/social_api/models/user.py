"""
User models for the Social API service.
"""

import re
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from shared.utils.object_id import new_object_id
from services.social_api.models.thought import ThoughtResponse

EMAIL_PATTERN = re.compile(r".+@.+\..+")


class User(BaseModel):
    """Model for a user."""

    id: str = Field(default_factory=new_object_id, description="Unique identifier for the user")
    username: str = Field(..., description="Unique username")
    email: str = Field(..., description="Unique email address")
    thoughts: List[str] = Field(default_factory=list, description="IDs of the user's thoughts")
    friends: List[str] = Field(default_factory=list, description="IDs of the user's friends")

    class Config:
        """Configuration for the User model."""

        alias_generator = to_camel
        populate_by_name = True

    @field_validator("username")
    @classmethod
    def username_must_not_be_blank(cls, v):
        """Trim the username and reject empty values."""
        v = v.strip()
        if not v:
            raise ValueError("username is required")
        return v

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, v):
        """Validate that the email looks like local@domain.tld."""
        if not EMAIL_PATTERN.search(v):
            raise ValueError(f"'{v}' is not a valid email address")
        return v


# Request models for API
class CreateUserRequest(BaseModel):
    """Request model for creating a user.

    Fields are optional here so that missing values are reported by the
    User record validation with the other field errors.
    """

    username: Optional[str] = Field(default=None, description="Unique username")
    email: Optional[str] = Field(default=None, description="Unique email address")


class UpdateUserRequest(BaseModel):
    """Request model for updating a user."""

    username: Optional[str] = Field(default=None, description="New username")
    email: Optional[str] = Field(default=None, description="New email address")


# Response models for API
class UserResponse(BaseModel):
    """Response model for a user with unexpanded references."""

    id: str = Field(..., description="Unique identifier for the user")
    username: str = Field(..., description="Unique username")
    email: str = Field(..., description="Unique email address")
    thoughts: List[str] = Field(default_factory=list, description="IDs of the user's thoughts")
    friends: List[str] = Field(default_factory=list, description="IDs of the user's friends")
    friend_count: int = Field(..., description="Number of friends")

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            thoughts=list(user.thoughts),
            friends=list(user.friends),
            friend_count=len(user.friends)
        )


class UserDetailResponse(BaseModel):
    """Response model for a user with thoughts and friends expanded."""

    id: str = Field(..., description="Unique identifier for the user")
    username: str = Field(..., description="Unique username")
    email: str = Field(..., description="Unique email address")
    thoughts: List[ThoughtResponse] = Field(default_factory=list, description="The user's thoughts")
    friends: List[UserResponse] = Field(default_factory=list, description="The user's friends")
    friend_count: int = Field(..., description="Number of friends")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class MessageResponse(BaseModel):
    """Response model for errors."""

    message: str = Field(..., description="What went wrong")
