"""
Thought and reaction models for the Social API service.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from shared.utils.json_utils import format_locale_timestamp
from shared.utils.object_id import is_object_id, new_object_id

MAX_TEXT_LENGTH = 280


class Reaction(BaseModel):
    """A reaction embedded in a thought."""

    reaction_id: str = Field(default_factory=new_object_id, description="Unique identifier for the reaction")
    reaction_body: str = Field(..., min_length=1, max_length=MAX_TEXT_LENGTH, description="Reaction text")
    username: str = Field(..., min_length=1, description="Name of the reacting user")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")

    class Config:
        """Configuration for the Reaction model."""

        alias_generator = to_camel
        populate_by_name = True


class Thought(BaseModel):
    """A short post owned by a user."""

    id: str = Field(default_factory=new_object_id, description="Unique identifier for the thought")
    thought_text: str = Field(..., min_length=1, max_length=MAX_TEXT_LENGTH, description="Thought text")
    username: str = Field(..., min_length=1, description="Author's username at creation time")
    user_id: str = Field(..., description="ID of the owning user")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")
    reactions: List[Reaction] = Field(default_factory=list, description="Embedded reactions")

    class Config:
        """Configuration for the Thought model."""

        alias_generator = to_camel
        populate_by_name = True

    @field_validator("user_id")
    @classmethod
    def user_id_must_be_object_id(cls, v):
        """Validate that user_id looks like a record identifier."""
        if not is_object_id(v):
            raise ValueError(f"'{v}' is not a valid user id")
        return v


# Request models for API
class CreateThoughtRequest(BaseModel):
    """Request model for creating a thought.

    Fields are optional here so that missing values are reported by the
    Thought record validation with the other field errors.
    """

    thought_text: Optional[str] = Field(default=None, description="Thought text")
    username: Optional[str] = Field(default=None, description="Author's username")
    user_id: Optional[str] = Field(default=None, description="ID of the owning user")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UpdateThoughtRequest(BaseModel):
    """Request model for updating a thought. The owner cannot be changed."""

    thought_text: Optional[str] = Field(default=None, description="New thought text")
    username: Optional[str] = Field(default=None, description="New author name")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CreateReactionRequest(BaseModel):
    """Request model for adding a reaction to a thought."""

    reaction_body: Optional[str] = Field(default=None, description="Reaction text")
    username: Optional[str] = Field(default=None, description="Name of the reacting user")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# Response models for API
class ReactionResponse(BaseModel):
    """Response model for a reaction."""

    reaction_id: str = Field(..., description="Unique identifier for the reaction")
    reaction_body: str = Field(..., description="Reaction text")
    username: str = Field(..., description="Name of the reacting user")
    created_at: str = Field(..., description="Creation time, locale formatted")

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @classmethod
    def from_reaction(cls, reaction: Reaction) -> "ReactionResponse":
        return cls(
            reaction_id=reaction.reaction_id,
            reaction_body=reaction.reaction_body,
            username=reaction.username,
            created_at=format_locale_timestamp(reaction.created_at)
        )


class ThoughtResponse(BaseModel):
    """Response model for a thought."""

    id: str = Field(..., description="Unique identifier for the thought")
    thought_text: str = Field(..., description="Thought text")
    username: str = Field(..., description="Author's username at creation time")
    user_id: str = Field(..., description="ID of the owning user")
    created_at: str = Field(..., description="Creation time, locale formatted")
    reactions: List[ReactionResponse] = Field(default_factory=list, description="Embedded reactions")
    reaction_count: int = Field(..., description="Number of reactions")

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @classmethod
    def from_thought(cls, thought: Thought) -> "ThoughtResponse":
        return cls(
            id=thought.id,
            thought_text=thought.thought_text,
            username=thought.username,
            user_id=thought.user_id,
            created_at=format_locale_timestamp(thought.created_at),
            reactions=[ReactionResponse.from_reaction(r) for r in thought.reactions],
            reaction_count=len(thought.reactions)
        )
