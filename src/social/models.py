"""
Pydantic models for the social feed, communities and competitions.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Feed
# =============================================================================

class ProfileSummary(BaseModel):
    """Author fields joined onto feed posts."""
    username: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


class FeedPost(BaseModel):
    """A wardrobe item rendered as a post, with per-viewer like state."""
    model_config = ConfigDict(extra="allow")

    id: str
    user_id: str
    image_url: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    likes_count: int = 0
    comments_count: int = 0
    is_liked: bool = False
    profile: Optional[ProfileSummary] = None


class FeedResponse(BaseModel):
    mode: str
    posts: List[FeedPost]


class LikeState(BaseModel):
    post_id: str
    is_liked: bool
    likes_count: int


class ShareLink(BaseModel):
    url: str
    title: str
    text: str


# =============================================================================
# Communities
# =============================================================================

class CommunityCreator(BaseModel):
    username: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    follower_count: int = 0


class Community(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    type: Optional[str] = None
    location: Optional[str] = None
    member_count: int = 0
    description: Optional[str] = None
    is_joined: bool = False
    top_creators: List[CommunityCreator] = Field(default_factory=list)


class CommunitiesResponse(BaseModel):
    communities: List[Community]
    joined: List[Community]


class MembershipState(BaseModel):
    community_id: str
    is_joined: bool


# =============================================================================
# Competitions
# =============================================================================

class Submission(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    competition_id: Optional[str] = None
    user_id: Optional[str] = None
    image_url: Optional[str] = None
    wardrobe_item_id: Optional[str] = None
    likes_count: int = 0


class Competition(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    description: Optional[str] = None
    theme: Optional[str] = None
    start_date: datetime
    end_date: datetime
    prize_pool: Optional[float] = None
    participant_count: int = 0
    max_participants: Optional[int] = None
    is_active: bool = True
    is_participating: bool = False
    user_submission: Optional[Submission] = None
    time_remaining: str = ""


class CompetitionsResponse(BaseModel):
    competitions: List[Competition]


class SubmissionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    wardrobe_item_id: str = Field(..., alias="wardrobeItemId", min_length=1)
