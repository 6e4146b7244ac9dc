"""
Social Routes.

Feed, likes, share links, communities and competitions.

All endpoints require JWT authentication.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.auth import SupabaseUser, require_auth
from core.logging import get_logger
from social.communities import CommunityService, get_community_service
from social.competitions import CompetitionService, get_competition_service
from social.errors import SocialError
from social.feed import FeedService, get_feed_service
from social.models import (
    CommunitiesResponse,
    CompetitionsResponse,
    FeedResponse,
    LikeState,
    MembershipState,
    ShareLink,
    Submission,
    SubmissionRequest,
)


logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Social"])


def _http_error(exc: SocialError) -> HTTPException:
    if exc.status_code >= 500:
        logger.error(
            "Social request failed",
            error=exc.message,
            error_type=type(exc).__name__,
            cause=repr(exc.__cause__) if exc.__cause__ else None,
        )
    return HTTPException(status_code=exc.status_code, detail=exc.message)


# =============================================================================
# Feed
# =============================================================================

@router.get("/feed", response_model=FeedResponse, summary="Outfit feed")
def get_feed(
    mode: str = Query(default="for-you", pattern="^(for-you|following)$"),
    limit: Optional[int] = Query(default=None, ge=1, le=200),
    user: SupabaseUser = Depends(require_auth),
    feed: FeedService = Depends(get_feed_service),
) -> FeedResponse:
    try:
        posts = feed.list_posts(user.id, mode=mode, limit=limit)
    except SocialError as e:
        raise _http_error(e)
    return FeedResponse(mode=mode, posts=posts)


@router.post("/feed/{post_id}/like", response_model=LikeState, summary="Like a post")
def like_post(
    post_id: str,
    user: SupabaseUser = Depends(require_auth),
    feed: FeedService = Depends(get_feed_service),
) -> LikeState:
    try:
        return LikeState(**feed.like(post_id, user.id))
    except SocialError as e:
        raise _http_error(e)


@router.delete("/feed/{post_id}/like", response_model=LikeState, summary="Unlike a post")
def unlike_post(
    post_id: str,
    user: SupabaseUser = Depends(require_auth),
    feed: FeedService = Depends(get_feed_service),
) -> LikeState:
    try:
        return LikeState(**feed.unlike(post_id, user.id))
    except SocialError as e:
        raise _http_error(e)


@router.get("/feed/{post_id}/share", response_model=ShareLink, summary="Share link for a post")
def share_post(
    post_id: str,
    user: SupabaseUser = Depends(require_auth),
    feed: FeedService = Depends(get_feed_service),
) -> ShareLink:
    try:
        return ShareLink(**feed.share_link(post_id))
    except SocialError as e:
        raise _http_error(e)


# =============================================================================
# Communities
# =============================================================================

@router.get("/communities", response_model=CommunitiesResponse, summary="List communities")
def list_communities(
    q: Optional[str] = Query(default=None, max_length=100, description="Filter by name or location"),
    user: SupabaseUser = Depends(require_auth),
    communities: CommunityService = Depends(get_community_service),
) -> CommunitiesResponse:
    try:
        all_communities, joined = communities.list_communities(user.id, query=q)
    except SocialError as e:
        raise _http_error(e)
    return CommunitiesResponse(communities=all_communities, joined=joined)


@router.post(
    "/communities/{community_id}/membership",
    response_model=MembershipState,
    summary="Join a community",
)
def join_community(
    community_id: str,
    user: SupabaseUser = Depends(require_auth),
    communities: CommunityService = Depends(get_community_service),
) -> MembershipState:
    try:
        return MembershipState(**communities.join(community_id, user.id))
    except SocialError as e:
        raise _http_error(e)


@router.delete(
    "/communities/{community_id}/membership",
    response_model=MembershipState,
    summary="Leave a community",
)
def leave_community(
    community_id: str,
    user: SupabaseUser = Depends(require_auth),
    communities: CommunityService = Depends(get_community_service),
) -> MembershipState:
    try:
        return MembershipState(**communities.leave(community_id, user.id))
    except SocialError as e:
        raise _http_error(e)


# =============================================================================
# Competitions
# =============================================================================

@router.get("/competitions", response_model=CompetitionsResponse, summary="Active competitions")
def list_competitions(
    user: SupabaseUser = Depends(require_auth),
    competitions: CompetitionService = Depends(get_competition_service),
) -> CompetitionsResponse:
    try:
        active = competitions.list_active(user.id)
    except SocialError as e:
        raise _http_error(e)
    return CompetitionsResponse(competitions=active)


@router.post(
    "/competitions/{competition_id}/submissions",
    response_model=Submission,
    status_code=201,
    summary="Enter a wardrobe item into a competition",
)
def submit_to_competition(
    competition_id: str,
    request: SubmissionRequest,
    user: SupabaseUser = Depends(require_auth),
    competitions: CompetitionService = Depends(get_competition_service),
) -> Submission:
    try:
        submission = competitions.submit(competition_id, user.id, request.wardrobe_item_id)
    except SocialError as e:
        raise _http_error(e)
    return Submission.model_validate(submission)
