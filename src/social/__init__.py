"""
Social features: outfit feed, communities and competitions.
"""

from social.communities import CommunityService, get_community_service
from social.competitions import CompetitionService, get_competition_service, time_remaining
from social.errors import SocialError
from social.feed import FeedService, get_feed_service

__all__ = [
    "CommunityService",
    "CompetitionService",
    "FeedService",
    "SocialError",
    "get_community_service",
    "get_competition_service",
    "get_feed_service",
    "time_remaining",
]
