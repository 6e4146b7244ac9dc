"""
School and city communities: listing, join and leave.
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

from config.constants import TABLES, TOP_CREATORS_PER_COMMUNITY
from config.database import get_supabase_client
from core.logging import LoggerMixin
from core.utils import first_row, rows
from social.errors import NotFoundError, execute_query


class CommunityService(LoggerMixin):
    """Community reads with per-viewer membership and top creators."""

    def __init__(self, supabase: Any) -> None:
        self._supabase = supabase

    def list_communities(
        self,
        viewer_id: Optional[str],
        query: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """
        Return (all communities, communities the viewer joined).

        Communities are ordered by member count, largest first. `query`
        filters on name or location, case-insensitively.
        """
        communities = rows(execute_query(
            self._supabase
            .table(TABLES.COMMUNITIES)
            .select("*")
            .order("member_count", desc=True),
            TABLES.COMMUNITIES,
        ))

        if query and query.strip():
            needle = query.strip().lower()
            communities = [
                c for c in communities
                if needle in (c.get("name") or "").lower()
                or needle in (c.get("location") or "").lower()
            ]
        if not communities:
            return [], []

        community_ids = [c["id"] for c in communities]
        joined_ids = set()
        if viewer_id:
            membership_rows = rows(execute_query(
                self._supabase
                .table(TABLES.MEMBERSHIPS)
                .select("community_id")
                .eq("user_id", viewer_id)
                .in_("community_id", community_ids),
                TABLES.MEMBERSHIPS,
            ))
            joined_ids = {row["community_id"] for row in membership_rows}

        creators = self._top_creators(community_ids)

        decorated = [
            {
                **community,
                "is_joined": community["id"] in joined_ids,
                "top_creators": creators.get(community["id"], []),
            }
            for community in communities
        ]
        return decorated, [c for c in decorated if c["is_joined"]]

    def _top_creators(self, community_ids: List[str]) -> Dict[str, List[Dict[str, Any]]]:
        profile_rows = rows(execute_query(
            self._supabase
            .table(TABLES.PROFILES)
            .select("username, display_name, avatar_url, follower_count, community_id")
            .in_("community_id", community_ids)
            .order("follower_count", desc=True),
            TABLES.PROFILES,
        ))
        grouped: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for profile in profile_rows:
            bucket = grouped[profile["community_id"]]
            if len(bucket) < TOP_CREATORS_PER_COMMUNITY:
                bucket.append({
                    "username": profile.get("username"),
                    "display_name": profile.get("display_name"),
                    "avatar_url": profile.get("avatar_url"),
                    "follower_count": profile.get("follower_count") or 0,
                })
        return grouped

    def join(self, community_id: str, user_id: str) -> Dict[str, Any]:
        """Join a community. Joining twice keeps one membership."""
        self._require_community(community_id)
        execute_query(
            self._supabase
            .table(TABLES.MEMBERSHIPS)
            .upsert(
                {"community_id": community_id, "user_id": user_id},
                on_conflict="community_id,user_id",
                ignore_duplicates=True,
            ),
            TABLES.MEMBERSHIPS,
        )
        self.logger.info("Joined community", community_id=community_id, user_id=user_id)
        return {"community_id": community_id, "is_joined": True}

    def leave(self, community_id: str, user_id: str) -> Dict[str, Any]:
        self._require_community(community_id)
        execute_query(
            self._supabase
            .table(TABLES.MEMBERSHIPS)
            .delete()
            .eq("community_id", community_id)
            .eq("user_id", user_id),
            TABLES.MEMBERSHIPS,
        )
        self.logger.info("Left community", community_id=community_id, user_id=user_id)
        return {"community_id": community_id, "is_joined": False}

    def _require_community(self, community_id: str) -> Dict[str, Any]:
        result = execute_query(
            self._supabase
            .table(TABLES.COMMUNITIES)
            .select("*")
            .eq("id", community_id)
            .limit(1),
            TABLES.COMMUNITIES,
        )
        community = first_row(result)
        if community is None:
            raise NotFoundError(f"Community not found: {community_id}")
        return community


_community_service: Optional[CommunityService] = None


def get_community_service() -> CommunityService:
    global _community_service
    if _community_service is None:
        _community_service = CommunityService(get_supabase_client())
    return _community_service
