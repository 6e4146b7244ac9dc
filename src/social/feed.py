"""
Social feed of generated outfits.

Posts are wardrobe rows joined with the author's profile. Like and
comment counts and the viewer's own like flag are computed on every read
with one query per table for the whole page.
"""

from collections import Counter
from typing import Any, Dict, List, Optional

from config.constants import DEFAULT_FEED_CONFIG, TABLES
from config.database import get_supabase_client
from config.settings import Settings, get_settings
from core.logging import LoggerMixin
from core.utils import first_row, rows, safe_get
from social.errors import NotFoundError, execute_query


FEED_MODES = ("for-you", "following")

_POST_SELECT = (
    "*, profile:profiles!wardrobes_user_id_fkey(username, display_name, avatar_url)"
)


class FeedService(LoggerMixin):
    """Reads the feed and applies like / unlike mutations."""

    def __init__(self, supabase: Any, settings: Optional[Settings] = None) -> None:
        self._supabase = supabase
        self._settings = settings or get_settings()

    def list_posts(
        self,
        viewer_id: Optional[str],
        mode: str = "for-you",
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Return posts newest first, decorated with counts and `is_liked`.

        In "following" mode the feed is narrowed to authors the viewer
        follows; a viewer who follows nobody sees the unfiltered feed.

        Args:
            viewer_id: Requesting user, or None for anonymous reads
            mode: "for-you" or "following"
            limit: Page size, capped at the configured maximum
        """
        if mode not in FEED_MODES:
            raise ValueError(f"Unknown feed mode: {mode}")
        limit = min(limit or self._settings.feed_default_limit, self._settings.feed_max_limit)

        query = (
            self._supabase
            .table(TABLES.WARDROBES)
            .select(_POST_SELECT)
            .order("created_at", desc=True)
        )

        if mode == "following" and viewer_id:
            followed = self._followed_ids(viewer_id)
            if followed:
                query = query.in_("user_id", followed)

        posts = rows(execute_query(query.limit(limit), TABLES.WARDROBES))
        if not posts:
            return []

        post_ids = [post["id"] for post in posts]
        like_rows = rows(execute_query(
            self._supabase
            .table(TABLES.LIKES)
            .select("post_id, user_id")
            .in_("post_id", post_ids),
            TABLES.LIKES,
        ))
        comment_rows = rows(execute_query(
            self._supabase
            .table(TABLES.COMMENTS)
            .select("post_id")
            .in_("post_id", post_ids),
            TABLES.COMMENTS,
        ))

        likes = Counter(row["post_id"] for row in like_rows)
        comments = Counter(row["post_id"] for row in comment_rows)
        liked_by_viewer = {
            row["post_id"] for row in like_rows if viewer_id and row.get("user_id") == viewer_id
        }

        decorated = []
        for post in posts:
            decorated.append({
                **post,
                "likes_count": likes.get(post["id"], 0),
                "comments_count": comments.get(post["id"], 0),
                "is_liked": post["id"] in liked_by_viewer,
            })

        self.logger.debug("Feed loaded", mode=mode, count=len(decorated))
        return decorated

    def _followed_ids(self, viewer_id: str) -> List[str]:
        result = execute_query(
            self._supabase
            .table(TABLES.FOLLOWS)
            .select("following_id")
            .eq("follower_id", viewer_id),
            TABLES.FOLLOWS,
        )
        return [row["following_id"] for row in rows(result)]

    # =========================================================================
    # Likes
    # =========================================================================

    def like(self, post_id: str, user_id: str) -> Dict[str, Any]:
        """
        Like a post. Liking twice keeps a single like.

        The write is an upsert on (post_id, user_id) that ignores an
        existing row, so concurrent likes from the same user cannot fail.
        """
        self._require_post(post_id)
        execute_query(
            self._supabase
            .table(TABLES.LIKES)
            .upsert(
                {"post_id": post_id, "user_id": user_id},
                on_conflict="post_id,user_id",
                ignore_duplicates=True,
            ),
            TABLES.LIKES,
        )
        self.logger.info("Post liked", post_id=post_id, user_id=user_id)
        return self._like_state(post_id, user_id)

    def unlike(self, post_id: str, user_id: str) -> Dict[str, Any]:
        """Remove the user's like. Unliking a post that is not liked is a no-op."""
        self._require_post(post_id)
        execute_query(
            self._supabase
            .table(TABLES.LIKES)
            .delete()
            .eq("post_id", post_id)
            .eq("user_id", user_id),
            TABLES.LIKES,
        )
        self.logger.info("Post unliked", post_id=post_id, user_id=user_id)
        return self._like_state(post_id, user_id)

    def _like_state(self, post_id: str, user_id: str) -> Dict[str, Any]:
        like_rows = rows(execute_query(
            self._supabase
            .table(TABLES.LIKES)
            .select("user_id")
            .eq("post_id", post_id),
            TABLES.LIKES,
        ))
        return {
            "post_id": post_id,
            "is_liked": any(row.get("user_id") == user_id for row in like_rows),
            "likes_count": len(like_rows),
        }

    # =========================================================================
    # Sharing
    # =========================================================================

    def share_link(self, post_id: str) -> Dict[str, str]:
        """Build the public link and share text for a post."""
        post = self._require_post(post_id)
        display_name = (
            safe_get(post, "profile", "display_name")
            or safe_get(post, "profile", "username")
            or "Someone"
        )
        return {
            "url": f"{self._settings.site_url.rstrip('/')}/post/{post_id}",
            "title": f"{display_name}'s fit on {self._settings.site_name}",
            "text": post.get("description") or DEFAULT_FEED_CONFIG.SHARE_TEXT_FALLBACK,
        }

    def _require_post(self, post_id: str) -> Dict[str, Any]:
        result = execute_query(
            self._supabase
            .table(TABLES.WARDROBES)
            .select(_POST_SELECT)
            .eq("id", post_id)
            .limit(1),
            TABLES.WARDROBES,
        )
        post = first_row(result)
        if post is None:
            raise NotFoundError(f"Post not found: {post_id}")
        return post


_feed_service: Optional[FeedService] = None


def get_feed_service() -> FeedService:
    global _feed_service
    if _feed_service is None:
        _feed_service = FeedService(get_supabase_client())
    return _feed_service
