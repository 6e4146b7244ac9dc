"""
Weekly styling competitions and their submissions.

A competition accepts submissions between its start and end dates, up to
`max_participants`, one per user.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from config.constants import TABLES
from config.database import get_supabase_client
from core.logging import LoggerMixin
from core.utils import first_row, parse_timestamp, rows, utc_now
from social.errors import (
    CompetitionClosedError,
    CompetitionFullError,
    DuplicateSubmissionError,
    NotFoundError,
    SocialStoreError,
    execute_query,
)


def time_remaining(end_date: Any, now: Optional[datetime] = None) -> str:
    """
    Human label for the time left until `end_date`.

    >>> from datetime import timezone
    >>> now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    >>> time_remaining("2025-01-03T05:00:00Z", now)
    '2d 5h left'
    >>> time_remaining("2024-12-31T00:00:00Z", now)
    'Ended'
    """
    end = parse_timestamp(end_date)
    if end is None:
        return ""
    diff = (end - (now or utc_now())).total_seconds()
    if diff <= 0:
        return "Ended"

    days = int(diff // 86400)
    hours = int((diff % 86400) // 3600)
    if days > 0:
        return f"{days}d {hours}h left"
    return f"{hours}h left"


class CompetitionService(LoggerMixin):
    """Lists active competitions and records submissions."""

    def __init__(self, supabase: Any) -> None:
        self._supabase = supabase

    def list_active(
        self,
        viewer_id: Optional[str],
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Active competitions, latest start first, with the viewer's submission."""
        now = now or utc_now()
        competitions = rows(execute_query(
            self._supabase
            .table(TABLES.COMPETITIONS)
            .select("*")
            .eq("is_active", True)
            .order("start_date", desc=True),
            TABLES.COMPETITIONS,
        ))
        if not competitions:
            return []

        submissions: Dict[str, Dict[str, Any]] = {}
        if viewer_id:
            submission_rows = rows(execute_query(
                self._supabase
                .table(TABLES.SUBMISSIONS)
                .select("id, competition_id, image_url, likes_count")
                .eq("user_id", viewer_id)
                .in_("competition_id", [c["id"] for c in competitions]),
                TABLES.SUBMISSIONS,
            ))
            submissions = {row["competition_id"]: row for row in submission_rows}

        return [
            {
                **competition,
                "is_participating": competition["id"] in submissions,
                "user_submission": submissions.get(competition["id"]),
                "time_remaining": time_remaining(competition.get("end_date"), now),
            }
            for competition in competitions
        ]

    def submit(
        self,
        competition_id: str,
        user_id: str,
        wardrobe_item_id: str,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Enter one of the user's wardrobe items into a competition.

        Raises:
            NotFoundError: Unknown competition, or item not in the user's wardrobe
            CompetitionClosedError: Inactive, not started or already ended
            DuplicateSubmissionError: The user already submitted, including a
                concurrent submission caught by the (competition_id, user_id)
                unique constraint
            CompetitionFullError: The participant cap is reached
            SocialStoreError: The insert failed or returned no row
        """
        now = now or utc_now()
        competition = self._require_competition(competition_id)

        start = parse_timestamp(competition.get("start_date"))
        end = parse_timestamp(competition.get("end_date"))
        if not competition.get("is_active", True):
            raise CompetitionClosedError("This competition is no longer active")
        if start and now < start:
            raise CompetitionClosedError("This competition has not started yet")
        if end and now >= end:
            raise CompetitionClosedError("This competition has ended")

        entrants = rows(execute_query(
            self._supabase
            .table(TABLES.SUBMISSIONS)
            .select("id, user_id")
            .eq("competition_id", competition_id),
            TABLES.SUBMISSIONS,
        ))
        if any(row.get("user_id") == user_id for row in entrants):
            raise DuplicateSubmissionError("You have already entered this competition")

        cap = competition.get("max_participants")
        if cap is not None and len(entrants) >= cap:
            raise CompetitionFullError("This competition is full")

        item = first_row(execute_query(
            self._supabase
            .table(TABLES.WARDROBES)
            .select("id, image_url")
            .eq("id", wardrobe_item_id)
            .eq("user_id", user_id)
            .limit(1),
            TABLES.WARDROBES,
        ))
        if item is None:
            raise NotFoundError(f"Wardrobe item not found: {wardrobe_item_id}")

        try:
            result = execute_query(
                self._supabase.table(TABLES.SUBMISSIONS).insert({
                    "competition_id": competition_id,
                    "user_id": user_id,
                    "wardrobe_item_id": wardrobe_item_id,
                    "image_url": item["image_url"],
                }),
                TABLES.SUBMISSIONS,
            )
        except SocialStoreError as e:
            if e.is_unique_violation:
                raise DuplicateSubmissionError("You have already entered this competition") from e
            raise

        submission = first_row(result)
        if submission is None:
            raise SocialStoreError("Submission was not saved", table=TABLES.SUBMISSIONS)

        self.logger.info(
            "Competition submission created",
            competition_id=competition_id,
            user_id=user_id,
            entrants=len(entrants) + 1,
        )
        return submission

    def _require_competition(self, competition_id: str) -> Dict[str, Any]:
        competition = first_row(execute_query(
            self._supabase
            .table(TABLES.COMPETITIONS)
            .select("*")
            .eq("id", competition_id)
            .limit(1),
            TABLES.COMPETITIONS,
        ))
        if competition is None:
            raise NotFoundError(f"Competition not found: {competition_id}")
        return competition


_competition_service: Optional[CompetitionService] = None


def get_competition_service() -> CompetitionService:
    global _competition_service
    if _competition_service is None:
        _competition_service = CompetitionService(get_supabase_client())
    return _competition_service
