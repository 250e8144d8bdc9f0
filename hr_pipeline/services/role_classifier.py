"""
Job-title classification for account conversion.

Maps a free-text job title to the account category the converted applicant
gets. Pure and deterministic: the same title always yields the same result.
"""

import logging
import re
from typing import Optional, Tuple

from hr_pipeline.schemas.conversion import RoleClassification, UserType

logger = logging.getLogger(__name__)

# Matched as substrings of the normalized title, before the admin keywords
EXECUTIVE_KEYWORDS: Tuple[str, ...] = (
    "EXECUTIVE",
)

# Matched as substrings of the normalized title
ADMIN_KEYWORDS: Tuple[str, ...] = (
    "WARD_MANAGER",
    "WARD_TEAM_LEADER",
    "LOCAL_BODY_MANAGER",
    "SUBDISTRICT_MANAGER",
    "DISTRICT_MANAGER",
    "ZONAL_MANAGER",
    "STATE_HEAD",
    "SUPER_ADMIN",
)

_WHITESPACE = re.compile(r"\s+")


def normalize_job_title(job_title: Optional[str]) -> str:
    """Uppercase the title and join whitespace-separated words with underscores."""
    return _WHITESPACE.sub("_", (job_title or "").strip().upper())


def classify_job_title(job_title: Optional[str]) -> RoleClassification:
    """
    Classify a job title as an executive or admin account.

    Order of checks:
      1. the title contains an executive keyword
      2. the title contains an admin management keyword
      3. the words include "executive" but neither "manager" nor "admin"
      4. otherwise admin, flagged low-confidence
    """
    normalized = normalize_job_title(job_title)

    for keyword in EXECUTIVE_KEYWORDS:
        if keyword in normalized:
            return RoleClassification(
                user_type=UserType.EXECUTIVE,
                normalized_title=normalized,
                matched_keyword=keyword,
            )

    for keyword in ADMIN_KEYWORDS:
        if keyword in normalized:
            return RoleClassification(
                user_type=UserType.ADMIN,
                normalized_title=normalized,
                matched_keyword=keyword,
            )

    words = (job_title or "").lower().split()
    if "executive" in words and "manager" not in words and "admin" not in words:
        return RoleClassification(
            user_type=UserType.EXECUTIVE,
            normalized_title=normalized,
        )

    # Managers should be admins; unknown titles lean that way too
    logger.warning("Unknown job title %r, defaulting to admin", job_title)
    return RoleClassification(
        user_type=UserType.ADMIN,
        normalized_title=normalized,
        low_confidence=True,
    )


def determine_user_type(job_title: Optional[str]) -> UserType:
    return classify_job_title(job_title).user_type
