"""
Role-level permission helpers for the pipeline.

Role levels are an ordered numeric rank: higher levels supervise lower ones.
Authorization thresholds compare the caller's level against a minimum.
"""

from typing import Optional

from hr_pipeline.errors import PermissionDenied


class RoleLevels:
    """Standard role levels used by the pipeline."""
    EXECUTIVE = 2
    WARD_MANAGER = 3
    LOCAL_BODY_MANAGER = 4
    SUBDISTRICT_MANAGER = 5
    DISTRICT_MANAGER = 6
    ZONAL_MANAGER = 7
    STATE_HEAD = 8
    SUPER_ADMIN = 9


def check_role_level(role_level: Optional[int], minimum: int) -> bool:
    """
    Check if a role level meets or exceeds a minimum.

    Args:
        role_level: The caller's role level (None for accounts without one)
        minimum: Lowest level that is permitted

    Returns:
        True if the caller has permission, False otherwise
    """
    if role_level is None:
        return False
    return role_level >= minimum


def raise_if_below_level(role_level: Optional[int], minimum: int, action: str = "perform this action") -> None:
    """
    Raise PermissionDenied if the role level is below the minimum.

    Args:
        role_level: The caller's role level
        minimum: Lowest level that is permitted
        action: Description of action being blocked

    Raises:
        PermissionDenied: if the caller's level is insufficient
    """
    if not check_role_level(role_level, minimum):
        raise PermissionDenied(
            f"Permission Denied: Insufficient role level to {action}",
            {"role_level": role_level, "required_level": minimum},
        )
