"""Domain enumerations for the RBAC service."""

from enum import Enum


class PermissionCategory(str, Enum):
    """Grouping used when listing permissions and role details"""

    USER_MANAGEMENT = "user_management"
    QUIZ_MANAGEMENT = "quiz_management"
    COURSE_MANAGEMENT = "course_management"
    CATEGORY_MANAGEMENT = "category_management"
    REWARDS_MANAGEMENT = "rewards_management"
    POINTS_MANAGEMENT = "points_management"
    GAMES_MANAGEMENT = "games_management"
    REPORTS = "reports"
    LEADERBOARD = "leaderboard"
    AUDIT = "audit"
    SETTINGS = "settings"
    ROLES = "roles"
    BILLING = "billing"
    DASHBOARD = "dashboard"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [category.value for category in cls]
