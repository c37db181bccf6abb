"""
Global permission catalog and shared role templates.

Reference data seeded by CatalogSeedService. Permission names use the
`resource.action` form; templates reference permissions by name.
"""

from typing import TypedDict

from src.domain.enums import PermissionCategory


class PermissionData(TypedDict):
    name: str
    display_name: str
    category: PermissionCategory
    description: str


class RoleTemplateData(TypedDict):
    """Type definition for role template configuration"""

    template_set_name: str
    role_name: str
    description: str
    slot_position: int
    is_default_set: bool
    permissions: list[str]


def _permission(name: str, display_name: str, category: PermissionCategory, description: str) -> PermissionData:
    return {"name": name, "display_name": display_name, "category": category, "description": description}


_U = PermissionCategory.USER_MANAGEMENT
_Q = PermissionCategory.QUIZ_MANAGEMENT
_C = PermissionCategory.COURSE_MANAGEMENT
_CAT = PermissionCategory.CATEGORY_MANAGEMENT
_R = PermissionCategory.REWARDS_MANAGEMENT
_P = PermissionCategory.POINTS_MANAGEMENT
_G = PermissionCategory.GAMES_MANAGEMENT

PERMISSIONS: list[PermissionData] = [
    # User management
    _permission("users.create", "Create Users", _U, "Permission to create new users in the tenant"),
    _permission("users.read", "View Users", _U, "Permission to view user profiles and information"),
    _permission("users.update", "Edit Users", _U, "Permission to modify user information"),
    _permission("users.delete", "Delete Users", _U, "Permission to remove users from the tenant"),
    _permission("users.import", "Import Users", _U, "Permission to bulk import users"),
    _permission("users.export", "Export Users", _U, "Permission to export user data"),
    # Quiz management
    _permission("quizzes.create", "Create Quizzes", _Q, "Permission to create new quizzes"),
    _permission("quizzes.read", "View Quizzes", _Q, "Permission to view quiz details and questions"),
    _permission("quizzes.update", "Edit Quizzes", _Q, "Permission to modify existing quizzes"),
    _permission("quizzes.delete", "Delete Quizzes", _Q, "Permission to remove quizzes"),
    _permission("quizzes.publish", "Publish Quizzes", _Q, "Permission to publish or unpublish quizzes"),
    _permission("quizzes.assign", "Assign Quizzes", _Q, "Permission to assign quizzes to users/groups"),
    # Course management
    _permission("courses.create", "Create Courses", _C, "Permission to create new courses"),
    _permission("courses.read", "View Courses", _C, "Permission to view course details"),
    _permission("courses.update", "Edit Courses", _C, "Permission to modify existing courses"),
    _permission("courses.delete", "Delete Courses", _C, "Permission to remove courses"),
    _permission("courses.publish", "Publish Courses", _C, "Permission to publish or unpublish courses"),
    # Category management
    _permission("categories.create", "Create Categories", _CAT, "Permission to create new categories"),
    _permission("categories.read", "View Categories", _CAT, "Permission to view categories"),
    _permission("categories.update", "Edit Categories", _CAT, "Permission to modify existing categories"),
    _permission("categories.delete", "Delete Categories", _CAT, "Permission to remove categories"),
    # Rewards management
    _permission("rewards.create", "Create Rewards", _R, "Permission to create new rewards"),
    _permission("rewards.read", "View Rewards", _R, "Permission to view reward details"),
    _permission("rewards.update", "Edit Rewards", _R, "Permission to modify existing rewards"),
    _permission("rewards.delete", "Delete Rewards", _R, "Permission to remove rewards"),
    _permission("rewards.approve", "Approve Redemptions", _R, "Permission to approve or reject reward redemptions"),
    _permission("rewards.fulfill", "Fulfill Rewards", _R, "Permission to mark rewards as fulfilled"),
    # Points management
    _permission("points.view", "View Points", _P, "Permission to view user points"),
    _permission("points.grant", "Grant Points", _P, "Permission to manually award points to users"),
    _permission("points.deduct", "Deduct Points", _P, "Permission to deduct points from users"),
    _permission("points.history", "View Points History", _P, "Permission to view points transaction history"),
    # Games management
    _permission("games.create", "Create Games", _G, "Permission to create new games"),
    _permission("games.read", "View Games", _G, "Permission to view game details"),
    _permission("games.update", "Edit Games", _G, "Permission to modify existing games"),
    _permission("games.delete", "Delete Games", _G, "Permission to remove games"),
    # Reports and analytics
    _permission("reports.view", "View Reports", PermissionCategory.REPORTS, "Permission to view reports and analytics"),
    _permission("reports.export", "Export Reports", PermissionCategory.REPORTS, "Permission to export report data"),
    _permission("reports.create", "Create Custom Reports", PermissionCategory.REPORTS, "Permission to create custom reports"),
    _permission("reports.schedule", "Schedule Reports", PermissionCategory.REPORTS, "Permission to schedule automated reports"),
    # Leaderboard
    _permission("leaderboard.view", "View Leaderboard", PermissionCategory.LEADERBOARD, "Permission to view the leaderboard"),
    _permission("leaderboard.manage", "Manage Leaderboard", PermissionCategory.LEADERBOARD, "Permission to manage leaderboard settings"),
    # Audit logs
    _permission("audit.view", "View Audit Logs", PermissionCategory.AUDIT, "Permission to view audit logs"),
    _permission("audit.export", "Export Audit Logs", PermissionCategory.AUDIT, "Permission to export audit logs"),
    # Tenant settings
    _permission("settings.view", "View Settings", PermissionCategory.SETTINGS, "Permission to view tenant settings"),
    _permission("settings.update", "Update Settings", PermissionCategory.SETTINGS, "Permission to modify tenant settings"),
    # Roles and permissions
    _permission("roles.create", "Create Roles", PermissionCategory.ROLES, "Permission to create new roles within the tenant"),
    _permission("roles.read", "View Roles", PermissionCategory.ROLES, "Permission to view roles and their permissions"),
    _permission("roles.update", "Edit Roles", PermissionCategory.ROLES, "Permission to modify existing roles"),
    _permission("roles.delete", "Delete Roles", PermissionCategory.ROLES, "Permission to remove roles"),
    _permission("roles.assign", "Assign Roles", PermissionCategory.ROLES, "Permission to assign roles to users"),
    # Billing
    _permission("billing.view", "View Billing", PermissionCategory.BILLING, "Permission to view billing information"),
    _permission("billing.manage", "Manage Billing", PermissionCategory.BILLING, "Permission to manage billing and subscriptions"),
    # Dashboard access
    _permission("dashboard.admin", "Admin Dashboard Access", PermissionCategory.DASHBOARD, "Permission to access the admin dashboard"),
    _permission("dashboard.manager", "Manager Dashboard Access", PermissionCategory.DASHBOARD, "Permission to access the manager dashboard view"),
]

ALL_PERMISSION_NAMES = [permission["name"] for permission in PERMISSIONS]

_ADMIN_EXCEPT_GAMES = [name for name in ALL_PERMISSION_NAMES if not name.startswith("games.")]

ROLE_TEMPLATES: list[RoleTemplateData] = [
    # Default set offered to every tenant
    {
        "template_set_name": "generic",
        "role_name": "Administrator",
        "description": "Full access to all tenant features and settings",
        "slot_position": 1,
        "is_default_set": True,
        "permissions": list(ALL_PERMISSION_NAMES),
    },
    {
        "template_set_name": "generic",
        "role_name": "Manager",
        "description": "Manage users and content, view reports",
        "slot_position": 2,
        "is_default_set": True,
        "permissions": [
            "users.create", "users.read", "users.update",
            "quizzes.create", "quizzes.read", "quizzes.update", "quizzes.publish", "quizzes.assign",
            "courses.create", "courses.read", "courses.update", "courses.publish",
            "categories.read",
            "rewards.read", "rewards.approve", "rewards.fulfill",
            "points.view", "points.grant", "points.history",
            "games.read",
            "reports.view", "reports.export",
            "leaderboard.view",
            "audit.view",
            "settings.view",
            "roles.read", "roles.assign",
            "dashboard.admin", "dashboard.manager",
        ],
    },
    {
        "template_set_name": "generic",
        "role_name": "Content Creator",
        "description": "Create and manage quizzes and courses",
        "slot_position": 3,
        "is_default_set": True,
        "permissions": [
            "users.read",
            "quizzes.create", "quizzes.read", "quizzes.update",
            "courses.create", "courses.read", "courses.update",
            "categories.read",
            "rewards.read",
            "games.read",
            "reports.view",
            "leaderboard.view",
            "dashboard.manager",
        ],
    },
    {
        "template_set_name": "generic",
        "role_name": "Team Lead",
        "description": "Lead a team, assign quizzes, manage points",
        "slot_position": 4,
        "is_default_set": True,
        "permissions": [
            "users.read",
            "quizzes.read", "quizzes.assign",
            "courses.read",
            "categories.read",
            "rewards.read", "rewards.approve",
            "points.view", "points.grant", "points.history",
            "games.read",
            "reports.view",
            "leaderboard.view",
            "dashboard.manager",
        ],
    },
    {
        "template_set_name": "generic",
        "role_name": "Learner",
        "description": "Basic learner access - take quizzes, view courses",
        "slot_position": 5,
        "is_default_set": True,
        "permissions": [
            "quizzes.read",
            "courses.read",
            "categories.read",
            "rewards.read",
            "points.view",
            "games.read",
            "leaderboard.view",
        ],
    },
    # Education set
    {
        "template_set_name": "education",
        "role_name": "School Admin",
        "description": "Full access to school/institution features",
        "slot_position": 1,
        "is_default_set": False,
        "permissions": _ADMIN_EXCEPT_GAMES,
    },
    {
        "template_set_name": "education",
        "role_name": "Teacher",
        "description": "Create and manage course content, grade students",
        "slot_position": 2,
        "is_default_set": False,
        "permissions": [
            "users.read",
            "quizzes.create", "quizzes.read", "quizzes.update", "quizzes.publish", "quizzes.assign",
            "courses.create", "courses.read", "courses.update", "courses.publish",
            "categories.read",
            "rewards.read",
            "points.view", "points.grant", "points.history",
            "reports.view", "reports.export",
            "leaderboard.view",
            "dashboard.manager",
        ],
    },
    {
        "template_set_name": "education",
        "role_name": "Teaching Assistant",
        "description": "Assist teachers, manage student progress",
        "slot_position": 3,
        "is_default_set": False,
        "permissions": [
            "users.read",
            "quizzes.read", "quizzes.assign",
            "courses.read",
            "categories.read",
            "rewards.read",
            "points.view", "points.grant",
            "reports.view",
            "leaderboard.view",
            "dashboard.manager",
        ],
    },
    {
        "template_set_name": "education",
        "role_name": "Student",
        "description": "Take courses and quizzes, earn rewards",
        "slot_position": 4,
        "is_default_set": False,
        "permissions": [
            "quizzes.read",
            "courses.read",
            "categories.read",
            "rewards.read",
            "points.view",
            "leaderboard.view",
        ],
    },
    {
        "template_set_name": "education",
        "role_name": "Parent",
        "description": "View student progress and reports",
        "slot_position": 5,
        "is_default_set": False,
        "permissions": ["reports.view", "leaderboard.view"],
    },
]
