"""
Roles and Permissions Configuration
Defines the closed set of ToolHub roles and the permission matrix each role is granted.
Used by route dependencies, the /auth/me endpoint and the check_user_role script.
"""

from enum import Enum
from typing import Dict, FrozenSet, List


class Role(str, Enum):
    ADMIN = "Admin"
    OWNER = "Owner"
    OBSERVER = "Observer"


# Define modules and their actions
MODULES = {
    "tools": {
        "resource": "tools",
        "actions": ["create", "read", "read_all", "update", "delete", "approve"],
        "description": "Tool catalogue management"
    },
    "requests": {
        "resource": "requests",
        "actions": ["create", "read", "update", "delete", "bulk"],
        "description": "Tool request tracking"
    },
    "users": {
        "resource": "users",
        "actions": ["read", "update", "invite", "reset_password"],
        "description": "User administration"
    },
    "audit_logs": {
        "resource": "audit_logs",
        "actions": ["read"],
        "description": "Audit trail"
    },
    "notifications": {
        "resource": "notifications",
        "actions": ["read", "update"],
        "description": "Personal notifications"
    },
    "journal": {
        "resource": "journal",
        "actions": ["create", "read", "read_all"],
        "description": "Daily work journal"
    },
    "openai_usage": {
        "resource": "openai_usage",
        "actions": ["read"],
        "description": "OpenAI usage and cost reporting"
    },
}

# Human readable descriptions for non-CRUD actions
MODULE_SPECIFIC_PERMISSIONS = {
    "tools": {
        "read_all": "View every tool regardless of approval status",
        "approve": "Approve or reject submitted tools"
    },
    "requests": {
        "bulk": "Apply bulk actions to requests"
    },
    "users": {
        "invite": "Send email invitations",
        "reset_password": "Reset another user's password"
    },
    "journal": {
        "read_all": "View every team member's daily logs"
    },
}

# Permissions granted per role. Every Role member must appear here.
ROLE_PERMISSIONS: Dict[Role, FrozenSet[str]] = {
    Role.ADMIN: frozenset(
        f"{module['resource']}:{action}"
        for module in MODULES.values()
        for action in module["actions"]
    ),
    Role.OWNER: frozenset({
        "tools:create", "tools:read", "tools:update",
        "requests:create", "requests:read", "requests:update", "requests:delete", "requests:bulk",
        "notifications:read", "notifications:update",
        "journal:create", "journal:read",
    }),
    Role.OBSERVER: frozenset({
        "tools:read",
        "requests:create", "requests:read",
        "notifications:read", "notifications:update",
    }),
}

# Capability summaries shown by the check_user_role script
ROLE_CAPABILITIES: Dict[Role, List[str]] = {
    Role.ADMIN: [
        "Can create tools",
        "Can approve tools",
        "Can view all tools",
        "Can manage all users",
        "Can view team daily logs and OpenAI usage",
    ],
    Role.OWNER: [
        "Can create tools",
        "Cannot approve tools (Admin only)",
        "Can view own tools + approved tools",
        "Cannot manage users (Admin only)",
        "Can keep a daily journal",
    ],
    Role.OBSERVER: [
        "Cannot create tools",
        "Cannot approve tools",
        "Can view approved tools only",
        "Cannot manage users",
        "No daily journal access",
    ],
}


def parse_role(value: str) -> Role:
    """Parse a role string from the users table. Raises ValueError on unknown roles."""
    return Role(value)


def role_permissions(role: Role) -> FrozenSet[str]:
    try:
        return ROLE_PERMISSIONS[role]
    except KeyError:
        raise ValueError(f"No permissions configured for role {role!r}")


def has_permission(role: Role, permission: str) -> bool:
    return permission in role_permissions(role)


def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the roles holding them
    Format: {
        "permissions": [
            {"name": "tools:create", "resource": "tools", "action": "create", "description": "..."},
            ...
        ],
        "roles": [
            {"name": "Admin", "permissions": ["audit_logs:read", ...]},
            ...
        ]
    }
    """
    permissions = []
    for module_name, module_config in MODULES.items():
        resource = module_config["resource"]
        for action in module_config["actions"]:
            description = f"{action.capitalize()} {resource}"
            if module_name in MODULE_SPECIFIC_PERMISSIONS and action in MODULE_SPECIFIC_PERMISSIONS[module_name]:
                description = MODULE_SPECIFIC_PERMISSIONS[module_name][action]
            permissions.append({
                "name": f"{resource}:{action}",
                "resource": resource,
                "action": action,
                "description": description
            })

    roles = [
        {"name": role.value, "permissions": sorted(role_permissions(role))}
        for role in Role
    ]
    return {
        "permissions": permissions,
        "roles": roles
    }
