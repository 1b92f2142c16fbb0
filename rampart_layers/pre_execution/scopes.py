"""Agent scope definitions and matching logic."""

from fnmatch import fnmatchcase

AGENT_SCOPES = {
    "admin": ["*"],
    "ops_agent_*": ["infra.*", "tickets:write", "reports.*"],
    "analyst_agent_*": ["reports.*", "warehouse:read"],
    "support_agent_*": ["tickets:write", "crm:read"],
}


def scope_matches(required: str, granted: str) -> bool:
    """
    Check if a granted scope matches a required scope.

    Supports:
    - Exact match: "warehouse:read" == "warehouse:read"
    - Wildcard: "infra.*" matches "infra.restart", "tickets:*" matches "tickets:read"
    - Admin: "*" matches everything
    - Hierarchy: "tickets:write" includes "tickets:read" (write implies read)

    Example:
        scope_matches("tickets:read", "tickets:*")  # True
        scope_matches("tickets:read", "*")  # True
        scope_matches("tickets:write", "tickets:read")  # False
    """
    if granted == "*":
        return True

    if required == granted:
        return True

    # "infra.*" / "infra:*" both cover "infra.x" and "infra:x"
    if granted.endswith(".*") or granted.endswith(":*"):
        prefix = granted[:-2]
        if required.startswith(prefix + ".") or required.startswith(prefix + ":"):
            return True

    if ":" in required and ":" in granted:
        req_resource, req_action = required.rsplit(":", 1)
        grant_resource, grant_action = granted.rsplit(":", 1)
        if req_resource == grant_resource and grant_action == "write" and req_action == "read":
            return True

    return False


def granted_scopes(agent_id: str, table: dict[str, list[str]] | None = None) -> list[str]:
    """Union of scopes from every table pattern the agent id matches (shell-style globs)."""
    table = AGENT_SCOPES if table is None else table
    scopes: list[str] = []
    for pattern, pattern_scopes in table.items():
        if fnmatchcase(agent_id, pattern):
            scopes.extend(pattern_scopes)
    return scopes


def missing_scopes(required_scopes: list[str], user_scopes: list[str]) -> list[str]:
    """Required scopes that no granted scope satisfies, in input order."""
    return [
        required
        for required in required_scopes
        if not any(scope_matches(required, granted) for granted in user_scopes)
    ]
