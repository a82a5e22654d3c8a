ROLE_SCOPES = {
    "customer": ["pickups:create", "pickups:approve", "pickups:view_code"],
    "partner": ["pickups:accept", "pickups:start", "pickups:submit_items", "dashboard:view"],
}

def has_scope(role: str, scope: str) -> bool:
    return scope in ROLE_SCOPES.get(role, [])
