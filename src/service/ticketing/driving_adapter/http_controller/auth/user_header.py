from fastapi import Header


async def get_current_user_id(
    user_id: int = Header(alias='X-User-Id', gt=0),
) -> int:
    """Caller identity, set by the gateway after it has authenticated the request."""
    return user_id
