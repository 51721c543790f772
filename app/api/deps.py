from fastapi import Header, Query

from app.services.broadcast_service import get_broadcaster  # noqa: F401  (re-exported for routes/tests)


def customer_key(
    username: str | None = Query(None),
    username_header: str | None = Header(None, alias="username"),
) -> str | None:
    """Name or email identifying the customer; query param wins over the header."""
    return username or username_header
