"""
Flash messages: one-hop notices kept in the session until the next rendered page.
"""

from starlette.requests import HTTPConnection

from listings_web.core.sessions import WebSession, get_web_session

FLASH_KEY = "flash"
CATEGORIES = ("success", "error")


def flash(connection: HTTPConnection, category: str, text: str) -> None:
    """Queue a message for the next page this session renders."""
    if category not in CATEGORIES:
        raise ValueError(f"Unknown flash category: {category}")
    queues = get_web_session(connection).data.setdefault(FLASH_KEY, {})
    queues.setdefault(category, []).append(text)


def consume_flashes(web_session: WebSession) -> dict[str, list[str]]:
    """Read and clear every pending queue."""
    pending = web_session.data.pop(FLASH_KEY, None) or {}
    return {category: list(pending.get(category, [])) for category in CATEGORIES}
