"""Request helpers."""
from fastapi import Request


def get_client_ip(request: Request) -> str:
    """Return client's IP address from request headers or connection info.

    Checks `X-Forwarded-For` first (comma-separated), then falls back to
    `request.client.host`. Returns 'unknown' if not found.
    """
    x_forwarded_for = request.headers.get("x-forwarded-for")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()

    client = getattr(request, "client", None)
    if client and getattr(client, "host", None):
        return client.host

    return "unknown"


def client_meta(request: Request) -> tuple[str, str]:
    """(ip_address, user_agent) recorded on a new session."""
    return get_client_ip(request), request.headers.get("user-agent", "")[:512]
