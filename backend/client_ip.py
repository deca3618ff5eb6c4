"""
Client address resolution for requests arriving through a reverse proxy.
Checks CF-Connecting-IP (Cloudflare tunnel), then X-Forwarded-For, then the socket peer.
"""

from fastapi import Request


def client_ip(request: Request) -> str:
    ip = request.headers.get("cf-connecting-ip", "").strip()
    if not ip:
        ip = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
    if not ip:
        ip = request.client.host if request.client else ""
    return ip or "unknown"
