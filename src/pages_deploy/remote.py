from __future__ import annotations

import re

DEFAULT_HOST = "github.com"

_USERINFO_RE = re.compile(r"^(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*://)[^/]*@")


def push_url(token: str, slug: str, host: str = DEFAULT_HOST) -> str:
    """Authenticated HTTPS remote for ``slug``.

    The token is interpolated verbatim; callers must never log the result
    without passing it through :func:`redact_url` first.
    """

    return f"https://{token}@{host}/{slug}.git"


def redact_url(url: str) -> str:
    return _USERINFO_RE.sub(r"\g<scheme>***@", url)


def redact_argv(argv: list[str] | tuple[str, ...]) -> list[str]:
    return [redact_url(arg) for arg in argv]
