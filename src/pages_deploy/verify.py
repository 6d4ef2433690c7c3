"""Optional smoke check that the published site serves the redirect page.

Pages deployments are asynchronous, so this is opt-in (``--verify``) and never
changes the pipeline outcome; a failure only affects the CLI exit code.
"""

from __future__ import annotations

import logging

import requests

from pages_deploy.errors import VerifyError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


def pages_url(slug: str) -> str:
    owner, _, repo = slug.strip("/").partition("/")
    if not owner or not repo:
        raise VerifyError(f"Repository slug must be owner/repo, got {slug!r}")
    return f"https://{owner.lower()}.github.io/{repo}/"


def verify_published(
    url: str,
    target: str,
    *,
    session: requests.Session | None = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> bool:
    getter = session.get if session is not None else requests.get
    logger.info("Verifying %s", url)
    try:
        response = getter(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.HTTPError as exc:
        raise VerifyError(f"HTTP error fetching {url}: {exc}") from exc
    except requests.exceptions.RequestException as exc:
        raise VerifyError(f"Could not fetch {url}: {exc}") from exc

    found = target in response.text
    if not found:
        logger.warning("Published page at %s does not reference %s", url, target)
    return found
