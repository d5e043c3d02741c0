"""
Redirect chain inspection.

Follows HTTP redirects by hand (one GET per hop, redirects disabled in
requests) so the number of hops can be counted.
"""

import logging
from dataclasses import dataclass, asdict
from urllib.parse import urljoin

import requests

from safecheck import config

logger = logging.getLogger("redirects")

MAX_HOPS = 10
EXCESSIVE_REDIRECTS = 3  # more than this many hops is suspicious

HEADERS = {"User-Agent": "SafeCheck/1.0"}


@dataclass(frozen=True)
class RedirectResult:
    count: int = 0
    excessive: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def _location(url: str, timeout: float):
    """GET url without following redirects; return its Location header (or None)."""
    with requests.get(url, headers=HEADERS, allow_redirects=False,
                      timeout=timeout, stream=True) as resp:
        return resp.headers.get("Location")


def check_redirects(url: str, timeout: float = None) -> RedirectResult:
    """
    Count redirect hops starting at url (at most MAX_HOPS).

    Any failure along the chain gives RedirectResult(0, False): a broken
    chain is treated as no signal, never as an error.
    """
    if timeout is None:
        timeout = config.REDIRECT_TIMEOUT_SECONDS

    try:
        location = _location(url, timeout)
        current = url
        count = 0
        while location and count < MAX_HOPS:
            count += 1
            next_url = urljoin(current, location)
            location = _location(next_url, timeout)
            current = next_url
    except Exception as e:
        logger.warning("Redirect check failed for %s: %s", url, e)
        return RedirectResult()

    return RedirectResult(count=count, excessive=count > EXCESSIVE_REDIRECTS)
