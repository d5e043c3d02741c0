# threat_intel.py
"""
Threat intelligence lookups.

Sources:
    - Google Safe Browsing v4 (threatMatches:find), needs SAFE_BROWSING_API_KEY
    - Local PhishTank/OpenPhish index written by feed_updater.py

Public functions:
    - check_safe_browsing(url) -> dict
    - check_local_feeds(url) -> dict
    - check_threat_feeds(url) -> dict, both sources combined

None of these raise: an unavailable source reports listed/found False and,
for Safe Browsing, a "note" saying why.
"""

import logging

import requests

from safecheck import config
from safecheck.feed_updater import current_index

logger = logging.getLogger("threat_intel")

SAFE_BROWSING_ENDPOINT = "https://safebrowsing.googleapis.com/v4/threatMatches:find"
SOURCE = "google_safebrowsing"
THREAT_TYPES = ["MALWARE", "SOCIAL_ENGINEERING", "UNWANTED_SOFTWARE", "POTENTIALLY_HARMFUL_APPLICATION"]


def _unlisted(note: str) -> dict:
    return {"listed": False, "source": SOURCE, "note": note}


def check_safe_browsing(url: str) -> dict:
    """
    Ask Safe Browsing whether url is a known threat.

    Returns:
        {"listed": True/False, "details": [{"threatType", "platformType"}, ...], "source": ...}
    or, when the lookup could not be made:
        {"listed": False, "source": ..., "note": "api_key_missing" | "api_error" | "timeout" | "exception"}
    """
    api_key = config.SAFE_BROWSING_API_KEY
    if not api_key:
        logger.warning("Safe Browsing API key not configured")
        return _unlisted("api_key_missing")

    body = {
        "client": {"clientId": "safecheck", "clientVersion": "1.0"},
        "threatInfo": {
            "threatTypes": THREAT_TYPES,
            "platformTypes": ["ANY_PLATFORM"],
            "threatEntryTypes": ["URL"],
            "threatEntries": [{"url": url}],
        },
    }

    try:
        resp = requests.post(SAFE_BROWSING_ENDPOINT, params={"key": api_key}, json=body,
                             timeout=config.SAFE_BROWSING_TIMEOUT_SECONDS)
        if not resp.ok:
            logger.warning("SafeBrowsing API non-OK response: %s", resp.status_code)
            return _unlisted("api_error")
        matches = resp.json().get("matches") or []
    except requests.Timeout:
        logger.warning("SafeBrowsing API request timeout")
        return _unlisted("timeout")
    except Exception as e:
        logger.error("SafeBrowsing check failed: %s", e)
        return _unlisted("exception")

    details = [{"threatType": m.get("threatType"), "platformType": m.get("platformType")}
               for m in matches]
    return {"listed": bool(details), "details": details, "source": SOURCE}


def check_local_feeds(url: str) -> dict:
    """Look url up in the local feed index (exact match after normalization)."""
    hit = current_index().lookup(url)
    if hit:
        return {"found": True, "feed": hit.get("feed")}
    return {"found": False, "feed": None}


def check_threat_feeds(url: str) -> dict:
    """Safe Browsing result plus a "localFeed" entry; listed if either source lists url."""
    result = check_safe_browsing(url)
    try:
        local = check_local_feeds(url)
    except Exception as e:
        logger.warning("Local feed lookup failed: %s", e)
        local = {"found": False, "feed": None}
    result["localFeed"] = local
    result["listed"] = bool(result.get("listed")) or local["found"]
    return result
