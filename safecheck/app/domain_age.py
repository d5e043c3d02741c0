"""
Domain age lookup.

Public function:
    get_domain_age_days(url: str) -> int | None

Sources, in order:
    1. API Ninjas WHOIS (only when WHOIS_NINJA_API_KEY is set)
    2. RDAP via rdap.org
    3. python-whois

Returns None when the age is unknown. Never raises.
"""

import datetime
import logging
import time
from typing import Any, Optional
from urllib.parse import quote

import requests
import tldextract
import whois

from safecheck import config

logger = logging.getLogger("domain_age")

API_NINJAS_WHOIS_URL = "https://api.api-ninjas.com/v1/whois"
RDAP_URL = "https://rdap.org/domain/{domain}"
CREATION_DATE_KEYS = ("creation_date", "creationDate", "createdDate", "created", "Creation Date", "Created")
RETRY_DELAY = 0.5  # seconds

# bundled public suffix snapshot, no download at runtime
_extract = tldextract.TLDExtract(suffix_list_urls=())


def registrable_domain(url: str) -> Optional[str]:
    """example.co.uk for https://www.example.co.uk/x; None for IPs and bare hosts."""
    ext = _extract(url)
    if not ext.domain or not ext.suffix:
        return None
    return f"{ext.domain}.{ext.suffix}"


def _to_datetime(value: Any) -> Optional[datetime.datetime]:
    """Coerce a WHOIS/RDAP date (datetime, epoch seconds, ISO string, or a list of them)."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        dt = value
    elif isinstance(value, (int, float)):
        dt = datetime.datetime.fromtimestamp(value, tz=datetime.timezone.utc)
    elif isinstance(value, str):
        try:
            dt = datetime.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt


def _age_days(created: datetime.datetime) -> int:
    return (datetime.datetime.now(datetime.timezone.utc) - created).days


def parse_creation_date(obj: Any) -> Optional[datetime.datetime]:
    if not isinstance(obj, dict):
        return None
    for key in CREATION_DATE_KEYS:
        if obj.get(key):
            return _to_datetime(obj[key])
    # some providers nest the record
    if obj.get("whois_record"):
        return parse_creation_date(obj["whois_record"])
    return None


def _looks_like_api_ninjas_key(key: str) -> bool:
    return bool(key) and " " not in key and len(key) >= 10


def _retry_get(url: str, attempts: int = 2, **kwargs) -> requests.Response:
    last_err = None
    for i in range(attempts):
        try:
            return requests.get(url, **kwargs)
        except requests.RequestException as e:
            last_err = e
            logger.warning("Fetch attempt %d for %s failed: %s", i + 1, url, e)
            if i + 1 < attempts:
                time.sleep(RETRY_DELAY)
    raise last_err


def _from_api_ninjas(domain: str) -> Optional[int]:
    api_key = config.WHOIS_NINJA_API_KEY
    if not _looks_like_api_ninjas_key(api_key):
        logger.warning("WHOIS_NINJA_API_KEY appears malformed (%s...)", api_key[:8])

    resp = _retry_get(API_NINJAS_WHOIS_URL, attempts=max(1, config.WHOIS_NINJA_RETRIES),
                      params={"domain": domain}, headers={"X-Api-Key": api_key},
                      timeout=config.WHOIS_NINJA_TIMEOUT_MS / 1000.0)
    if not resp.ok:
        logger.warning("API Ninjas WHOIS non-OK: %s %s", resp.status_code, resp.text[:200])
        return None
    created = parse_creation_date(resp.json())
    return _age_days(created) if created else None


def _from_rdap(domain: str) -> Optional[int]:
    resp = _retry_get(RDAP_URL.format(domain=quote(domain)), attempts=2,
                      headers={"Accept": "application/rdap+json, application/json"},
                      timeout=config.RDAP_TIMEOUT_SECONDS)
    if not resp.ok:
        return None
    data = resp.json()

    for event in data.get("events") or []:
        if "regist" in str(event.get("eventAction", "")).lower():
            created = _to_datetime(event.get("eventDate"))
            if created:
                return _age_days(created)

    created = _to_datetime(data.get("registration"))
    return _age_days(created) if created else None


def _from_whois(domain: str) -> Optional[int]:
    w = whois.whois(domain)
    created = _to_datetime(w.creation_date)
    return _age_days(created) if created else None


def get_domain_age_days(url: str) -> Optional[int]:
    """Return the registrable domain's age in whole days, or None if unknown."""
    try:
        domain = registrable_domain(url)
    except Exception as e:
        logger.warning("Could not extract domain from %s: %s", url, e)
        return None
    if not domain:
        return None

    lookups = [("rdap", _from_rdap), ("whois", _from_whois)]
    if config.WHOIS_NINJA_API_KEY:
        lookups.insert(0, ("api_ninjas", _from_api_ninjas))

    for name, lookup in lookups:
        try:
            days = lookup(domain)
        except Exception as e:
            logger.warning("%s lookup failed for %s: %s", name, domain, e)
            continue
        if days is not None:
            return days

    return None
