"""
scanner.py
Gathers every risk signal for a URL, scores it and builds the API decision.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from safecheck import config
from .domain_age import get_domain_age_days
from .heuristics import (analyze_url_syntax, find_suspicious_keywords, has_suspicious_keywords,
                         is_ip_obfuscation)
from .redirects import RedirectResult, check_redirects
from .scoring import RiskFactors, classify, compute_score
from .threat_intel import SOURCE as SAFE_BROWSING_SOURCE, check_threat_feeds

logger = logging.getLogger("scanner")


def _safe_call(name, fn, url, default):
    """Run one lookup; a failure becomes its default value."""
    try:
        return fn(url)
    except Exception as e:
        logger.warning("%s lookup failed for %s: %s", name, url, e)
        return default


def build_decision(url: str, factors: RiskFactors, details: dict) -> dict:
    result = compute_score(factors)
    return {
        "url": url,
        "score": result.score,
        "action": classify(result.score),
        "risk_classification": result.classification,
        "risk_factors": [r.to_dict() for r in result.reasons],
        "details": details,
    }


def evaluate_url(url: str) -> dict:
    """
    Run every check on an already validated URL and return the decision:

    {
      "url": "https://example.com",
      "score": 80,
      "action": "warn",
      "risk_classification": "safe",
      "risk_factors": [{"code": "SUSPICIOUS_KEYWORDS", "points": 15}, ...],
      "details": {"domainAgeDays": 9000, "safeBrowsing": {...}, "redirects": 0}
    }
    """
    syntax = analyze_url_syntax(url)
    suspicious = has_suspicious_keywords(url)

    # the three network lookups are independent; scoring waits for all of them
    with ThreadPoolExecutor(max_workers=3) as pool:
        feeds_f = pool.submit(_safe_call, "threat feed", check_threat_feeds, url,
                              {"listed": False, "source": SAFE_BROWSING_SOURCE, "note": "exception"})
        age_f = pool.submit(_safe_call, "domain age", get_domain_age_days, url, None)
        redirects_f = pool.submit(_safe_call, "redirect", check_redirects, url, RedirectResult())
        feeds = feeds_f.result()
        age_days = age_f.result()
        redirects = redirects_f.result()

    factors = RiskFactors(
        no_https=syntax.protocol != "https",
        young_domain=age_days is not None and age_days < config.YOUNG_DOMAIN_DAYS,
        ip_obfuscation=is_ip_obfuscation(syntax.hostname),
        listed_in_feeds=bool(feeds.get("listed")),
        suspicious_keywords=suspicious,
        excessive_redirects=redirects.excessive,
    )
    if suspicious:
        logger.debug("Suspicious keywords in %s: %s", url, ", ".join(find_suspicious_keywords(url)))

    return build_decision(url, factors, {
        "domainAgeDays": age_days,
        "safeBrowsing": feeds,
        "redirects": redirects.count,
    })
