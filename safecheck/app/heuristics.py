"""
heuristics.py

URL syntax checks that feed the risk score.

Public functions:
    is_valid_url(raw) -> bool
    analyze_url_syntax(raw) -> SyntaxInfo
    is_ip_obfuscation(hostname) -> bool
    has_suspicious_keywords(raw_url) -> bool
    find_suspicious_keywords(raw_url) -> list

Example:
    >>> analyze_url_syntax("https://sub.example.com/path?q=1")
    SyntaxInfo(protocol='https', hostname='sub.example.com', path='/path?q=1')
    >>> is_ip_obfuscation("125.0.0.1.com")
    True
"""

import re
from dataclasses import dataclass, asdict
from typing import Optional
from urllib.parse import urlsplit

ALLOWED_SCHEMES = ("http", "https")
FORBIDDEN_HOST_CHARS = '<>"{}|\\^`%'

# Matched anywhere in the URL, case-insensitive
SUSPICIOUS_KEYWORDS = (
    'login', 'verify', 'update', 'secure', 'bank', 'account',
    'paypal', 'free', 'bonus', 'win', 'prize',
)

# Dotted quad anywhere in the host: 125.0.0.1.com, evil.1.2.3.4.net, 10.0.0.1
IP_OBFUSCATION_RE = re.compile(r'(\d{1,3}\.){3}\d{1,3}')


@dataclass(frozen=True)
class SyntaxInfo:
    protocol: Optional[str] = None
    hostname: Optional[str] = None
    path: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def _split(raw):
    """Parse raw into a SplitResult, or None when it is not an absolute URL."""
    if not isinstance(raw, str):
        return None
    try:
        parts = urlsplit(raw.strip())
    except ValueError:
        return None
    if not parts.scheme:
        return None
    return parts


def is_valid_url(raw) -> bool:
    """True only for absolute http(s) URLs that carry a host."""
    parts = _split(raw)
    if parts is None:
        return False
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return False
    try:
        hostname = parts.hostname
        parts.port  # ValueError for non-numeric or out-of-range ports
    except ValueError:
        return False
    if not hostname:
        return False
    return not any(ch.isspace() or ch in FORBIDDEN_HOST_CHARS for ch in hostname)


def analyze_url_syntax(raw) -> SyntaxInfo:
    """
    Split a URL into protocol, hostname and path (+ query).

    Never raises: anything that does not parse as an absolute URL gives a
    SyntaxInfo with every field set to None.
    """
    parts = _split(raw)
    if parts is None:
        return SyntaxInfo()
    try:
        hostname = parts.hostname or ''
    except ValueError:
        return SyntaxInfo()

    path = parts.path
    if not path and hostname:
        path = '/'
    if parts.query:
        path += '?' + parts.query

    return SyntaxInfo(protocol=parts.scheme.lower(), hostname=hostname, path=path)


def is_ip_obfuscation(hostname) -> bool:
    if not hostname:
        return False
    return IP_OBFUSCATION_RE.search(hostname) is not None


def find_suspicious_keywords(raw_url) -> list:
    """Return suspicious keywords found in the lowercased URL, by first appearance."""
    if not raw_url:
        return []
    s = raw_url.lower()
    found = [kw for kw in SUSPICIOUS_KEYWORDS if kw in s]
    return sorted(found, key=lambda x: s.index(x))


def has_suspicious_keywords(raw_url) -> bool:
    if not raw_url:
        return False
    s = raw_url.lower()
    return any(kw in s for kw in SUSPICIOUS_KEYWORDS)


# Simple CLI / quick tests
if __name__ == "__main__":
    test_urls = [
        "https://github.com",
        "http://192.168.0.1/login?verify=true",
        "https://125.0.0.1.com/account",
        "ftp://example.com",
        "not-a-url",
    ]

    for u in test_urls:
        print("=" * 80)
        print("URL:", u)
        print("valid:", is_valid_url(u))
        info = analyze_url_syntax(u)
        print("syntax:", info.to_dict())
        print("ip obfuscation:", is_ip_obfuscation(info.hostname))
        print("keywords:", find_suspicious_keywords(u))
