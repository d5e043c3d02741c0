# config.py
"""
Runtime configuration for SafeCheck.

Every setting comes from the environment (a local .env file is loaded first).
Modules read these as ``config.NAME`` at call time so deployments and tests
can override them.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# HTTP server
PORT = int(os.getenv("PORT", "4000"))
ALLOWED_ORIGIN = os.getenv("ALLOWED_ORIGIN", "*")
MAX_URL_LENGTH = 2048
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Redis backs both the rate limiter and the result cache when set
REDIS_URL = os.getenv("REDIS_URL")
RATE_LIMIT = os.getenv("RATE_LIMIT", "60 per minute")

# Result cache
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "900"))
CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "500"))

# Google Safe Browsing
SAFE_BROWSING_API_KEY = os.getenv("SAFE_BROWSING_API_KEY", "")
SAFE_BROWSING_TIMEOUT_SECONDS = float(os.getenv("SAFE_BROWSING_TIMEOUT_SECONDS", "5"))

# Domain age (API Ninjas WHOIS, then RDAP, then python-whois)
WHOIS_NINJA_API_KEY = os.getenv("WHOIS_NINJA_API_KEY", "")
WHOIS_NINJA_TIMEOUT_MS = int(os.getenv("WHOIS_NINJA_TIMEOUT_MS", "7000"))
WHOIS_NINJA_RETRIES = int(os.getenv("WHOIS_NINJA_RETRIES", "2"))
RDAP_TIMEOUT_SECONDS = float(os.getenv("RDAP_TIMEOUT_SECONDS", "8"))
YOUNG_DOMAIN_DAYS = 180  # ~6 months

# Redirect chain inspection
REDIRECT_TIMEOUT_SECONDS = float(os.getenv("REDIRECT_TIMEOUT_SECONDS", "5"))

# Local phishing feed index (see feed_updater.py)
FEED_DIR = os.getenv("SAFECHECK_FEED_DIR", "feeds")
