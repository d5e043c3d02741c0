# feed_updater.py
"""
Local phishing feed index.

Writing: ``python -m safecheck.feed_updater`` (e.g. from cron) pulls every
source in FEEDS and writes FEED_DIR/index.json, a map of normalized URL to
{"feed", "entry"}. Earlier sources win when the same URL appears twice.

Reading: current_index() returns the parsed index and only re-reads the file
when its mtime changes, so lookups on the request path stay cheap.
"""

import os
import json
import time
import logging
import threading
from urllib.parse import urlsplit

import requests

from safecheck import config

INDEX_NAME = "index.json"
DOWNLOAD_TIMEOUT = 30  # seconds

logger = logging.getLogger("feed_updater")


def index_path() -> str:
    return os.path.join(config.FEED_DIR, INDEX_NAME)


def normalize_url(url: str) -> str:
    """Lowercase scheme and host, drop trailing '/' and the fragment, keep the query."""
    url = url.strip()
    try:
        parts = urlsplit(url if "://" in url else "http://" + url)
    except ValueError:
        return url.lower()
    query = f"?{parts.query}" if parts.query else ""
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}{parts.path.rstrip('/')}{query}"


def parse_phishtank(resp: requests.Response) -> list:
    """PhishTank online-valid JSON: a list of entries (some mirrors wrap it in an object)."""
    payload = resp.json()
    if isinstance(payload, dict):
        payload = next((v for v in payload.values() if isinstance(v, list)), [])
    return [(e.get("url") or e.get("phish_url"), e) for e in payload if isinstance(e, dict)]


def parse_openphish(resp: requests.Response) -> list:
    """OpenPhish community feed: one URL per line."""
    return [(line.strip(), {"url": line.strip()}) for line in resp.text.splitlines() if line.strip()]


# (name, url, parser) in priority order
FEEDS = (
    ("PhishTank", "http://data.phishtank.com/data/online-valid.json", parse_phishtank),
    ("OpenPhish", "https://openphish.com/feed.txt", parse_openphish),
)


def download_feed(name: str, url: str, parser) -> list:
    """Return [(url, entry), ...] for one source; [] if the download fails."""
    logger.info("Downloading %s feed...", name)
    try:
        resp = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
        resp.raise_for_status()
        entries = parser(resp)
    except Exception as e:
        logger.exception("Failed to download %s: %s", name, e)
        return []
    logger.info("%s entries: %d", name, len(entries))
    return entries


def build_index(sources: list) -> dict:
    """sources: [(feed name, [(url, entry), ...]), ...], highest priority first."""
    index = {}
    for feed, entries in sources:
        for url, entry in entries:
            if url:
                index.setdefault(normalize_url(url), {"feed": feed, "entry": entry})
    return index


def save_index(index: dict) -> str:
    os.makedirs(config.FEED_DIR, exist_ok=True)
    path = index_path()
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as fh:
        json.dump({"updated_at": int(time.time()), "index": index}, fh)
    os.replace(tmp, path)  # readers never see a half-written index
    logger.info("Saved index to %s (entries=%d)", path, len(index))
    return path


def load_index(path: str = None) -> dict:
    """Read the index file; {} when it is missing or unreadable."""
    path = path or index_path()
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh).get("index", {})
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning("Could not read feed index %s: %s", path, e)
        return {}


class FeedIndex:
    """Parsed index for one path, reloaded when the file's mtime changes. Thread-safe."""

    def __init__(self, path: str):
        self.path = path
        self._mtime = None
        self._entries = {}
        self._lock = threading.Lock()

    def entries(self) -> dict:
        try:
            mtime = os.path.getmtime(self.path)
        except OSError:
            mtime = None
        with self._lock:
            if mtime != self._mtime:
                self._entries = load_index(self.path) if mtime is not None else {}
                self._mtime = mtime
            return self._entries

    def lookup(self, url: str):
        return self.entries().get(normalize_url(url))


_indexes = {}
_indexes_lock = threading.Lock()


def current_index() -> FeedIndex:
    """The FeedIndex for the configured FEED_DIR."""
    path = index_path()
    with _indexes_lock:
        if path not in _indexes:
            _indexes[path] = FeedIndex(path)
        return _indexes[path]


def main():
    logging.basicConfig(level=config.LOG_LEVEL)
    sources = [(name, download_feed(name, url, parser)) for name, url, parser in FEEDS]
    index = build_index(sources)
    save_index(index)
    logger.info("Feed update complete. total=%d", len(index))


if __name__ == "__main__":
    main()
