import json
import os
from unittest.mock import MagicMock, patch

import pytest
import requests

from safecheck import config, feed_updater


@pytest.fixture(autouse=True)
def feed_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "FEED_DIR", str(tmp_path / "feeds"))
    return tmp_path / "feeds"


@pytest.mark.parametrize("raw,expected", [
    ("HTTP://Example.COM/Login/", "http://example.com/Login"),
    ("example.com/a?b=1#frag", "http://example.com/a?b=1"),
    ("  https://example.com  ", "https://example.com"),
])
def test_normalize_url(raw, expected):
    assert feed_updater.normalize_url(raw) == expected


def test_build_index_earlier_source_wins():
    index = feed_updater.build_index([
        ("PhishTank", [("http://bad.example/x", {"phish_id": 1}), (None, {"verified": "yes"})]),
        ("OpenPhish", [("http://bad.example/x/", {}), ("http://other.example/", {})]),
    ])
    assert index["http://bad.example/x"] == {"feed": "PhishTank", "entry": {"phish_id": 1}}
    assert index["http://other.example"]["feed"] == "OpenPhish"
    assert len(index) == 2


def test_parsers():
    pt = MagicMock()
    pt.json.return_value = {"data": [{"url": "http://a.example"}, {"phish_url": "http://b.example"}]}
    assert [u for u, _ in feed_updater.parse_phishtank(pt)] == ["http://a.example", "http://b.example"]

    op = MagicMock()
    op.text = "http://c.example\n\n  http://d.example  \n"
    assert feed_updater.parse_openphish(op) == [
        ("http://c.example", {"url": "http://c.example"}),
        ("http://d.example", {"url": "http://d.example"}),
    ]


def test_save_and_load_roundtrip(feed_dir):
    path = feed_updater.save_index({"http://a.example": {"feed": "OpenPhish", "entry": {}}})
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    assert "updated_at" in data
    assert list(feed_updater.load_index()) == ["http://a.example"]
    assert not os.path.exists(path + ".tmp")


def test_load_index_missing_or_corrupt(feed_dir):
    assert feed_updater.load_index() == {}
    feed_dir.mkdir()
    (feed_dir / "index.json").write_text("{not json", encoding="utf-8")
    assert feed_updater.load_index() == {}


def test_feed_index_reads_file_once_until_it_changes(feed_dir):
    path = feed_updater.save_index({"http://a.example": {"feed": "PhishTank", "entry": {}}})
    index = feed_updater.FeedIndex(path)

    with patch("safecheck.feed_updater.load_index", wraps=feed_updater.load_index) as spy:
        for _ in range(5):
            assert index.lookup("http://A.example/")["feed"] == "PhishTank"
        assert spy.call_count == 1

        feed_updater.save_index({"http://b.example": {"feed": "OpenPhish", "entry": {}}})
        mtime = os.path.getmtime(path) + 10
        os.utime(path, (mtime, mtime))

        assert index.lookup("http://a.example") is None
        assert index.lookup("http://b.example")["feed"] == "OpenPhish"
        assert spy.call_count == 2


def test_feed_index_missing_file_is_empty(feed_dir):
    index = feed_updater.FeedIndex(str(feed_dir / "index.json"))
    assert index.lookup("http://a.example") is None


def test_current_index_follows_feed_dir(feed_dir, tmp_path, monkeypatch):
    first = feed_updater.current_index()
    assert feed_updater.current_index() is first
    monkeypatch.setattr(config, "FEED_DIR", str(tmp_path / "other"))
    assert feed_updater.current_index() is not first


def test_main_survives_one_failed_download(feed_dir):
    openphish = MagicMock()
    openphish.text = "http://phish.example/one\n\nhttp://phish.example/two\n"

    def fake_get(url, timeout):
        if "phishtank" in url:
            raise requests.ConnectionError("down")
        return openphish

    with patch("safecheck.feed_updater.requests.get", side_effect=fake_get):
        feed_updater.main()

    index = feed_updater.load_index()
    assert set(index) == {"http://phish.example/one", "http://phish.example/two"}
