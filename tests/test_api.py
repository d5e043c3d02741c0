from unittest.mock import patch

import pytest

from safecheck import api

DECISION = {
    "url": "https://example.com",
    "score": 100,
    "action": "allow",
    "risk_classification": "safe",
    "risk_factors": [],
    "details": {"domainAgeDays": 9000, "safeBrowsing": {"listed": False}, "redirects": 0},
}


@pytest.fixture
def client():
    api.app.config['TESTING'] = True
    api.cache.clear()
    with api.app.test_client() as c:
        yield c


@pytest.fixture
def evaluate():
    with patch("safecheck.api.evaluate_url", return_value=DECISION) as mock_eval:
        yield mock_eval


def test_health(client):
    rv = client.get('/api/health')
    assert rv.status_code == 200
    assert rv.get_json() == {'ok': True}
    assert rv.headers['X-Content-Type-Options'] == 'nosniff'


@pytest.mark.parametrize('body,code', [
    ({}, 'url_required'),
    ({'url': ''}, 'url_required'),
    ({'url': '   '}, 'invalid_url'),
    ({'url': 123}, 'url_required'),
    ({'url': 'https://example.com/' + 'a' * 2100}, 'url_too_long'),
    ({'url': 'ftp://example.com'}, 'invalid_url'),
    ({'url': 'not-a-url'}, 'invalid_url'),
])
def test_check_url_validation(client, evaluate, body, code):
    rv = client.post('/api/check-url', json=body)
    assert rv.status_code == 400
    data = rv.get_json()
    assert data['error'] == code
    assert data['message']
    evaluate.assert_not_called()


def test_non_json_body_is_rejected(client, evaluate):
    rv = client.post('/api/check-url', data='url=https://example.com',
                     content_type='application/x-www-form-urlencoded')
    assert rv.status_code == 400
    assert rv.get_json()['error'] == 'url_required'


def test_check_url_returns_decision_and_caches(client, evaluate):
    rv = client.post('/api/check-url', json={'url': '  https://example.com  '})
    assert rv.status_code == 200
    assert rv.get_json() == DECISION
    evaluate.assert_called_once_with('https://example.com')

    # same URL again: served from cache, by either endpoint
    rv = client.post('/api/risk-details', json={'url': 'https://example.com'})
    assert rv.status_code == 200
    assert rv.get_json() == DECISION
    evaluate.assert_called_once()


def test_risk_details_matches_check_url(client, evaluate):
    rv = client.post('/api/risk-details', json={'url': 'https://example.com'})
    assert rv.status_code == 200
    assert rv.get_json() == DECISION


def test_unexpected_error_is_500(client):
    with patch("safecheck.api.evaluate_url", side_effect=RuntimeError("boom")):
        rv = client.post('/api/risk-details', json={'url': 'https://example.com'})
    assert rv.status_code == 500
    assert rv.get_json() == {'error': 'internal_error', 'message': 'An error occurred while analyzing the URL'}


def test_end_to_end_with_stubbed_lookups(client):
    # real scanner and scoring, network lookups stubbed
    from safecheck.app.redirects import RedirectResult
    with patch("safecheck.app.scanner.check_threat_feeds",
               return_value={"listed": False, "source": "google_safebrowsing", "note": "api_key_missing"}), \
            patch("safecheck.app.scanner.get_domain_age_days", return_value=20), \
            patch("safecheck.app.scanner.check_redirects", return_value=RedirectResult(1, False)):
        rv = client.post('/api/check-url', json={'url': 'http://example.org/'})
    assert rv.status_code == 200
    data = rv.get_json()
    assert data['score'] == 55
    assert data['action'] == 'warn'
    assert data['risk_classification'] == 'warning'
    assert data['risk_factors'] == [{'code': 'NO_HTTPS', 'points': 20}, {'code': 'YOUNG_DOMAIN', 'points': 25}]
    assert data['details']['redirects'] == 1
    assert data['details']['domainAgeDays'] == 20
