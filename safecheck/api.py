"""Main Flask API for SafeCheck.

Run: python -m safecheck.api
"""

import logging

from flask import Flask, request, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from safecheck import config
from safecheck.app.heuristics import is_valid_url
from safecheck.app.scanner import evaluate_url
from safecheck.cache import create_cache

# Logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("api")

# Flask app
app = Flask(__name__)
CORS(app, resources={r"/api/*": {"origins": config.ALLOWED_ORIGIN}})

# Rate limiter: prefer Redis storage in production when REDIS_URL is set
if config.REDIS_URL:
    limiter = Limiter(app=app, key_func=get_remote_address,
                      default_limits=[config.RATE_LIMIT], storage_uri=config.REDIS_URL)
    logger.info("Using Redis at %s for rate limiting", config.REDIS_URL)
else:
    limiter = Limiter(app=app, key_func=get_remote_address, default_limits=[config.RATE_LIMIT])

cache = create_cache(config.REDIS_URL)


class ValidationError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def validate_url(url) -> str:
    """Return the trimmed URL or raise ValidationError."""
    if not isinstance(url, str) or not url:
        raise ValidationError("url_required", "URL parameter is required and must be a string")
    if len(url) > config.MAX_URL_LENGTH:
        raise ValidationError("url_too_long", f"URL must be less than {config.MAX_URL_LENGTH} characters")
    url = url.strip()
    if not is_valid_url(url):
        raise ValidationError("invalid_url", "Invalid URL format")
    return url


def _check(event: str, failure_message: str):
    """Shared body of /api/check-url and /api/risk-details."""
    data = request.get_json(silent=True)
    try:
        url = validate_url(data.get("url") if isinstance(data, dict) else None)
    except ValidationError as e:
        return jsonify({"error": e.code, "message": e.message}), 400

    try:
        cached = cache.get(url)
        if cached:
            logger.info("%s_cached url=%s", event, url)
            return jsonify(cached), 200

        result = evaluate_url(url)
        cache.set(url, result)
    except Exception:
        logger.exception("%s_error url=%s", event, url)
        return jsonify({"error": "internal_error", "message": failure_message}), 500

    logger.info("decision url=%s action=%s score=%s", url, result["action"], result["score"])
    return jsonify(result), 200


@app.after_request
def add_security_headers(response):
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    return response


@app.errorhandler(429)
def rate_limited(error):
    return jsonify({"error": "rate_limited", "message": f"Too many requests: {error.description}"}), 429


@app.route("/api/health", methods=["GET"])
def health():
    return jsonify({"ok": True})


@app.route("/api/check-url", methods=["POST"])
def check_url():
    return _check("url_check", "An error occurred while checking the URL")


@app.route("/api/risk-details", methods=["POST"])
def risk_details():
    return _check("risk_details", "An error occurred while analyzing the URL")


if __name__ == "__main__":
    logger.info("SafeCheck backend listening on port %s", config.PORT)
    app.run(host="0.0.0.0", port=config.PORT, debug=False)
