"""
Quick local smoke test: run the full decision pipeline (live lookups) on a few
sample URLs and print one JSON line per URL with score, action and details.

Run: python3 tools/run_local_smoke.py [url ...]
"""
import json
import logging
import sys

from safecheck import config
from safecheck.app.scanner import evaluate_url

SAMPLES = [
    "https://github.com",
    "http://example.com",
    "https://wikipedia.org",
    "http://125.0.0.1.com/login",
    "https://secure-paypal-verify.example/account",
]


def main(urls):
    logging.basicConfig(level=config.LOG_LEVEL)
    print("Safe Browsing key set:", bool(config.SAFE_BROWSING_API_KEY))
    print("API Ninjas key set:", bool(config.WHOIS_NINJA_API_KEY))
    for u in urls:
        d = evaluate_url(u)
        print(json.dumps({
            "url": u,
            "score": d["score"],
            "action": d["action"],
            "risk_classification": d["risk_classification"],
            "risk_factors": [f["code"] for f in d["risk_factors"]],
            "details": d["details"],
        }))


if __name__ == '__main__':
    main(sys.argv[1:] or SAMPLES)
