"""
Risk scoring for SafeCheck.

Score is a safety score: start at 100, subtract a fixed deduction for every
risk factor that is present, clamp to [0, 100]. Higher is safer.

    No HTTPS                        -20
    Domain younger than ~6 months   -25
    IP obfuscation (125.0.0.1.com)  -40
    Listed in phishing/malware feed -50
    Suspicious keywords             -15
    Excessive redirects (>3)        -10
"""

from dataclasses import dataclass, asdict
from typing import Tuple

BASE_SCORE = 100

# (factor attribute, reason code, points), in evaluation order
DEDUCTION_RULES = (
    ('no_https', 'NO_HTTPS', 20),
    ('young_domain', 'YOUNG_DOMAIN', 25),
    ('ip_obfuscation', 'IP_OBFUSCATION', 40),
    ('listed_in_feeds', 'LISTED_IN_FEEDS', 50),
    ('suspicious_keywords', 'SUSPICIOUS_KEYWORDS', 15),
    ('excessive_redirects', 'EXCESSIVE_REDIRECTS', 10),
)

# Classification labels (risk_classification in API responses)
SAFE = 'safe'
WARNING = 'warning'
DANGER = 'danger'

# Actions
ALLOW = 'allow'
WARN = 'warn'
BLOCK = 'block'


@dataclass(frozen=True)
class RiskFactors:
    no_https: bool = False
    young_domain: bool = False
    ip_obfuscation: bool = False
    listed_in_feeds: bool = False
    suspicious_keywords: bool = False
    excessive_redirects: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Reason:
    code: str
    points: int

    def to_dict(self) -> dict:
        return {'code': self.code, 'points': self.points}


@dataclass(frozen=True)
class ScoreResult:
    score: int
    classification: str
    reasons: Tuple[Reason, ...] = ()

    def to_dict(self) -> dict:
        return {
            'score': self.score,
            'classification': self.classification,
            'reasons': [r.to_dict() for r in self.reasons],
        }


def compute_score(factors: RiskFactors) -> ScoreResult:
    deductions = 0
    reasons = []
    for attr, code, points in DEDUCTION_RULES:
        if getattr(factors, attr):
            deductions += points
            reasons.append(Reason(code, points))

    score = max(0, min(BASE_SCORE, BASE_SCORE - deductions))

    if score < 50:
        classification = DANGER
    elif score < 80:
        classification = WARNING
    else:
        classification = SAFE

    return ScoreResult(score=score, classification=classification, reasons=tuple(reasons))


def classify(score: int) -> str:
    """Map a safety score to an action: >80 allow, 50..80 warn, <50 block.

    Not the same split as compute_score's classification: a score of 80 is
    'safe' there but 'warn' here.
    """
    if score > 80:
        return ALLOW
    if score >= 50:
        return WARN
    return BLOCK
