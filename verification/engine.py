"""Deterministic heuristic credibility scoring."""

from __future__ import annotations

import re

from core.models import (
    VERIFIED_MIN_SCORE,
    Verdict,
    VerificationResult,
    clamp_score,
    classify_score,
)
from verification.rules import RuleSet, default_rules


BASE_SCORE = 70
SHORT_CONTENT_CHARS = 200
MAX_ISSUES = 5
MIN_CORRECTION_RATIO = 0.3

DIRECT_TEXT_URL = "N/A (Direct Text)"
DIRECT_TEXT_TITLE = "User Input"

_DEFAULT_REASONING = {
    Verdict.VERIFIED: "Content appears factual and uses responsible language.",
    Verdict.SUSPICIOUS: "Some concerning patterns detected. Manual verification recommended.",
    Verdict.HIGHLY_UNRELIABLE: "Multiple hallucination indicators detected.",
}


class VerificationEngine:
    """
    Score text for fabricated claims using injected rule tables.

    Scoring starts at 70 and applies, in order: extreme claims, fabricated
    citations, fabricated institutions, sensational keywords, hedging bonus,
    short-content penalty. The result is clamped to [0, 100]; verdict and
    risk follow from the clamped score.
    """

    def __init__(self, rules: RuleSet | None = None) -> None:
        self.rules = rules or default_rules()

    def analyze(self, url: str, title: str, content: str) -> VerificationResult:
        """Score one document. url and title are accepted for parity with model prompts."""
        _ = url, title
        score = BASE_SCORE
        reasoning: list[str] = []
        issues: list[str] = []
        lower_content = content.lower()

        # 1. Extreme/absolute claims: one issue per pattern family.
        extreme_count = 0
        for pattern in self.rules.extreme_claims:
            matches = [match.group(0) for match in pattern.finditer(content)]
            if matches:
                extreme_count += len(matches)
                issues.append(f'Extreme claim: "{matches[0]}"')
        if extreme_count:
            score -= 15 * min(extreme_count, 3)
            reasoning.append(f"Found {extreme_count} extreme/absolute claims.")

        # 2. Fabricated citations: one issue per match.
        citation_count = 0
        for pattern in self.rules.fabricated_citations:
            for match in pattern.finditer(content):
                citation_count += 1
                issues.append(f"Unverified citation: {match.group(0)[:50]}...")
        if citation_count:
            score -= 10 * min(citation_count, 4)
            reasoning.append(f"Contains {citation_count} unverifiable citations.")

        # 3. Fabricated institutions: flat penalty, once.
        if any(rule.pattern.search(content) for rule in self.rules.fabricated_institutions):
            score -= 20
            issues.append("Suspicious institution name detected")
            reasoning.append("Contains potentially fabricated institution names.")

        # 4. Sensational keywords.
        found_keywords = [keyword for keyword in self.rules.sensational_keywords if keyword in lower_content]
        if found_keywords:
            score -= 10 * len(found_keywords)
            reasoning.append("Sensationalist language detected.")
            issues.extend(f'Sensationalist term: "{keyword}"' for keyword in found_keywords)

        # 5. Hedged, evidence-aligned phrasing.
        hedging_count = sum(1 for pattern in self.rules.hedging_patterns if pattern.search(content))
        if hedging_count >= 3:
            score += 15
            reasoning.append("Uses cautious, evidence-aligned language.")
        elif hedging_count >= 1:
            score += 5

        # 6. Too little text to judge.
        if len(content) < SHORT_CONTENT_CHARS:
            score -= 10
            reasoning.append("Insufficient content for thorough analysis.")

        score = clamp_score(score)
        verdict, _risk = classify_score(score)
        reasoning_text = " ".join(reasoning) or _DEFAULT_REASONING[verdict]

        suggested_correction = None
        if score < VERIFIED_MIN_SCORE and issues:
            suggested_correction = self.suggest_correction(content)

        return VerificationResult(
            credibility_score=score,
            reasoning=reasoning_text,
            detected_issues=issues[:MAX_ISSUES] or None,
            suggested_correction=suggested_correction,
        )

    def analyze_text(self, text: str) -> VerificationResult:
        return self.analyze(DIRECT_TEXT_URL, DIRECT_TEXT_TITLE, text)

    def clean_text(self, content: str) -> str:
        """Strip problematic sentences, fake institutions, and citations."""
        cleaned = content
        for pattern in self.rules.removable_sentences:
            cleaned = pattern.sub("", cleaned)
        for rule in self.rules.fabricated_institutions:
            cleaned = rule.pattern.sub(rule.replacement, cleaned)
        for pattern in self.rules.fabricated_citations:
            cleaned = pattern.sub("", cleaned)
        cleaned = re.sub(r"\s+", " ", cleaned)
        cleaned = re.sub(r"\.\s*\.", ".", cleaned)
        return cleaned.strip()

    def suggest_correction(self, content: str) -> str:
        """Cleaned rewrite, or the rewrite-from-scratch message when cleanup gutted the text."""
        cleaned = self.clean_text(content)
        if len(cleaned) < len(content) * MIN_CORRECTION_RATIO:
            return self.rules.rewrite_message
        return cleaned
