"""Unit tests for heuristic scoring and score-derived verdicts."""

from __future__ import annotations

from dataclasses import replace
import re
import time

import pytest

from core.models import (
    HallucinationRisk,
    Verdict,
    VerificationResult,
    clamp_score,
    classify_score,
)
from verification.engine import DIRECT_TEXT_TITLE, DIRECT_TEXT_URL, VerificationEngine
from verification.rules import RuleSet, compile_all, default_rules


NEUTRAL_TEXT = (
    "The city council will vote next week on a proposal to extend library opening hours on weekends. "
    "Officials said the change would mostly affect students, and the budget office has published the "
    "expected staffing costs online."
)


# ============================================================================
# Score mapping
# ============================================================================

@pytest.mark.unit
@pytest.mark.parametrize(
    ("score", "verdict", "risk"),
    [
        (100, Verdict.VERIFIED, HallucinationRisk.LOW),
        (75, Verdict.VERIFIED, HallucinationRisk.LOW),
        (74, Verdict.SUSPICIOUS, HallucinationRisk.MEDIUM),
        (45, Verdict.SUSPICIOUS, HallucinationRisk.MEDIUM),
        (44, Verdict.HIGHLY_UNRELIABLE, HallucinationRisk.HIGH),
        (0, Verdict.HIGHLY_UNRELIABLE, HallucinationRisk.HIGH),
    ],
)
def test_classify_score_boundaries(score, verdict, risk):
    assert classify_score(score) == (verdict, risk)

    result = VerificationResult(credibility_score=score)
    assert result.verdict is verdict
    assert result.hallucination_risk is risk


@pytest.mark.unit
@pytest.mark.parametrize(("raw", "expected"), [(-30, 0), (140, 100), (74.6, 75), (50, 50)])
def test_clamp_score(raw, expected):
    assert clamp_score(raw) == expected
    assert VerificationResult(credibility_score=raw).credibility_score == expected


@pytest.mark.unit
def test_result_ignores_supplied_verdict_and_risk():
    result = VerificationResult(
        credibility_score=20,
        verdict=Verdict.VERIFIED,
        hallucination_risk=HallucinationRisk.LOW,
    )

    assert result.verdict is Verdict.HIGHLY_UNRELIABLE
    assert result.hallucination_risk is HallucinationRisk.HIGH


@pytest.mark.unit
def test_result_caps_issues_and_drops_empty_list():
    many = VerificationResult(credibility_score=30, detected_issues=[f"issue {n}" for n in range(8)])
    none = VerificationResult(credibility_score=30, detected_issues=[])

    assert many.detected_issues == ("issue 0", "issue 1", "issue 2", "issue 3", "issue 4")
    assert none.detected_issues is None


@pytest.mark.unit
def test_result_drops_correction_when_verified_or_issue_free():
    verified = VerificationResult(credibility_score=80, detected_issues=["x"], suggested_correction="fix")
    issue_free = VerificationResult(credibility_score=30, suggested_correction="fix")
    applicable = VerificationResult(credibility_score=30, detected_issues=["x"], suggested_correction="fix")

    assert verified.suggested_correction is None
    assert issue_free.suggested_correction is None
    assert applicable.suggested_correction == "fix"


@pytest.mark.unit
def test_result_payload_uses_camel_case(sample_result):
    payload = sample_result.to_payload()

    assert payload == {
        "credibilityScore": 50,
        "verdict": "Suspicious",
        "reasoning": "Contains potentially fabricated institution names.",
        "hallucinationRisk": "Medium",
        "detectedIssues": ["Suspicious institution name detected"],
        "suggestedCorrection": "Researchers at Harvard Medical School reported a small improvement.",
    }
    assert VerificationResult.model_validate(payload) == sample_result


# ============================================================================
# Engine scoring
# ============================================================================

@pytest.mark.unit
def test_hedged_text_is_verified(engine, hedged_text):
    result = engine.analyze_text(hedged_text)

    assert result.credibility_score == 85
    assert result.verdict is Verdict.VERIFIED
    assert result.hallucination_risk is HallucinationRisk.LOW
    assert result.reasoning == "Uses cautious, evidence-aligned language."
    assert result.detected_issues is None
    assert result.suggested_correction is None


@pytest.mark.unit
def test_fabricated_claims_are_highly_unreliable(engine, fabricated_text):
    result = engine.analyze_text(fabricated_text)

    assert result.credibility_score == 0
    assert result.verdict is Verdict.HIGHLY_UNRELIABLE
    assert result.hallucination_risk is HallucinationRisk.HIGH
    assert result.detected_issues == (
        'Extreme claim: "completely eliminated"',
        'Extreme claim: "every hospital"',
        'Sensationalist term: "miracle cure"',
        "Sensationalist term: \"they don't want you to know\"",
        'Sensationalist term: "proven fact"',
    )
    assert "Found 2 extreme/absolute claims." in result.reasoning
    assert "Insufficient content for thorough analysis." in result.reasoning
    assert result.suggested_correction is not None
    assert "completely eliminated" not in result.suggested_correction


@pytest.mark.unit
def test_single_elimination_claim_without_hedging_is_suspicious(engine):
    result = engine.analyze_text("AI has completely eliminated the need for radiologists in rural clinics.")

    # 70 - 15 (one extreme claim) - 10 (short content)
    assert result.credibility_score == 45
    assert result.verdict is Verdict.SUSPICIOUS
    assert result.detected_issues[0] == 'Extreme claim: "completely eliminated"'


@pytest.mark.unit
def test_one_hedge_on_neutral_text_reaches_verified_boundary(engine):
    text = NEUTRAL_TEXT.replace("would mostly affect", "may help")

    result = engine.analyze_text(text)

    assert result.credibility_score == 75
    assert result.verdict is Verdict.VERIFIED
    assert result.reasoning == "Content appears factual and uses responsible language."


@pytest.mark.unit
def test_neutral_text_scores_base(engine):
    result = engine.analyze_text(NEUTRAL_TEXT)

    assert result.credibility_score == 70
    assert result.verdict is Verdict.SUSPICIOUS
    assert result.reasoning == "Some concerning patterns detected. Manual verification recommended."
    assert result.detected_issues is None
    assert result.suggested_correction is None


@pytest.mark.unit
def test_short_text_penalty(engine):
    result = engine.analyze_text("The meeting is on Tuesday.")

    assert result.credibility_score == 60
    assert result.reasoning == "Insufficient content for thorough analysis."
    assert result.suggested_correction is None


@pytest.mark.unit
def test_fabricated_institution_is_penalized_and_corrected(engine):
    text = (
        "Researchers at Harvard Medical University reported a small improvement in sleep quality among "
        "adults who walked daily. The team noted the trial was short and that results should be repeated "
        "in a larger group before any advice is given to patients."
    )

    result = engine.analyze_text(text)

    assert result.credibility_score == 50
    assert result.verdict is Verdict.SUSPICIOUS
    assert result.detected_issues == ("Suspicious institution name detected",)
    assert result.reasoning == "Contains potentially fabricated institution names."
    assert result.suggested_correction.startswith("Researchers at Harvard Medical School reported")


@pytest.mark.unit
def test_citations_each_reported_and_issues_capped(engine):
    text = (
        "Recovery rates are 100% (Smith et al., 2020) (Jones et al., 2021) "
        "(Brown et al., 2019) (WHO Report, 2022) (Lee et al., 2018)."
    )

    result = engine.analyze_text(text)

    assert len(result.detected_issues) == 5
    assert result.detected_issues[0] == 'Extreme claim: "100%"'
    assert result.detected_issues[1].startswith("Unverified citation: (Smith et al., 2020)")
    assert "Contains 5 unverifiable citations." in result.reasoning
    # 70 - 15 - 40 (citations capped at 4) - 10 (short) = 5
    assert result.credibility_score == 5


@pytest.mark.unit
def test_score_never_leaves_bounds(engine):
    text = " ".join(
        [
            "BREAKING: 100% of cases cured.",
            "A guaranteed cure that every doctor hides.",
            "This secret conspiracy cover-up was exposed.",
            "Scientists confirm this undeniable revolutionary breakthrough.",
        ]
    )

    result = engine.analyze_text(text)

    assert result.credibility_score == 0
    assert len(result.detected_issues) == 5


@pytest.mark.unit
def test_gutted_text_gets_rewrite_message(engine):
    text = "AI has completely eliminated the need for radiologists. Robots have made human surgeons obsolete."

    result = engine.analyze_text(text)

    assert result.suggested_correction == default_rules().rewrite_message


@pytest.mark.unit
def test_clean_text_removes_only_the_offending_sentence(engine):
    text = "Patients were surveyed. Robots have made human surgeons obsolete. The study ran for a year."

    assert engine.clean_text(text) == "Patients were surveyed. The study ran for a year."


@pytest.mark.unit
def test_repeated_made_phrases_analyze_quickly(engine):
    text = ("It has been made clear that " * 180)[:4900] + " 100% guaranteed"

    started = time.perf_counter()
    result = engine.analyze_text(text)
    elapsed = time.perf_counter() - started

    assert elapsed < 2.0
    assert result.credibility_score < 75
    assert result.suggested_correction is not None


@pytest.mark.unit
def test_clean_text_collapses_whitespace_and_double_periods(engine):
    cleaned = engine.clean_text("Findings hold (Smith et al., 2020).  More   text follows.")

    assert cleaned == "Findings hold . More text follows."


@pytest.mark.unit
def test_analyze_accepts_url_and_title_without_using_them(engine, hedged_text):
    direct = engine.analyze_text(hedged_text)
    fetched = engine.analyze("https://example.com/a", "Some Title", hedged_text)

    assert direct == fetched
    assert DIRECT_TEXT_URL == "N/A (Direct Text)"
    assert DIRECT_TEXT_TITLE == "User Input"


# ============================================================================
# Rule injection
# ============================================================================

@pytest.mark.unit
def test_custom_keywords_are_scored():
    rules = replace(default_rules(), sensational_keywords=("shocking",))
    engine = VerificationEngine(rules)

    result = engine.analyze_text(NEUTRAL_TEXT + " The results were shocking.")

    assert result.credibility_score == 60
    assert result.detected_issues == ('Sensationalist term: "shocking"',)


@pytest.mark.unit
def test_empty_rule_set_only_applies_length_penalty():
    empty = RuleSet(
        extreme_claims=(),
        fabricated_citations=(),
        fabricated_institutions=(),
        sensational_keywords=(),
        hedging_patterns=(),
        removable_sentences=(),
    )
    engine = VerificationEngine(empty)

    assert engine.analyze_text("100% miracle cure").credibility_score == 60
    assert engine.analyze_text(NEUTRAL_TEXT).credibility_score == 70


@pytest.mark.unit
def test_compile_all_defaults_to_case_insensitive():
    (pattern,) = compile_all([r"may\s+help"])

    assert pattern.flags & re.IGNORECASE
    assert pattern.search("This MAY HELP some readers")
