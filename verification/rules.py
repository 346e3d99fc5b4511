"""Pattern tables for the heuristic verification engine."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Pattern


@dataclass(frozen=True, slots=True)
class InstitutionRule:
    """A fabricated institution name and its canonical correction ("" deletes it)."""

    pattern: Pattern[str]
    replacement: str = ""


@dataclass(frozen=True, slots=True)
class RuleSet:
    """
    Immutable rule tables consumed by VerificationEngine.

    Tables are evaluated in the order given; issue ordering follows it.
    """

    extreme_claims: tuple[Pattern[str], ...]
    fabricated_citations: tuple[Pattern[str], ...]
    fabricated_institutions: tuple[InstitutionRule, ...]
    sensational_keywords: tuple[str, ...]
    hedging_patterns: tuple[Pattern[str], ...]
    removable_sentences: tuple[Pattern[str], ...]
    rewrite_message: str = (
        "Text contains too many hallucinations. Consider rewriting from scratch using verified sources."
    )


def compile_all(patterns: Iterable[str], flags: int = re.IGNORECASE) -> tuple[Pattern[str], ...]:
    return tuple(re.compile(pattern, flags) for pattern in patterns)


def default_rules() -> RuleSet:
    """Build the stock rule tables."""
    extreme_claims = compile_all(
        (
            r"100\s*%",
            r"completely\s+(?:eliminated|solved|cured)",
            r"all\s+(?:cases|patients|doctors|hospitals)",
            r"every\s+(?:single|one|doctor|hospital)",
            r"has\s+replaced\s+(?:all|every|human)",
            r"made\s+[^.]*?\s+obsolete",
            r"proven\s+(?:beyond|conclusively|definitively)",
            r"guaranteed\s+(?:cure|success|results)",
            r"outperform[^.]*?\s+in\s+100%",
        )
    )

    # Parenthetical author/report citations are case-sensitive on purpose.
    fabricated_citations = (
        re.compile(r"\([A-Z][a-z]+\s+et\s+al\.,?\s*\d{4}\)"),
        re.compile(r"\([A-Z]{2,}\s+Report,?\s*\d{4}\)"),
    ) + compile_all(
        (
            r"according\s+to\s+a\s+\d{4}\s+report\s+by\s+[^,.]+[,.]",
            r"\.\s*A\s+study\s+(?:conducted|published)\s+by[^.]+\.",
        )
    )

    fabricated_institutions = (
        InstitutionRule(re.compile(r"harvard\s+medical\s+university", re.IGNORECASE), "Harvard Medical School"),
        InstitutionRule(re.compile(r"international\s+institute\s+of\s+[a-z\s]+", re.IGNORECASE)),
        InstitutionRule(
            re.compile(r"global\s+(?:center|institute|foundation)\s+(?:for|of)\s+[a-z\s]+", re.IGNORECASE)
        ),
    )

    sensational_keywords = (
        "miracle cure",
        "secret",
        "they don't want you to know",
        "proven fact",
        "undeniable",
        "scientists confirm",
        "breaking:",
        "exposed",
        "cover-up",
        "conspiracy",
        "guaranteed",
        "revolutionary breakthrough",
    )

    hedging_patterns = compile_all(
        (
            r"may\s+help",
            r"can\s+assist",
            r"suggests?\s+that",
            r"studies\s+(?:indicate|show|suggest)",
            r"further\s+research\s+(?:is\s+)?needed",
            r"in\s+controlled\s+(?:studies|trials)",
            r"depends\s+on",
            r"when\s+used\s+alongside",
            r"complementary",
            r"augment.*not\s+replace",
            r"human\s+oversight",
            r"ethical\s+deployment",
        )
    )

    # Anchored at sentence starts; each match stays inside one sentence.
    removable_sentences = compile_all(
        (
            r"(?:^|(?<=\.))[^.]*has\s+completely\s+eliminated[^.]*\.",
            r"(?:^|(?<=\.))[^.]*outperform\s+doctors\s+in\s+100%[^.]*\.",
            r"(?:^|(?<=\.))[^.]*has\s+replaced\s+human\s+doctors[^.]*\.",
            r"(?:^|(?<=\.))[^.]*made\s+[^.]*?\s+obsolete[^.]*\.",
            r"(?:^|(?<=\.))[^.]*legally\s+approved\s+as\s+independent[^.]*\.",
        )
    )

    return RuleSet(
        extreme_claims=extreme_claims,
        fabricated_citations=fabricated_citations,
        fabricated_institutions=fabricated_institutions,
        sensational_keywords=sensational_keywords,
        hedging_patterns=hedging_patterns,
        removable_sentences=removable_sentences,
    )
