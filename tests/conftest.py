"""
Shared pytest fixtures and configuration for TruthLens tests.
"""

from __future__ import annotations

import pytest

from core.models import VerificationResult
from verification.engine import VerificationEngine
from verification.rules import default_rules


# ============================================================================
# Fixtures: Event capture
# ============================================================================

class EventRecorder:
    """Collect (event_type, payload) pairs emitted through an event hook."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, object]]] = []

    def __call__(self, event_type: str, payload: dict[str, object]) -> None:
        self.events.append((event_type, payload))

    def of_type(self, event_type: str) -> list[dict[str, object]]:
        return [payload for name, payload in self.events if name == event_type]


@pytest.fixture
def events() -> EventRecorder:
    """Fresh event recorder usable as any component's event_hook."""
    return EventRecorder()


# ============================================================================
# Fixtures: Verification
# ============================================================================

@pytest.fixture
def engine() -> VerificationEngine:
    """Heuristic engine with the stock rule tables."""
    return VerificationEngine(default_rules())


@pytest.fixture
def hedged_text() -> str:
    """Long, cautious paragraph that scores as Verified."""
    return (
        "Early studies suggest that structured exercise may help reduce blood pressure in some adults. "
        "The benefit depends on the starting level of fitness, and further research is needed to confirm "
        "long-term effects. Clinicians recommend it as a complementary measure with human oversight of "
        "medication changes."
    )


@pytest.fixture
def fabricated_text() -> str:
    """Short paragraph full of absolutist and sensational claims."""
    return (
        "Doctors are stunned: AI has completely eliminated the need for doctors in every hospital. "
        "This miracle cure is a proven fact that they don't want you to know about."
    )


@pytest.fixture
def sample_result() -> VerificationResult:
    """Sample Suspicious result with one issue and a correction."""
    return VerificationResult(
        credibility_score=50,
        reasoning="Contains potentially fabricated institution names.",
        detected_issues=["Suspicious institution name detected"],
        suggested_correction="Researchers at Harvard Medical School reported a small improvement.",
    )


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "contract: contract schema compliance tests")
    config.addinivalue_line("markers", "integration: end-to-end integration tests")
    config.addinivalue_line("markers", "unit: unit tests")
