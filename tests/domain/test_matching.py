from __future__ import annotations

import logging

import pytest

from anesthesia_reports.domain.matching import (
    PatientConfidence,
    SurgeryConfidence,
    classify_patient_matches,
    classify_surgery_matches,
)
from anesthesia_reports.domain.model import MatchLevel
from tests.support.records import make_patient_match, make_surgery_match


def test_patient_candidates_ordered_by_level_then_fingerprint() -> None:
    matches = [
        make_patient_match("possible", match_level="possible"),
        make_patient_match("weak", match_level="weak"),
        make_patient_match("strong", match_level="strong"),
        make_patient_match("strong-fp", match_level="strong", fingerprint_match=True),
    ]

    candidates = classify_patient_matches(matches)

    assert [c.candidate_id for c in candidates] == ["strong-fp", "strong", "weak", "possible"]
    assert candidates[0].confidence.label == "Strong similarity"
    assert candidates[0].summary.cns == "123 4567 8901 2345"


def test_patient_ties_keep_server_order() -> None:
    matches = [make_patient_match(f"p-{index}", match_level="weak") for index in range(5)]

    candidates = classify_patient_matches(matches)

    assert [c.candidate_id for c in candidates] == [f"p-{index}" for index in range(5)]


@pytest.mark.parametrize("level", ["", "unknown", "  "])
def test_unknown_match_level_is_possible(level: str) -> None:
    (candidate,) = classify_patient_matches([make_patient_match("p-1", match_level=level)])

    assert candidate.confidence == PatientConfidence(level=MatchLevel.POSSIBLE)
    assert candidate.confidence.label == "Possible similarity"


def test_match_level_is_case_insensitive() -> None:
    assert MatchLevel.from_wire(" STRONG ") is MatchLevel.STRONG


def test_surgery_candidates_ordered_by_score_descending() -> None:
    matches = [
        make_surgery_match("low", match_score=1),
        make_surgery_match("high", match_score=6),
        make_surgery_match("mid-a", match_score=3),
        make_surgery_match("mid-b", match_score=3),
    ]

    candidates = classify_surgery_matches(matches)

    assert [c.candidate_id for c in candidates] == ["high", "mid-a", "mid-b", "low"]
    assert candidates[0].confidence.label == "Match 6/6"


def test_surgery_score_out_of_range_is_clamped(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)

    candidates = classify_surgery_matches(
        [make_surgery_match("over", match_score=9), make_surgery_match("under", match_score=-2)]
    )

    assert [c.confidence.score for c in candidates] == [6, 0]
    assert "Clamped surgery match score 9 to 6" in caplog.text


def test_surgery_confidence_validates_range() -> None:
    with pytest.raises(ValueError, match="out of range"):
        SurgeryConfidence(score=7)


def test_classification_never_drops_candidates() -> None:
    assert classify_patient_matches([]) == []
    assert len(classify_surgery_matches([make_surgery_match("s-1")] * 3)) == 3
