from __future__ import annotations

from collections import deque
from typing import Any

import pytest

from anesthesia_reports.domain.decision import (
    AdoptAndUpdate,
    AdoptExisting,
    CreateNew,
    DecisionRequest,
    ScriptedDecisionSurface,
)
from anesthesia_reports.domain.errors import (
    FatalSessionError,
    ValidationError,
    WorkflowCancelledError,
)
from anesthesia_reports.domain.matching import classify_patient_matches, classify_surgery_matches
from anesthesia_reports.domain.model import EntityKind, ResolutionPath
from anesthesia_reports.domain.normalization import normalize_patient
from anesthesia_reports.domain.workflow import WorkflowOutcome
from anesthesia_reports.ui import cli as cli_module
from tests.support.records import (
    RAW_PATIENT,
    make_patient,
    make_patient_match,
    make_surgery,
    make_surgery_match,
)

PATIENT_ARGS = [
    "patient",
    "--name",
    "maria da silva",
    "--sex",
    "female",
    "--date-of-birth",
    "1980-05-17",
    "--cns",
    "123456789012345",
]


def _capture(monkeypatch: pytest.MonkeyPatch, name: str, result: object) -> dict[str, Any]:
    captured: dict[str, Any] = {}

    async def fake(raw: dict[str, object], *, decide: object) -> object:
        captured["raw"] = raw
        captured["decide"] = decide
        if isinstance(result, BaseException):
            raise result
        return result

    monkeypatch.setattr(cli_module, name, fake)
    return captured


def test_patient_command_passes_raw_fields(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    outcome = WorkflowOutcome(entity=make_patient("p-1"), path=ResolutionPath.CREATED)
    captured = _capture(monkeypatch, "create_or_claim_patient", outcome)

    cli_module.main([*PATIENT_ARGS, "--choice", "adopt:p-1"])

    assert captured["raw"] == {
        "name": "maria da silva",
        "sex": "female",
        "date_of_birth": "1980-05-17",
        "cns": "123456789012345",
    }
    assert isinstance(captured["decide"], ScriptedDecisionSurface)
    assert list(captured["decide"].intents) == [AdoptExisting("p-1")]
    assert capsys.readouterr().out.strip() == "p-1"


def test_surgery_command_skips_unset_options(monkeypatch: pytest.MonkeyPatch) -> None:
    outcome = WorkflowOutcome(entity=make_surgery("s-1"), path=ResolutionPath.CREATED)
    captured = _capture(monkeypatch, "create_or_claim_surgery", outcome)

    cli_module.main(
        [
            "surgery",
            "--patient-id",
            "p-1",
            "--date",
            "2024-03-02",
            "--type",
            "sus",
            "--insurance-name",
            "SUS",
            "--insurance-number",
            "1",
            "--hospital",
            "HC",
            "--main-surgeon",
            "Dr. Souza",
            "--proposed-procedure",
            "Appendectomy",
            "--weight",
            "70,2",
            "--cbhpm-code",
            "3.10",
        ]
    )

    raw = captured["raw"]
    assert raw["weight"] == "70,2"
    assert raw["cbhpm_code"] == "3.10"
    assert "auxiliary_surgeons" not in raw
    assert "complete_procedure" not in raw
    assert isinstance(captured["decide"], cli_module.TerminalDecisionSurface)


def test_invalid_choice_exits_with_validation_code(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(monkeypatch, "create_or_claim_patient", None)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main([*PATIENT_ARGS, "--choice", "maybe"])

    assert excinfo.value.code == 2


def test_validation_error_exits_with_code_2(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(monkeypatch, "create_or_claim_patient", ValidationError("bad cns", field="cns"))

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(PATIENT_ARGS)

    assert excinfo.value.code == 2


@pytest.mark.parametrize(
    "error",
    [FatalSessionError(code="TOKEN_EXPIRED"), WorkflowCancelledError("stop"), RuntimeError("x")],
)
def test_other_failures_exit_with_code_1(
    monkeypatch: pytest.MonkeyPatch,
    error: Exception,
) -> None:
    _capture(monkeypatch, "create_or_claim_patient", error)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(PATIENT_ARGS)

    assert excinfo.value.code == 1


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("new", CreateNew(confirmed=True)),
        ("adopt:p-1", AdoptExisting("p-1")),
        ("UPDATE: s-2 ", AdoptAndUpdate("s-2")),
    ],
)
def test_parse_choice(value: str, expected: object) -> None:
    assert cli_module.parse_choice(value) == expected


@pytest.mark.parametrize("value", ["", "adopt:", "new:p-1", "skip:p-1"])
def test_parse_choice_rejects_garbage(value: str) -> None:
    with pytest.raises(ValueError, match="--choice"):
        cli_module.parse_choice(value)


def _patient_request(*candidate_ids: str) -> DecisionRequest:
    return DecisionRequest(
        kind=EntityKind.PATIENT,
        draft=normalize_patient(RAW_PATIENT),
        candidates=classify_patient_matches(
            make_patient_match(cid, match_level="strong") for cid in candidate_ids
        ),
    )


def _terminal(*answers: str) -> tuple[cli_module.TerminalDecisionSurface, list[str]]:
    queue = deque(answers)
    output: list[str] = []

    def prompt(message: str) -> str:
        output.append(message)
        if not queue:
            raise EOFError
        return queue.popleft()

    return cli_module.TerminalDecisionSurface(prompt=prompt, write=output.append), output


def test_terminal_surface_lists_candidates_and_adopts() -> None:
    surface, output = _terminal("x", "a 5", "a 2")

    intent = surface(_patient_request("p-1", "p-2"))

    assert intent == AdoptExisting("p-2")
    assert any("[1] Strong similarity: Maria da Silva" in line for line in output)
    assert any("Unrecognised answer" in line for line in output)
    assert any("between 1 and 2" in line for line in output)


def test_terminal_surface_requires_confirmation_for_new() -> None:
    surface, _ = _terminal("n", "no", "new", "y")

    assert surface(_patient_request("p-1")) == CreateNew(confirmed=True)


def test_terminal_surface_single_candidate_update_without_number() -> None:
    surface, _ = _terminal("u")

    assert surface(_patient_request("p-1")) == AdoptAndUpdate("p-1")


@pytest.mark.parametrize("answers", [("c",), ()])
def test_terminal_surface_cancel_and_closed_input(answers: tuple[str, ...]) -> None:
    surface, _ = _terminal(*answers)

    with pytest.raises(WorkflowCancelledError):
        surface(_patient_request("p-1"))


def test_describe_surgery_candidate() -> None:
    (candidate,) = classify_surgery_matches([make_surgery_match("s-1", match_score=4)])

    text = cli_module.describe_candidate(candidate)

    assert text.startswith("Match 4/6: Cholecystectomy on 2024-03-02, Insurance")
