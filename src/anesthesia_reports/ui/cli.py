from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from anesthesia_reports.app import create_or_claim_patient, create_or_claim_surgery
from anesthesia_reports.config import configure_logging
from anesthesia_reports.domain.decision import (
    AdoptAndUpdate,
    AdoptExisting,
    CreateNew,
    ScriptedDecisionSurface,
)
from anesthesia_reports.domain.errors import ValidationError, WorkflowCancelledError
from anesthesia_reports.domain.matching import PatientSummary

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from anesthesia_reports.domain.decision import DecisionRequest, DecisionSurface, Intent
    from anesthesia_reports.domain.matching import AnyCandidate, SurgerySummary

log = logging.getLogger(__name__)

_PATIENT_FIELDS = ("name", "sex", "date_of_birth", "cns")
_SURGERY_FIELDS = (
    "patient_id",
    "date",
    "type",
    "insurance_name",
    "insurance_number",
    "hospital",
    "main_surgeon",
    "proposed_procedure",
    "weight",
    "auxiliary_surgeons",
    "complete_procedure",
    "cbhpm_code",
    "cbhpm_procedure",
    "cbhpm_port",
)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or claim anesthesia records")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log workflow transitions",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    patient = subparsers.add_parser("patient", help="Create or claim a patient")
    patient.add_argument("--name", type=str, required=True, help="Full name")
    patient.add_argument("--sex", type=str, required=True, help="male or female")
    patient.add_argument("--date-of-birth", type=str, required=True, help="YYYY-MM-DD")
    patient.add_argument("--cns", type=str, required=True, help="15-digit national health card")
    _add_choice(patient)

    surgery = subparsers.add_parser("surgery", help="Create or claim a surgery")
    surgery.add_argument("--patient-id", type=str, required=True, help="Owning patient id")
    surgery.add_argument("--date", type=str, required=True, help="YYYY-MM-DD")
    surgery.add_argument("--type", type=str, required=True, help="insurance or sus")
    surgery.add_argument("--insurance-name", type=str, required=True)
    surgery.add_argument("--insurance-number", type=str, required=True)
    surgery.add_argument("--hospital", type=str, required=True)
    surgery.add_argument("--main-surgeon", type=str, required=True)
    surgery.add_argument("--proposed-procedure", type=str, required=True)
    surgery.add_argument("--weight", type=str, required=True, help="Patient weight in kg")
    surgery.add_argument(
        "--auxiliary-surgeons",
        type=str,
        help="Comma separated list of auxiliary surgeons",
    )
    surgery.add_argument("--complete-procedure", type=str)
    surgery.add_argument("--cbhpm-code", type=str)
    surgery.add_argument("--cbhpm-procedure", type=str)
    surgery.add_argument("--cbhpm-port", type=str)
    _add_choice(surgery)

    return parser.parse_args(list(argv))


def _add_choice(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--choice",
        type=str,
        help="Answer for the duplicate prompt: new, adopt:<id> or update:<id>",
    )


def _raw_fields(args: argparse.Namespace, names: Sequence[str]) -> dict[str, object]:
    return {name: getattr(args, name) for name in names if getattr(args, name) is not None}


def parse_choice(value: str) -> Intent:
    """Translate a ``--choice`` value into an intent."""

    action, _, candidate_id = value.strip().partition(":")
    action = action.lower()
    if action == "new" and not candidate_id:
        return CreateNew(confirmed=True)
    if action in {"adopt", "update"} and candidate_id.strip():
        if action == "adopt":
            return AdoptExisting(candidate_id.strip())
        return AdoptAndUpdate(candidate_id.strip())
    raise ValueError(f"Invalid --choice value: {value!r} (expected new, adopt:<id> or update:<id>)")


def describe_candidate(candidate: AnyCandidate) -> str:
    summary = candidate.summary
    if isinstance(summary, PatientSummary):
        details = f"{summary.name}, {summary.sex}, born {summary.date_of_birth}, CNS {summary.cns}"
    else:
        details = _describe_surgery(summary)
    if summary.created_by_name:
        details += f" (by {summary.created_by_name})"
    return f"{candidate.confidence.label}: {details}"


def _describe_surgery(summary: SurgerySummary) -> str:
    kind = summary.type.display_name if summary.type is not None else "Unknown type"
    return (
        f"{summary.proposed_procedure} on {summary.date}, {kind}, "
        f"{summary.hospital}, {summary.insurance_name}, {summary.main_surgeon}"
    )


class TerminalDecisionSurface:
    """Prompts on the terminal for what to do with precheck matches."""

    def __init__(
        self,
        *,
        prompt: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self._prompt = prompt
        self._write = write

    def __call__(self, request: DecisionRequest) -> Intent:
        self._write(request.message)
        for index, candidate in enumerate(request.candidates, start=1):
            self._write(f"  [{index}] {describe_candidate(candidate)}")

        while True:
            answer = self._ask("[n]ew, [a]dopt N, [u]pdate N or [c]ancel: ").strip().lower()
            command, _, argument = answer.partition(" ")
            if command in {"c", "cancel"}:
                raise WorkflowCancelledError("Cancelled by user")
            if command in {"n", "new"}:
                confirm = self._ask("Create a new record anyway? [y/N] ").strip().lower()
                if confirm in {"y", "yes"}:
                    return CreateNew(confirmed=True)
                continue
            if command in {"a", "adopt", "u", "update"}:
                candidate = self._pick(request, argument)
                if candidate is None:
                    continue
                if command.startswith("a"):
                    return AdoptExisting(candidate.candidate_id)
                return AdoptAndUpdate(candidate.candidate_id)
            self._write(f"Unrecognised answer: {answer!r}")

    def _ask(self, message: str) -> str:
        try:
            return self._prompt(message)
        except EOFError:
            raise WorkflowCancelledError("Input closed") from None

    def _pick(self, request: DecisionRequest, argument: str) -> AnyCandidate | None:
        candidates = request.candidates
        if len(candidates) == 1 and not argument.strip():
            return candidates[0]
        try:
            index = int(argument)
        except ValueError:
            self._write("Give the number of the match, e.g. 'a 1'")
            return None
        if not 1 <= index <= len(candidates):
            self._write(f"Choose a match between 1 and {len(candidates)}")
            return None
        return candidates[index - 1]


def _decision_surface(args: argparse.Namespace) -> DecisionSurface:
    if args.choice is not None:
        return ScriptedDecisionSurface.of(parse_choice(args.choice))
    return TerminalDecisionSurface()


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        decide = _decision_surface(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "patient":
            outcome = asyncio.run(
                create_or_claim_patient(_raw_fields(parsed_args, _PATIENT_FIELDS), decide=decide)
            )
        elif parsed_args.command == "surgery":
            outcome = asyncio.run(
                create_or_claim_surgery(_raw_fields(parsed_args, _SURGERY_FIELDS), decide=decide)
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ValidationError as exc:
        log.error(f"Invalid {exc.field or 'input'}: {exc.message}")  # noqa: TRY400
        sys.exit(2)
    except Exception:
        log.exception(f"Failed to resolve {parsed_args.command}")
        sys.exit(1)

    log.info(f"{parsed_args.command.capitalize()} {outcome.entity.id} ({outcome.path})")
    print(outcome.entity.id)  # noqa: T201


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def cli() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    cli()
