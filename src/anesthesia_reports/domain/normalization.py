"""Identity normalization: raw form input -> creation drafts.

Pure functions only. A draft produced here carries every field the matching
service compares, already trimmed, case-normalized and digit-only where the
field is an identifier. Anything that cannot be brought into that shape raises
:class:`ValidationError` before a single request is issued.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import TYPE_CHECKING, Final

from anesthesia_reports.domain.errors import ValidationError
from anesthesia_reports.domain.model import (
    CNS_LENGTH,
    CbhpmCode,
    PatientDraft,
    Sex,
    SurgeryDraft,
    SurgeryType,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

type RawFields = Mapping[str, object]

LOWERCASE_PARTICLES: Final[frozenset[str]] = frozenset({"de", "da", "do", "das", "dos", "e"})
_ISO_DATE_FORMAT: Final[str] = "%Y-%m-%d"
_WHITESPACE = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"\D")


def clean_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def collapse_whitespace(value: object) -> str:
    return _WHITESPACE.sub(" ", clean_text(value))


def normalize_title_case(
    value: object,
    *,
    lowercase_words: frozenset[str] = LOWERCASE_PARTICLES,
) -> str:
    """Capitalize every word except the given particles, which stay lower-case."""

    words: list[str] = []
    for part in collapse_whitespace(value).split(" "):
        if not part:
            continue
        lower = part.lower()
        words.append(lower if lower in lowercase_words else lower[:1].upper() + lower[1:])
    return " ".join(words)


def has_at_least_two_words(value: object) -> bool:
    return len(clean_text(value).split()) >= 2


def digits_only(value: object) -> str:
    return _NON_DIGIT.sub("", clean_text(value))


def normalize_iso_date(value: object) -> str | None:
    """Return ``YYYY-MM-DD`` if the first ten characters form a calendar date."""

    candidate = clean_text(value)[:10]
    try:
        parsed = datetime.strptime(candidate, _ISO_DATE_FORMAT).date()  # noqa: DTZ007
    except ValueError:
        return None
    return parsed.isoformat()


def format_cns(value: object, *, expected_length: int = CNS_LENGTH) -> str:
    """Group a national health card number as ``XXX XXXX XXXX XXXX`` for display."""

    digits = digits_only(value)
    if len(digits) != expected_length:
        return clean_text(value)
    return " ".join((digits[:3], digits[3:7], digits[7:11], digits[11:]))


def normalize_cns(value: object, *, expected_length: int = CNS_LENGTH) -> str:
    digits = digits_only(value)
    if not digits:
        raise ValidationError("CNS is required", field="cns")
    if len(digits) != expected_length:
        raise ValidationError(
            f"CNS must have {expected_length} digits, got {len(digits)}",
            field="cns",
        )
    return digits


def parse_decimal(value: object, *, field: str) -> float:
    """Parse a strictly positive, finite decimal; a comma separator is accepted."""

    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}", field=field)
    if isinstance(value, int | float):
        number = float(value)
    else:
        text = clean_text(value).replace(",", ".")
        if not text:
            raise ValidationError(f"{field} is required", field=field)
        try:
            number = float(text)
        except ValueError:
            raise ValidationError(f"Invalid {field}: {value}", field=field) from None
    if not math.isfinite(number) or number <= 0:
        raise ValidationError(f"{field} must be a positive number, got {value}", field=field)
    return number


def split_names(value: object) -> tuple[str, ...]:
    """Comma-separated free text (or a sequence) -> tuple of collapsed names."""

    if value is None:
        return ()
    parts = value if isinstance(value, list | tuple) else clean_text(value).split(",")
    return tuple(name for name in (collapse_whitespace(part) for part in parts) if name)


def normalize_patient(raw: RawFields) -> PatientDraft:
    name = normalize_title_case(raw.get("name"))
    if not name:
        raise ValidationError("Name is required", field="name")
    if not has_at_least_two_words(name):
        raise ValidationError("Full name needs at least two words", field="name")

    return PatientDraft(
        name=name,
        sex=_required_choice(raw, "sex", Sex),
        date_of_birth=_required_date(raw, "date_of_birth"),
        cns=normalize_cns(raw.get("cns")),
    )


def normalize_surgery(raw: RawFields) -> SurgeryDraft:
    complete_procedure = clean_text(raw.get("complete_procedure"))
    return SurgeryDraft(
        patient_id=_required_text(raw, "patient_id"),
        date=_required_date(raw, "date"),
        type=_required_choice(raw, "type", SurgeryType),
        insurance_name=_required_text(raw, "insurance_name"),
        hospital=_required_text(raw, "hospital"),
        main_surgeon=_required_text(raw, "main_surgeon", collapse=True),
        proposed_procedure=_required_text(raw, "proposed_procedure"),
        insurance_number=_required_text(raw, "insurance_number"),
        weight=parse_decimal(raw.get("weight"), field="weight"),
        auxiliary_surgeons=split_names(raw.get("auxiliary_surgeons")),
        complete_procedure=complete_procedure or None,
        cbhpm=_optional_cbhpm(raw),
    )


def _required_text(raw: RawFields, key: str, *, collapse: bool = False) -> str:
    value = collapse_whitespace(raw.get(key)) if collapse else clean_text(raw.get(key))
    if not value:
        raise ValidationError(f"{key} is required", field=key)
    return value


def _required_date(raw: RawFields, key: str) -> str:
    if not clean_text(raw.get(key)):
        raise ValidationError(f"{key} is required", field=key)
    normalized = normalize_iso_date(raw.get(key))
    if normalized is None:
        raise ValidationError(f"{key} is not a valid YYYY-MM-DD date", field=key)
    return normalized


def _required_choice[TChoice: (Sex, SurgeryType)](
    raw: RawFields,
    key: str,
    choices: type[TChoice],
) -> TChoice:
    value = clean_text(raw.get(key)).lower()
    if not value:
        raise ValidationError(f"{key} is required", field=key)
    try:
        return choices(value)
    except ValueError:
        allowed = ", ".join(choice.value for choice in choices)
        raise ValidationError(f"{key} must be one of: {allowed}", field=key) from None


def _optional_cbhpm(raw: RawFields) -> CbhpmCode | None:
    code = clean_text(raw.get("cbhpm_code"))
    procedure = clean_text(raw.get("cbhpm_procedure"))
    port = clean_text(raw.get("cbhpm_port"))
    if not (code or procedure or port):
        return None
    if not (code and procedure and port):
        raise ValidationError("CBHPM needs code, procedure and port together", field="cbhpm")
    return CbhpmCode(code=code, procedure=procedure, port=port)
