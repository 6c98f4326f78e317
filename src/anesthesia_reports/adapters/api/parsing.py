from __future__ import annotations

import pydantic

from anesthesia_reports.domain.ports import GatewayError


def parse_payload[TModel: pydantic.BaseModel](model: type[TModel], payload: object) -> TModel:
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise GatewayError(f"Unexpected response payload for {model.__name__}") from exc
