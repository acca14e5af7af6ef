# Shared base model for all Crypto Council schemas

import math

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CouncilBaseModel(BaseModel):
    """Base model for all Crypto Council schemas (Pydantic v2).

    Serialises with camelCase aliases on the HTTP boundary and accepts both
    snake_case and camelCase on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


def require_finite(value: float) -> float:
    """Reject NaN/inf so numeric fields are always usable downstream"""
    if value is None or not math.isfinite(value):
        raise ValueError("value must be a finite number")
    return value
