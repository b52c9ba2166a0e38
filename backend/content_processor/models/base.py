"""
Base Model for Persisted Pipeline Data

Everything the pipeline persists is plain JSON with camelCase keys (the
layout the UI and earlier exports read). Python code uses snake_case
attribute names; the alias generator maps between the two.

Usage:
    class Item(CamelModel):
        start_line: int

    Item(start_line=3).model_dump(by_alias=True)  # {"startLine": 3}
    Item.model_validate({"startLine": 3})          # accepted
    Item(start_line=3)                             # also accepted
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base model with camelCase JSON aliases.

    Features:
        - alias_generator=to_camel: JSON keys are camelCase
        - populate_by_name=True: Python code may use field names
        - extra="ignore": Unknown keys from AI output are dropped
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible data with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")
