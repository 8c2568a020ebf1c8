"""Pydantic models describing the actual-results JSON document."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class ResultPayload(BaseModel):
    """One per-part result; every key besides file name and status is a value."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    file_name: str = Field(validation_alias=AliasChoices("FileName", "fileName", "file_name"))
    status: str | None = Field(
        default=None, validation_alias=AliasChoices("Status", "status")
    )

    def field_values(self) -> dict[str, object]:
        return dict(self.model_extra or {})


class ResultsDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: list[ResultPayload] = Field(default_factory=list["ResultPayload"])

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, value: object) -> object:
        if isinstance(value, list):
            return {"results": value}
        if isinstance(value, Mapping):
            mapping_value = cast(Mapping[str, object], value)
            for key in ("Results", "results"):
                if key in mapping_value:
                    return {"results": mapping_value[key]}
        return value
