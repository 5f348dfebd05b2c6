import json
import logging
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

_logger = logging.getLogger("docprobe.annotations")

BlockType = Literal[
    "unknown",
    "resource",
    "request",
    "response",
    "example",
    "simulatedResponse",
    "testParams",
    "ignored",
]


class CodeBlockAnnotation(BaseModel):
    """Per-example metadata that drives the relaxation policy of one validation call.

    Keys follow the camelCase names used inside documentation annotations
    (``@odata.type``, ``optionalProperties``, ``truncated``...); snake_case
    names are accepted too.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    resource_type: str | None = Field(
        default=None, validation_alias=AliasChoices("resource_type", "@odata.type", "resourceType")
    )
    block_type: BlockType = Field(default="unknown", validation_alias=AliasChoices("block_type", "blockType"))
    optional_properties: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("optional_properties", "optionalProperties")
    )
    nullable_properties: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("nullable_properties", "nullableProperties")
    )
    is_collection: bool = Field(default=False, validation_alias=AliasChoices("is_collection", "isCollection"))
    collection_property: str | None = Field(
        default=None, validation_alias=AliasChoices("collection_property", "collectionProperty")
    )
    is_empty: bool = Field(default=False, validation_alias=AliasChoices("is_empty", "isEmpty"))
    truncated: bool = False
    expect_error: bool = Field(default=False, validation_alias=AliasChoices("expect_error", "expectError"))
    method_name: str | None = Field(default=None, validation_alias=AliasChoices("method_name", "name"))
    long_running_response_type: str | None = Field(
        default=None, validation_alias=AliasChoices("long_running_response_type", "longRunningResponseType")
    )

    @field_validator("optional_properties", "nullable_properties", mode="before")
    @classmethod
    def _coerce_list(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v

    @classmethod
    def from_json(cls, text: str) -> "CodeBlockAnnotation":
        """Parse an annotation; anything unreadable becomes an ignored block."""
        try:
            return cls.model_validate(json.loads(text))
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            _logger.debug("Error parsing JSON annotation: %s", e)
            return cls(block_type="ignored")

    def for_nested_value(self) -> "CodeBlockAnnotation":
        """Annotation used below the root object: relaxations are not inherited."""
        return CodeBlockAnnotation(block_type=self.block_type)

    def for_collection_item(self) -> "CodeBlockAnnotation":
        """Annotation for each element of a collection: same relaxations, no collection flags."""
        return self.model_copy(update={"is_collection": False, "collection_property": None})
