import re
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

TypeKind = Literal[
    "string",
    "integer",
    "number",
    "boolean",
    "datetime",
    "date",
    "guid",
    "duration",
    "any",
    "resource",
    "collection",
]

# Names as they appear in documentation tables and CSDL (lower-cased, "edm." prefix stripped).
_SCALAR_ALIASES: dict[str, str] = {
    "string": "string",
    "str": "string",
    "int": "integer",
    "integer": "integer",
    "int16": "integer",
    "int32": "integer",
    "int64": "integer",
    "long": "integer",
    "byte": "integer",
    "sbyte": "integer",
    "number": "number",
    "double": "number",
    "float": "number",
    "single": "number",
    "decimal": "number",
    "bool": "boolean",
    "boolean": "boolean",
    "datetime": "datetime",
    "datetimeoffset": "datetime",
    "timestamp": "datetime",
    "date": "date",
    "guid": "guid",
    "uuid": "guid",
    "duration": "duration",
    "timespan": "duration",
    "any": "any",
    "json": "any",
    "object": "any",
    "untyped": "any",
}

_COLLECTION_RE = re.compile(r"^collection\((?P<item>.+)\)$", re.IGNORECASE)


class TypeRef(BaseModel):
    """Declared type of a property: a scalar kind, a named resource type, or a collection of T."""

    model_config = ConfigDict(extra="ignore", frozen=True)
    kind: TypeKind
    resource: str | None = None
    item: "TypeRef | None" = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_text(cls, v):
        if isinstance(v, str):
            return cls.parse(v).model_dump()
        return v

    @model_validator(mode="after")
    def _check_shape(self):
        if self.kind == "resource" and not self.resource:
            raise ValueError("resource type reference requires a resource name")
        if self.kind == "collection" and self.item is None:
            raise ValueError("collection type reference requires an item type")
        return self

    @classmethod
    def parse(cls, text: str) -> "TypeRef":
        """Parse type text such as ``Int32``, ``Edm.String``, ``widget`` or ``Collection(widget)``."""
        raw = text.strip()
        if not raw:
            raise ValueError("empty type reference")
        match = _COLLECTION_RE.match(raw)
        if match:
            return cls(kind="collection", item=cls.parse(match.group("item")))
        if raw.endswith("[]"):
            return cls(kind="collection", item=cls.parse(raw[:-2]))

        key = raw.lower()
        if key.startswith("edm."):
            key = key[4:]
        scalar = _SCALAR_ALIASES.get(key)
        if scalar is not None:
            return cls(kind=scalar)
        return cls(kind="resource", resource=raw)

    def describe(self) -> str:
        if self.kind == "resource":
            return self.resource or "resource"
        if self.kind == "collection" and self.item is not None:
            return f"Collection({self.item.describe()})"
        return self.kind


class PropertyDefinition(BaseModel):
    """One row of a resource's field-descriptor table."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)
    name: str
    type: TypeRef
    nullable: bool = False
    optional: bool = False
    navigation: bool = Field(default=False, validation_alias=AliasChoices("navigation", "isNavigable", "expandable"))
    description: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v):
        if isinstance(v, str):
            return TypeRef.parse(v)
        return v


class ResourceDefinition(BaseModel):
    """A named, inheritable structural schema for JSON objects appearing in documentation."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)
    name: str = Field(validation_alias=AliasChoices("name", "@odata.type", "resourceType"))
    base_type: str | None = Field(default=None, validation_alias=AliasChoices("base_type", "baseType"))
    properties: list[PropertyDefinition] = Field(default_factory=list)
    example: str | None = Field(default=None, validation_alias=AliasChoices("example", "jsonExample"))
    source: str | None = None

    @field_validator("properties", mode="before")
    @classmethod
    def _coerce_properties(cls, v):
        # Allow the compact mapping form: {name: "Type"} or {name: {type: ..., nullable: ...}}
        if isinstance(v, dict):
            rows = []
            for name, spec in v.items():
                if isinstance(spec, str):
                    rows.append({"name": name, "type": spec})
                else:
                    rows.append({"name": name, **(spec or {})})
            return rows
        return v

    @model_validator(mode="after")
    def _check_unique_properties(self):
        seen: set[str] = set()
        for prop in self.properties:
            if prop.name in seen:
                raise ValueError(f"resource {self.name} declares property {prop.name!r} more than once")
            seen.add(prop.name)
        return self

    def property_named(self, name: str) -> PropertyDefinition | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None
