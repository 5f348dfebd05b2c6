"""
Structural validation of JSON instances against declared resource types.

The validator is pure: it keeps no state between calls and only reads the
registry, so one instance can be shared by every worker of a sweep. Every
discrepancy becomes a Finding; nothing here raises for bad input.
"""

from __future__ import annotations

from datetime import date, datetime
import json
import logging
import re
from typing import Any

from docprobe_core.codebase.debug import spy_trace
from docprobe_core.config import ValidationOptions
from docprobe_core.errors import TypeResolutionError
from docprobe_core.models.annotations import CodeBlockAnnotation
from docprobe_core.models.findings import Finding
from docprobe_core.models.resources import PropertyDefinition, ResourceDefinition, TypeRef
from docprobe_core.registry import ResourceTypeRegistry

_logger = logging.getLogger("docprobe.validation")

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}(:\d{2}(\.\d+)?)?([Zz]|[+-]\d{2}:\d{2})?$")
_NUMBER_RE = re.compile(r"^\s*-?\d+(\.\d+)?([eE][+-]?\d+)?\s*$")
_GUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")
_DURATION_RE = re.compile(
    r"^-?P(?=\d|T\d)(\d+Y)?(\d+M)?(\d+W)?(\d+D)?(T(?=\d)(\d+H)?(\d+M)?(\d+(\.\d+)?S)?)?$"
)

_NO_ANNOTATION = CodeBlockAnnotation()
_NO_OPTIONS = ValidationOptions()


def json_kind(value: Any) -> str:
    """Name of the JSON kind of a decoded value, for messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def parse_json(text: str, path: str = "$") -> tuple[Any, Finding | None]:
    """Decode JSON text, returning ``(value, None)`` or ``(None, MALFORMED_JSON finding)``."""
    try:
        return json.loads(text), None
    except json.JSONDecodeError as e:
        return None, Finding.of(
            "MALFORMED_JSON",
            f"invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
            path=path,
        )


def _is_datetime(value: Any) -> bool:
    if not isinstance(value, str) or not _DATETIME_RE.match(value):
        return False
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        datetime.fromisoformat(text)
    except ValueError:
        return False
    return True


def _is_date(value: Any) -> bool:
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


_SCALAR_CHECKS = {
    "string": lambda v: isinstance(v, str),
    "integer": _is_integer,
    "number": _is_number,
    "boolean": lambda v: isinstance(v, bool),
    "datetime": _is_datetime,
    "date": _is_date,
    "guid": lambda v: isinstance(v, str) and bool(_GUID_RE.match(v)),
    "duration": lambda v: isinstance(v, str) and bool(_DURATION_RE.match(v)),
    "any": lambda v: True,
}


def _parses_as(text: str, kind: str) -> bool:
    """Whether a string holds a rendering of a value of ``kind``."""
    if kind in ("integer", "number"):
        # plain decimal or exponent notation only
        if not _NUMBER_RE.match(text):
            return False
        return kind == "number" or float(text).is_integer()
    if kind == "boolean":
        return text.strip().lower() in ("true", "false")
    return _SCALAR_CHECKS[kind](text)


def _string_representable(value: Any, kind: str) -> bool:
    """Mismatch between a string and a primitive that strings can represent."""
    if kind == "string":
        return isinstance(value, bool | int | float)
    if isinstance(value, str):
        return _parses_as(value, kind)
    return False


def _is_instance_annotation(name: str) -> bool:
    # "@odata.type", "@odata.nextLink", "photo@odata.mediaReadLink", ...
    return "@" in name


class InstanceValidator:
    """Checks decoded JSON values against resource types held by a registry."""

    def __init__(self, registry: ResourceTypeRegistry):
        self.registry = registry

    @spy_trace
    def validate_json(
        self,
        text: str,
        annotation: CodeBlockAnnotation,
        options: ValidationOptions | None = None,
    ) -> list[Finding]:
        """Parse ``text`` and validate it against the type named by the annotation."""
        value, error = parse_json(text)
        if error is not None:
            return [error]
        if not annotation.resource_type:
            return [Finding.of("UNRESOLVED_TYPE", "example does not declare a resource type", path="$")]
        resource = self.registry.resolve(annotation.resource_type)
        if resource is None:
            return [
                Finding.of(
                    "UNRESOLVED_TYPE",
                    f"resource type {annotation.resource_type} is not defined",
                    path="$",
                    type_name=annotation.resource_type,
                )
            ]
        return self.validate(value, resource, annotation, options)

    @spy_trace
    def validate(
        self,
        value: Any,
        resource: ResourceDefinition | str,
        annotation: CodeBlockAnnotation | None = None,
        options: ValidationOptions | None = None,
    ) -> list[Finding]:
        """Validate a decoded JSON value against a resource type.

        Findings come back in discovery order: declared properties in
        declaration order (base types first), then undeclared properties in
        instance order. Repeated calls with the same arguments return the same
        list.
        """
        annotation = annotation or _NO_ANNOTATION
        options = options or _NO_OPTIONS
        findings: list[Finding] = []

        if isinstance(resource, str):
            resolved = self.registry.resolve(resource)
            if resolved is None:
                return [Finding.of("UNRESOLVED_TYPE", f"resource type {resource} is not defined", path="$")]
            resource = resolved

        if annotation.is_collection:
            self._validate_collection_root(value, resource, annotation, options, findings)
        else:
            self._validate_object(value, resource, annotation, options, "$", findings)
        return findings

    def _validate_collection_root(
        self,
        value: Any,
        resource: ResourceDefinition,
        annotation: CodeBlockAnnotation,
        options: ValidationOptions,
        findings: list[Finding],
    ) -> None:
        items = value
        path = "$"
        if annotation.collection_property:
            prop = annotation.collection_property
            if not isinstance(value, dict):
                findings.append(
                    Finding.of(
                        "TYPE_MISMATCH",
                        f"expected an object holding collection property {prop}, found {json_kind(value)}",
                        path=path,
                    )
                )
                return
            if prop not in value:
                findings.append(
                    Finding.of(
                        "MISSING_COLLECTION_PROPERTY",
                        f"collection property {prop} is missing",
                        path=path,
                        property=prop,
                    )
                )
                return
            items = value[prop]
            path = f"$.{prop}"

        if not isinstance(items, list):
            findings.append(
                Finding.of(
                    "EXPECTED_COLLECTION",
                    f"expected an array of {resource.name}, found {json_kind(items)}",
                    path=path,
                )
            )
            return

        item_annotation = annotation.for_collection_item()
        for index, item in enumerate(items):
            self._validate_object(item, resource, item_annotation, options, f"{path}[{index}]", findings)

    def _resolve_instance_type(self, value: dict, resource: ResourceDefinition) -> ResourceDefinition:
        """Switch to a derived type when the instance names one with ``@odata.type``."""
        declared = value.get("@odata.type")
        if not isinstance(declared, str):
            return resource
        candidate = self.registry.resolve(declared)
        if candidate is None or candidate.name.lower() == resource.name.lower():
            return resource
        if self.registry.is_assignable(candidate.name, resource.name):
            _logger.debug("Validating %s as derived type %s", resource.name, candidate.name)
            return candidate
        return resource

    def _validate_object(
        self,
        value: Any,
        resource: ResourceDefinition,
        annotation: CodeBlockAnnotation,
        options: ValidationOptions,
        path: str,
        findings: list[Finding],
    ) -> None:
        if not isinstance(value, dict):
            findings.append(
                Finding.of(
                    "TYPE_MISMATCH",
                    f"expected an object of type {resource.name}, found {json_kind(value)}",
                    path=path,
                    expected=resource.name,
                    actual=json_kind(value),
                )
            )
            return

        resource = self._resolve_instance_type(value, resource)
        try:
            properties = self.registry.effective_properties(resource)
        except TypeResolutionError as e:
            findings.append(Finding.of(e.code, e.message, path=path, type_name=e.type_name))
            return

        declared: set[str] = set()
        for prop in properties:
            declared.add(prop.name)
            prop_path = f"{path}.{prop.name}"
            if prop.name not in value:
                if not self._absence_allowed(prop, annotation):
                    findings.append(
                        Finding.of(
                            "MISSING_REQUIRED_PROPERTY",
                            f"required property {prop.name} ({prop.type.describe()}) is missing from {resource.name}",
                            path=prop_path,
                            property=prop.name,
                        )
                    )
                continue
            self._validate_property(value[prop.name], prop, annotation, options, prop_path, findings)

        for name in value:
            if name in declared or _is_instance_annotation(name):
                continue
            findings.append(
                Finding.of(
                    "UNEXPECTED_PROPERTY",
                    f"property {name} is not defined on {resource.name}",
                    path=f"{path}.{name}",
                    property=name,
                )
            )

    @staticmethod
    def _absence_allowed(prop: PropertyDefinition, annotation: CodeBlockAnnotation) -> bool:
        return (
            annotation.truncated
            or prop.optional
            or prop.nullable
            or prop.navigation
            or prop.name in annotation.optional_properties
        )

    def _validate_property(
        self,
        value: Any,
        prop: PropertyDefinition,
        annotation: CodeBlockAnnotation,
        options: ValidationOptions,
        path: str,
        findings: list[Finding],
    ) -> None:
        if value is None:
            if not (prop.nullable or prop.name in annotation.nullable_properties):
                findings.append(
                    Finding.of(
                        "NULL_NOT_ALLOWED",
                        f"property {prop.name} is null but is not declared nullable",
                        path=path,
                        property=prop.name,
                    )
                )
            return
        self._validate_typed(value, prop.type, annotation, options, path, findings)

    def _validate_typed(
        self,
        value: Any,
        type_ref: TypeRef,
        annotation: CodeBlockAnnotation,
        options: ValidationOptions,
        path: str,
        findings: list[Finding],
    ) -> None:
        if type_ref.kind == "collection":
            if not isinstance(value, list):
                findings.append(
                    Finding.of(
                        "TYPE_MISMATCH",
                        f"expected {type_ref.describe()}, found {json_kind(value)}",
                        path=path,
                        expected=type_ref.describe(),
                        actual=json_kind(value),
                    )
                )
                return
            for index, item in enumerate(value):
                item_path = f"{path}[{index}]"
                if item is None:
                    findings.append(Finding.of("NULL_NOT_ALLOWED", "collection item is null", path=item_path))
                    continue
                self._validate_typed(item, type_ref.item, annotation, options, item_path, findings)
            return

        if type_ref.kind == "resource":
            nested = self.registry.resolve(type_ref.resource)
            if nested is None:
                findings.append(
                    Finding.of(
                        "UNRESOLVED_TYPE",
                        f"resource type {type_ref.resource} is not defined",
                        path=path,
                        type_name=type_ref.resource,
                    )
                )
                return
            # Relaxations such as truncated stop at the object they annotate.
            self._validate_object(value, nested, annotation.for_nested_value(), options, path, findings)
            return

        finding = self._check_scalar(value, type_ref.kind, options, path)
        if finding is not None:
            findings.append(finding)

    @staticmethod
    def _check_scalar(value: Any, kind: str, options: ValidationOptions, path: str) -> Finding | None:
        if _SCALAR_CHECKS[kind](value):
            return None
        message = f"expected {kind}, found {json_kind(value)} {json.dumps(value)}"
        if options.relaxed_string_validation and _string_representable(value, kind):
            return Finding.of(
                "TYPE_MISMATCH", message, path=path, severity="WARN", expected=kind, actual=json_kind(value)
            )
        return Finding.of("TYPE_MISMATCH", message, path=path, expected=kind, actual=json_kind(value))
