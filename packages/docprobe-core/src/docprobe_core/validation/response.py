"""
HTTP response validation.

Compares an actual response with the documented one (status, headers, body)
and hands the body to the InstanceValidator. With no actual response the
documented response is checked on its own, which is how documentation is
verified without a live service.
"""

from __future__ import annotations

import logging

from docprobe_core.codebase.debug import spy_trace
from docprobe_core.config import ValidationOptions
from docprobe_core.models.annotations import CodeBlockAnnotation
from docprobe_core.models.findings import Finding
from docprobe_core.models.http import HttpResponse
from docprobe_core.models.resources import ResourceDefinition
from docprobe_core.validation.instance import InstanceValidator, parse_json

_logger = logging.getLogger("docprobe.validation")

ACCEPTED_STATUS = 202
POLLING_HEADERS = ("Location", "Operation-Location")
_JSON_MEDIA_TYPES = ("application/json",)


def _is_json_media_type(media_type: str | None) -> bool:
    if not media_type:
        return False
    return media_type in _JSON_MEDIA_TYPES or media_type.endswith("+json")


class ResponseValidator:
    def __init__(self, instance_validator: InstanceValidator):
        self.instance_validator = instance_validator

    @property
    def registry(self):
        return self.instance_validator.registry

    @spy_trace
    def validate_response(
        self,
        expected: HttpResponse,
        actual: HttpResponse | None = None,
        resource: ResourceDefinition | None = None,
        annotation: CodeBlockAnnotation | None = None,
        options: ValidationOptions | None = None,
    ) -> list[Finding]:
        """Validate ``actual`` against ``expected``; with no ``actual``, check ``expected`` alone.

        ``resource`` defaults to the type named by the annotation.
        """
        annotation = annotation or CodeBlockAnnotation()
        options = options or ValidationOptions()
        response = actual if actual is not None else expected
        findings: list[Finding] = []

        findings.extend(self._check_status(expected, actual, annotation))

        if (
            annotation.long_running_response_type
            and response.status_code == ACCEPTED_STATUS
        ):
            findings.extend(self._check_long_running(response, annotation))
            return findings

        findings.extend(self._check_headers(response, annotation, options))
        findings.extend(self._check_body(response, resource, annotation, options))
        return findings

    def _check_status(
        self,
        expected: HttpResponse,
        actual: HttpResponse | None,
        annotation: CodeBlockAnnotation,
    ) -> list[Finding]:
        response = actual if actual is not None else expected
        if annotation.expect_error:
            if response.is_error_status:
                return []
            return [
                Finding.of(
                    "ERROR_EXPECTED",
                    f"an error response was expected but status {response.status_code} was returned",
                    actual=response.status_code,
                )
            ]
        if actual is not None and actual.status_code != expected.status_code:
            return [
                Finding.of(
                    "STATUS_CODE_MISMATCH",
                    f"expected status {expected.status_code} but received {actual.status_code}",
                    expected=expected.status_code,
                    actual=actual.status_code,
                )
            ]
        return []

    def _check_long_running(self, response: HttpResponse, annotation: CodeBlockAnnotation) -> list[Finding]:
        for header in POLLING_HEADERS:
            location = response.header(header)
            if location:
                return [
                    Finding.of(
                        "LONG_RUNNING_OPERATION",
                        f"long running operation accepted; poll {location} for "
                        f"{annotation.long_running_response_type}",
                        location=location,
                    )
                ]
        return [
            Finding.of(
                "MISSING_HEADER",
                "accepted long running operation did not return a Location header",
                header="Location",
            )
        ]

    def _check_headers(
        self,
        response: HttpResponse,
        annotation: CodeBlockAnnotation,
        options: ValidationOptions,
    ) -> list[Finding]:
        findings = []
        if response.has_body and not annotation.is_empty:
            if not response.has_header("Content-Type"):
                findings.append(
                    Finding.of(
                        "MISSING_HEADER", "response has a body but no Content-Type header", header="Content-Type"
                    )
                )
            elif not _is_json_media_type(response.content_type):
                findings.append(
                    Finding.of(
                        "CONTENT_TYPE_MISMATCH",
                        f"expected a JSON content type, found {response.content_type}",
                        actual=response.content_type,
                    )
                )
        for header in options.required_headers:
            if not response.has_header(header):
                findings.append(Finding.of("MISSING_HEADER", f"required header {header} is missing", header=header))
        return findings

    def _check_body(
        self,
        response: HttpResponse,
        resource: ResourceDefinition | None,
        annotation: CodeBlockAnnotation,
        options: ValidationOptions,
    ) -> list[Finding]:
        if annotation.is_empty:
            if response.has_body:
                return [Finding.of("EXPECTED_EMPTY_BODY", "response body should be empty", path="$")]
            return []
        if not response.has_body:
            return []

        value, error = parse_json(response.body)
        if error is not None:
            return [error]

        # An expected error payload does not follow the resource type.
        if annotation.expect_error and response.is_error_status:
            return []

        if resource is None:
            if not annotation.resource_type:
                _logger.debug("No resource type declared; body checked for well-formed JSON only")
                return []
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
        return self.instance_validator.validate(value, resource, annotation, options)
