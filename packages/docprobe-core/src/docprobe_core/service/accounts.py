"""Service accounts used for live checks.

An account owns its transport: the httpx client, its timeout and its base
URL. The orchestrator treats any exception raised here as a unit fault.
"""

from __future__ import annotations

import logging
import os
from typing import Protocol

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from docprobe_core.config import parse_header_list
from docprobe_core.models.http import HttpRequest, HttpResponse

_logger = logging.getLogger("docprobe.service")

# Headers from documented requests that the transport sets itself.
_TRANSPORT_HEADERS = {"host", "content-length", "connection"}


class Credentials(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)
    headers: dict[str, str] = Field(default_factory=dict)


class ServiceAccount(Protocol):
    name: str
    enabled: bool
    additional_headers: list[tuple[str, str]]

    def prepare(self) -> None: ...

    def create_credentials(self) -> Credentials: ...

    def send(
        self,
        request: HttpRequest,
        credentials: Credentials,
        extra_headers: tuple[tuple[str, str], ...] = (),
    ) -> HttpResponse: ...

    def close(self) -> None: ...


class ConfiguredAccount(BaseModel):
    """An account declared in ``accounts.yaml``; credentials are a bearer token from the environment."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    name: str
    base_url: str = Field(validation_alias=AliasChoices("base_url", "baseUrl", "serviceUrl"))
    enabled: bool = True
    token_env: str | None = Field(default=None, validation_alias=AliasChoices("token_env", "tokenEnv"))
    additional_headers: list[tuple[str, str]] = Field(
        default_factory=list, validation_alias=AliasChoices("additional_headers", "additionalHeaders")
    )
    timeout_s: float = Field(default=30.0, gt=0)

    _client: httpx.Client | None = PrivateAttr(default=None)

    @field_validator("additional_headers", mode="before")
    @classmethod
    def _coerce_headers(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return parse_header_list(v)
        if isinstance(v, dict):
            return list(v.items())
        rows = []
        for item in v:
            if isinstance(item, str):
                rows.extend(parse_header_list(item))
            else:
                rows.append(tuple(item))
        return rows

    def _token(self) -> str | None:
        if not self.token_env:
            return None
        return os.getenv(self.token_env)

    def prepare(self) -> None:
        """Check the account can be used and open its client.

        Raises:
            RuntimeError: the token environment variable is not set.
        """
        if self.token_env and not self._token():
            raise RuntimeError(f"environment variable {self.token_env} is not set for account {self.name}")
        if self._client is None:
            self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout_s)
        _logger.debug("Account %s ready for %s", self.name, self.base_url)

    def create_credentials(self) -> Credentials:
        token = self._token()
        if not token:
            return Credentials()
        return Credentials(headers={"Authorization": f"Bearer {token}"})

    def send(
        self,
        request: HttpRequest,
        credentials: Credentials,
        extra_headers: tuple[tuple[str, str], ...] = (),
    ) -> HttpResponse:
        if self._client is None:
            raise RuntimeError(f"account {self.name} was not prepared")

        headers: dict[str, str] = {}
        for name, value in request.headers:
            if name.lower() not in _TRANSPORT_HEADERS:
                headers[name] = value
        for name, value in list(self.additional_headers) + list(extra_headers):
            headers[name] = value
        headers.update(credentials.headers)

        response = self._client.request(
            request.method,
            request.url,
            headers=headers,
            content=request.body.encode("utf-8") if request.body else None,
        )
        return HttpResponse(
            status_code=response.status_code,
            reason=response.reason_phrase,
            http_version=response.http_version,
            headers=list(response.headers.items()),
            body=response.text,
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
