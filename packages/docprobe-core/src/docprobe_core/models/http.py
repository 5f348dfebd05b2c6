from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_headers(v):
    if v is None:
        return []
    if isinstance(v, dict):
        return [(str(k), str(val)) for k, val in v.items()]
    return [(str(k), str(val)) for k, val in v]


class _HttpMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)
    http_version: str = "HTTP/1.1"
    headers: list[tuple[str, str]] = Field(default_factory=list)
    body: str = ""

    @field_validator("headers", mode="before")
    @classmethod
    def _coerce_headers(cls, v):
        return _coerce_headers(v)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup; the first occurrence wins."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None

    def has_header(self, name: str) -> bool:
        return self.header(name) is not None

    @property
    def content_type(self) -> str | None:
        value = self.header("Content-Type")
        if value is None:
            return None
        return value.split(";", 1)[0].strip().lower()

    @property
    def has_body(self) -> bool:
        return bool(self.body.strip())


class HttpRequest(_HttpMessage):
    """A parsed HTTP request, as written in documentation or sent to a live service."""

    method: str
    url: str

    def with_substitutions(self, values: dict[str, str]) -> "HttpRequest":
        """Replace ``{name}`` placeholders in the URL, headers and body."""

        def sub(text: str) -> str:
            for key, value in values.items():
                text = text.replace("{" + key + "}", str(value))
            return text

        return self.model_copy(
            update={
                "url": sub(self.url),
                "headers": [(k, sub(v)) for k, v in self.headers],
                "body": sub(self.body),
            }
        )


class HttpResponse(_HttpMessage):
    """A parsed HTTP response."""

    status_code: int
    reason: str = ""

    @property
    def is_error_status(self) -> bool:
        return self.status_code >= 400
