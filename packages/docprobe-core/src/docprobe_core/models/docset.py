from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from .annotations import CodeBlockAnnotation
from .resources import ResourceDefinition


class ExampleBlock(BaseModel):
    """A JSON example code block and its annotation."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    annotation: CodeBlockAnnotation = Field(default_factory=CodeBlockAnnotation)
    json_text: str = Field(validation_alias=AliasChoices("json_text", "json", "example"))
    language: str = "json"

    @property
    def name(self) -> str:
        return self.annotation.method_name or self.annotation.resource_type or "example"


class MethodDefinition(BaseModel):
    """A documented request and its expected response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    identifier: str = Field(validation_alias=AliasChoices("identifier", "name"))
    request: str
    expected_response: str | None = Field(
        default=None, validation_alias=AliasChoices("expected_response", "expectedResponse", "response")
    )
    request_annotation: CodeBlockAnnotation = Field(
        default_factory=CodeBlockAnnotation,
        validation_alias=AliasChoices("request_annotation", "requestMetadata"),
    )
    response_annotation: CodeBlockAnnotation = Field(
        default_factory=CodeBlockAnnotation,
        validation_alias=AliasChoices("response_annotation", "expectedResponseMetadata", "responseMetadata"),
    )
    source_file: str = ""


class ScenarioDefinition(BaseModel):
    """Test parameters for running a documented method against a live service."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    name: str
    method: str
    enabled: bool = True
    request_parameters: dict[str, str] = Field(
        default_factory=dict, validation_alias=AliasChoices("request_parameters", "requestParameters", "parameters")
    )


class DocFile(BaseModel):
    """What one documentation file declares."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    display_name: str = Field(validation_alias=AliasChoices("display_name", "path", "file"))
    resources: list[ResourceDefinition] = Field(default_factory=list)
    examples: list[ExampleBlock] = Field(default_factory=list)
    methods: list[MethodDefinition] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _stamp_source_file(cls, data):
        if not isinstance(data, dict):
            return data
        name = data.get("display_name") or data.get("path") or data.get("file")
        methods = data.get("methods") or []
        stamped = []
        for method in methods:
            if isinstance(method, dict) and not method.get("source_file"):
                method = {**method, "source_file": name}
            stamped.append(method)
        return {**data, "methods": stamped}


class DocSet(BaseModel):
    """A documentation set: files plus the test scenarios declared for it."""

    model_config = ConfigDict(extra="ignore")
    files: list[DocFile] = Field(default_factory=list)
    scenarios: list[ScenarioDefinition] = Field(default_factory=list)
    source_path: str | None = None

    @property
    def resources(self) -> list[ResourceDefinition]:
        return [r for f in self.files for r in f.resources]

    @property
    def methods(self) -> list[MethodDefinition]:
        return [m for f in self.files for m in f.methods]

    def file_named(self, display_name: str) -> DocFile | None:
        for f in self.files:
            if f.display_name == display_name:
                return f
        return None

    def scenarios_for_method(self, method: MethodDefinition) -> list[ScenarioDefinition]:
        wanted = method.identifier.lower()
        return [s for s in self.scenarios if s.method.lower() == wanted]
