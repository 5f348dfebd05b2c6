from .annotations import CodeBlockAnnotation
from .docset import DocFile, DocSet, ExampleBlock, MethodDefinition, ScenarioDefinition
from .findings import Finding
from .http import HttpRequest, HttpResponse
from .outcome import Outcome, worst_of
from .report import RunReport, UnitId, UnitResult
from .resources import PropertyDefinition, ResourceDefinition, TypeRef

__all__ = [
    "CodeBlockAnnotation",
    "DocFile",
    "DocSet",
    "ExampleBlock",
    "Finding",
    "HttpRequest",
    "HttpResponse",
    "MethodDefinition",
    "Outcome",
    "PropertyDefinition",
    "ResourceDefinition",
    "RunReport",
    "ScenarioDefinition",
    "TypeRef",
    "UnitId",
    "UnitResult",
    "worst_of",
]
