"""Selection of the methods a sweep runs.

Computed once, before any unit starts. An explicit selector that matches
nothing is a configuration error.
"""

from docprobe_core.errors import SelectionError
from docprobe_core.models.docset import DocSet, MethodDefinition


def look_up_method(docset: DocSet, method_name: str) -> MethodDefinition | None:
    wanted = method_name.lower()
    for method in docset.methods:
        if method.identifier.lower() == wanted:
            return method
    return None


def select_methods(
    docset: DocSet,
    method_name: str | None = None,
    file_name: str | None = None,
) -> list[MethodDefinition]:
    """Methods named by ``method_name`` (case-insensitive), else those of ``file_name``, else all."""
    if method_name:
        method = look_up_method(docset, method_name)
        if method is None:
            raise SelectionError(f"Unable to locate method '{method_name}' in docset.")
        return [method]
    if file_name:
        doc = docset.file_named(file_name)
        if doc is None:
            raise SelectionError(f"Unable to locate file '{file_name}' in docset.")
        return list(doc.methods)
    return docset.methods
