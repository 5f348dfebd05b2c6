"""YAML sources for a docprobe run.

Every source (schema resources, doc-set manifest, app config, accounts) goes
through one reader and one validation step, so a bad file always surfaces as
``FileNotFoundError`` or a ``ValueError`` naming the path.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import TypeAdapter, ValidationError

from docprobe_core.config import AppConfig
from docprobe_core.models.docset import DocSet
from docprobe_core.models.resources import ResourceDefinition
from docprobe_core.service.accounts import ConfiguredAccount


def _read_source(path: Path) -> Any:
    if not path.is_file():
        raise FileNotFoundError(f"Source file not found: {path}")
    try:
        content = yaml.safe_load(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise ValueError(f"{path} is not UTF-8 text: {e}") from e
    except yaml.YAMLError as e:
        raise ValueError(f"{path} is not valid YAML: {e}") from e
    if content is None:
        raise ValueError(f"{path} is empty")
    return content


def _validate[T](path: Path, adapter: TypeAdapter[T], content: Any) -> T:
    try:
        return adapter.validate_python(content)
    except ValidationError as e:
        raise ValueError(f"Invalid structure in {path}: {e}") from e


def load_yaml_typed[T](path: Path | str, model: type[T]) -> T:
    """Read one YAML (or JSON) document into ``model``."""
    source = Path(path)
    return _validate(source, TypeAdapter(model), _read_source(source))


def load_yaml_list[T](path: Path | str, item_model: type[T], *, key: str | None = None) -> list[T]:
    """Read a YAML list into ``list[item_model]``.

    With ``key``, a mapping that holds the list under that key is accepted too.
    """
    source = Path(path)
    content = _read_source(source)
    if key is not None and isinstance(content, dict) and key in content:
        content = content[key]
    return _validate(source, TypeAdapter(list[item_model]), content)  # type: ignore[valid-type]


def load_resource_definitions(path: Path | str) -> list[ResourceDefinition]:
    """Resource definitions from a schema source (bare list or ``resources:`` mapping)."""
    return load_yaml_list(path, ResourceDefinition, key="resources")


def load_docset(path: Path | str) -> DocSet:
    """Load a doc-set manifest: the files of a documentation set and what each declares."""
    docset = load_yaml_typed(path, DocSet)
    return docset.model_copy(update={"source_path": str(path)})


def load_app_config(path: Path | str | None) -> AppConfig:
    """Load ``docprobe.yaml``; a missing file means defaults."""
    if path is None or not Path(path).exists():
        return AppConfig()
    config = load_yaml_typed(path, AppConfig)
    return config.model_copy(update={"source_path": str(path)})


def load_accounts(path: Path | str) -> list[ConfiguredAccount]:
    """Service accounts from a YAML list (or a mapping with an ``accounts`` key)."""
    return load_yaml_list(path, ConfiguredAccount, key="accounts")
