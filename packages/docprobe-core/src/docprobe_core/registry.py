"""Resource type registry.

Holds the resource definitions gathered from documentation and schema sources
for one run and answers type lookups, including the effective property set of a
type once its base-type chain has been walked.
"""

from collections.abc import Iterable, Iterator

from .errors import TypeResolutionError
from .models.resources import PropertyDefinition, ResourceDefinition


def _key(name: str) -> str:
    return name.strip().lstrip("#").lower()


class ResourceTypeRegistry:
    def __init__(self) -> None:
        self._types: dict[str, ResourceDefinition] = {}

    @classmethod
    def from_definitions(cls, definitions: Iterable[ResourceDefinition]) -> "ResourceTypeRegistry":
        registry = cls()
        for definition in definitions:
            registry.register(definition)
        return registry

    def register(self, definition: ResourceDefinition) -> None:
        """Add or overwrite a type by name. Last write wins."""
        self._types[_key(definition.name)] = definition

    def resolve(self, name: str | None) -> ResourceDefinition | None:
        if not name:
            return None
        return self._types.get(_key(name))

    def names(self) -> list[str]:
        return sorted(d.name for d in self._types.values())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _key(name) in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[ResourceDefinition]:
        return iter(self._types.values())

    def base_chain(self, type_: str | ResourceDefinition) -> list[ResourceDefinition]:
        """Return ``[type, base, base-of-base, ...]``.

        ``type_`` may be a name or a definition; a definition does not need to
        be registered itself, only its base types do.

        Raises:
            TypeResolutionError: a type in the chain is unknown, or the chain loops.
        """
        chain: list[ResourceDefinition] = []
        seen: set[str] = set()
        if isinstance(type_, ResourceDefinition):
            name = type_.name
            chain.append(type_)
            seen.add(_key(name))
            current = type_.base_type
        else:
            name = type_
            current = type_
        while current:
            key = _key(current)
            if key in seen:
                path = " -> ".join(d.name for d in chain) + f" -> {current}"
                raise TypeResolutionError("CYCLIC_TYPE", name, f"base type chain of {name} is cyclic: {path}")
            seen.add(key)
            definition = self._types.get(key)
            if definition is None:
                if chain:
                    message = f"base type {current} of {chain[-1].name} is not defined"
                else:
                    message = f"resource type {current} is not defined"
                raise TypeResolutionError("UNRESOLVED_TYPE", current, message)
            chain.append(definition)
            current = definition.base_type
        return chain

    def effective_properties(self, type_: str | ResourceDefinition) -> list[PropertyDefinition]:
        """Properties of a type including inherited ones, root-first.

        A derived property overrides a base property of the same name in place,
        so declaration order stays stable from the root type down.
        """
        merged: dict[str, PropertyDefinition] = {}
        for definition in reversed(self.base_chain(type_)):
            for prop in definition.properties:
                merged[prop.name] = prop
        return list(merged.values())

    def is_assignable(self, derived: str, base: str) -> bool:
        """True when ``base`` appears in the base chain of ``derived``."""
        try:
            chain = self.base_chain(derived)
        except TypeResolutionError:
            return False
        wanted = _key(base)
        return any(_key(d.name) == wanted for d in chain)
