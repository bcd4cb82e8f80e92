"""Kubernetes-style objects and an in-memory object store."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Iterable


@dataclass(frozen=True, order=True)
class NamespacedName:
    """The namespace and name that identify an object."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class NotFoundError(LookupError):
    """Raised when an object does not exist in the store."""

    def __init__(self, kind: str, namespace: str, name: str) -> None:
        self.kind = kind
        self.namespace = namespace
        self.name = name
        super().__init__(f'{kind} "{name}" not found')


@dataclass
class KubeObject:
    """An unstructured Kubernetes object backed by a plain dictionary."""

    data: dict[str, Any] = field(default_factory=dict)

    @property
    def metadata(self) -> dict[str, Any]:
        return self.data.setdefault("metadata", {})

    @property
    def api_version(self) -> str:
        return self.data.get("apiVersion", "")

    @api_version.setter
    def api_version(self, value: str) -> None:
        self.data["apiVersion"] = value

    @property
    def group(self) -> str:
        group, _, _ = self.api_version.rpartition("/")
        return group

    @property
    def version(self) -> str:
        return self.api_version.rpartition("/")[2]

    @property
    def kind(self) -> str:
        return self.data.get("kind", "")

    @kind.setter
    def kind(self, value: str) -> None:
        self.data["kind"] = value

    @property
    def gvk(self) -> tuple[str, str]:
        """The apiVersion and kind of the object."""
        return self.api_version, self.kind

    @property
    def name(self) -> str:
        return self.metadata.get("name", "")

    @name.setter
    def name(self, value: str) -> None:
        self.metadata["name"] = value

    @property
    def namespace(self) -> str:
        return self.metadata.get("namespace", "")

    @namespace.setter
    def namespace(self, value: str) -> None:
        self.metadata["namespace"] = value

    @property
    def namespaced_name(self) -> NamespacedName:
        return NamespacedName(self.namespace, self.name)

    @property
    def labels(self) -> dict[str, str]:
        return self.metadata.get("labels") or {}

    @labels.setter
    def labels(self, value: dict[str, str] | None) -> None:
        self.metadata["labels"] = dict(value) if value is not None else {}

    @property
    def annotations(self) -> dict[str, str]:
        return self.metadata.get("annotations") or {}

    @annotations.setter
    def annotations(self, value: dict[str, str] | None) -> None:
        self.metadata["annotations"] = dict(value) if value is not None else {}

    @property
    def resource_version(self) -> str:
        return self.metadata.get("resourceVersion", "")

    @resource_version.setter
    def resource_version(self, value: str) -> None:
        if value:
            self.metadata["resourceVersion"] = value
        else:
            self.metadata.pop("resourceVersion", None)

    @property
    def generation(self) -> int:
        return int(self.metadata.get("generation", 0))

    @generation.setter
    def generation(self, value: int) -> None:
        self.metadata["generation"] = value

    @property
    def owner_references(self) -> list[dict[str, Any]]:
        return self.metadata.get("ownerReferences") or []

    @owner_references.setter
    def owner_references(self, value: Iterable[dict[str, Any]]) -> None:
        self.metadata["ownerReferences"] = [dict(ref) for ref in value]

    def deep_copy(self) -> KubeObject:
        return KubeObject(copy.deepcopy(self.data))

    def get_nested(self, *keys: str) -> Any:
        """Return the value at the given path, or None when it is absent."""
        if not keys:
            raise ValueError("at least one key is required")
        current: Any = self.data
        for depth, key in enumerate(keys):
            if not isinstance(current, dict):
                path = ".".join(keys[:depth])
                raise TypeError(
                    f"{path} is of type {type(current).__name__}, expected a mapping"
                )
            if key not in current:
                return None
            current = current[key]
        return current

    def set_nested(self, value: Any, *keys: str) -> None:
        """Set the value at the given path, creating mappings on the way."""
        if not keys:
            raise ValueError("at least one key is required")
        current = self.data
        for depth, key in enumerate(keys[:-1]):
            child = current.setdefault(key, {})
            if not isinstance(child, dict):
                path = ".".join(keys[: depth + 1])
                raise TypeError(
                    f"{path} is of type {type(child).__name__}, expected a mapping"
                )
            current = child
        current[keys[-1]] = copy.deepcopy(value)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.data)


_VOLATILE_METADATA = ("resourceVersion", "generation")


def _without_volatile(data: dict[str, Any]) -> dict[str, Any]:
    result = copy.deepcopy(data)
    metadata = result.get("metadata") or {}
    for key in _VOLATILE_METADATA:
        metadata.pop(key, None)
    return result


def _spec_part(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in ("metadata", "status")}


class KubeClient:
    """An in-memory store of objects with the semantics of an API server."""

    def __init__(self, *objects: KubeObject) -> None:
        self._store: dict[tuple[str, str, str], dict[str, Any]] = {}
        self._revision = 0
        for obj in objects:
            self.create(obj)

    def _next_version(self) -> str:
        self._revision += 1
        return str(self._revision)

    def _lookup(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        try:
            return self._store[(kind, namespace, name)]
        except KeyError:
            raise NotFoundError(kind, namespace, name) from None

    def _check_version(self, obj: KubeObject, stored: dict[str, Any]) -> None:
        stored_version = stored["metadata"]["resourceVersion"]
        if obj.resource_version and obj.resource_version != stored_version:
            raise ValueError(
                f'{obj.kind} "{obj.name}": the object has been modified; '
                "please apply your changes to the latest version"
            )

    def get(self, kind: str, namespace: str, name: str) -> KubeObject:
        return KubeObject(copy.deepcopy(self._lookup(kind, namespace, name)))

    def create(self, obj: KubeObject) -> None:
        key = (obj.kind, obj.namespace, obj.name)
        if key in self._store:
            raise ValueError(f'{obj.kind} "{obj.name}" already exists')
        if obj.resource_version:
            raise ValueError("resourceVersion can not be set for Create requests")
        obj.resource_version = self._next_version()
        obj.generation = 1
        self._store[key] = copy.deepcopy(obj.data)

    def update(self, obj: KubeObject) -> None:
        stored = self._lookup(obj.kind, obj.namespace, obj.name)
        self._check_version(obj, stored)
        updated = copy.deepcopy(obj.data)
        if "status" in stored:
            updated["status"] = copy.deepcopy(stored["status"])
        else:
            updated.pop("status", None)
        metadata = updated.setdefault("metadata", {})
        generation = int(stored["metadata"].get("generation", 1))
        if _spec_part(updated) != _spec_part(stored):
            generation += 1
        metadata["generation"] = generation
        if _without_volatile(updated) != _without_volatile(stored):
            metadata["resourceVersion"] = self._next_version()
        else:
            metadata["resourceVersion"] = stored["metadata"]["resourceVersion"]
        self._store[(obj.kind, obj.namespace, obj.name)] = updated
        obj.data = copy.deepcopy(updated)

    def update_status(self, obj: KubeObject) -> None:
        stored = self._lookup(obj.kind, obj.namespace, obj.name)
        self._check_version(obj, stored)
        if "status" in obj.data:
            stored["status"] = copy.deepcopy(obj.data["status"])
        else:
            stored.pop("status", None)
        stored["metadata"]["resourceVersion"] = self._next_version()
        obj.resource_version = stored["metadata"]["resourceVersion"]

    def list(self, kind: str, namespace: str | None = None) -> list[KubeObject]:
        """Return the objects of a kind, limited to a namespace when one is given."""
        return [
            KubeObject(copy.deepcopy(data))
            for (obj_kind, obj_namespace, _), data in sorted(self._store.items())
            if obj_kind == kind and (namespace is None or obj_namespace == namespace)
        ]


def sort_objects_by_name(objects: Iterable[KubeObject]) -> list[KubeObject]:
    """Sort objects by their "namespace,name" string."""
    return sorted(objects, key=lambda obj: f"{obj.namespace},{obj.name}")


def same_gvk_and_name(a: KubeObject, b: KubeObject) -> bool:
    """True when both objects have the same apiVersion, kind and name."""
    return a.gvk == b.gvk and a.name == b.name