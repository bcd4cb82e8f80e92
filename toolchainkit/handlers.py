"""Event mapping functions that turn object events into reconcile requests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Callable

from toolchainkit.kube import KubeObject, NamespacedName


@dataclass(frozen=True)
class Request:
    """A request to reconcile the object with the given name."""

    namespaced_name: NamespacedName

    @property
    def namespace(self) -> str:
        return self.namespaced_name.namespace

    @property
    def name(self) -> str:
        return self.namespaced_name.name


@dataclass(frozen=True)
class Result:
    """The outcome of a reconcile run."""

    requeue: bool = False
    requeue_after: timedelta = timedelta(0)


MapFunc = Callable[[KubeObject], "list[Request]"]


def map_to_owner_by_label(namespace: str, label: str) -> MapFunc:
    """Map an object to a request on the owner named by the given label."""

    def mapper(obj: KubeObject) -> list[Request]:
        name = obj.labels.get(label)
        if name is None:
            return []
        return [Request(NamespacedName(namespace, name))]

    return mapper


def map_to_controller_by_matching_label(label_key: str, label_value: str) -> MapFunc:
    """Map an object to a request on itself when it carries the given label value."""

    def mapper(obj: KubeObject) -> list[Request]:
        if obj.labels.get(label_key) != label_value or label_key not in obj.labels:
            return []
        return [Request(NamespacedName(obj.namespace, obj.name))]

    return mapper