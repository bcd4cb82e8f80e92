"""Create-or-update of objects in a store, remembering what was applied."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping

from toolchainkit.kube import KubeObject, NotFoundError

LAST_APPLIED_CONFIGURATION_ANNOTATION_KEY = (
    "toolchain.dev.openshift.com/last-applied-configuration"
)

log = logging.getLogger(__name__)


class ApplyError(RuntimeError):
    """Raised when an object cannot be created or updated."""


def merge_labels(obj: KubeObject, new_labels: Mapping[str, str]) -> None:
    """Merge the new labels into the labels the object already has."""
    obj.labels = {**obj.labels, **new_labels}


def merge_annotations(obj: KubeObject, new_annotations: Mapping[str, str]) -> None:
    """Merge the new annotations into the annotations the object already has."""
    obj.annotations = {**obj.annotations, **new_annotations}


def get_new_configuration(resource: KubeObject) -> str:
    """Serialize the object, leaving out any previously saved configuration."""
    content = resource.to_dict()
    metadata = content.get("metadata")
    if isinstance(metadata, dict):
        annotations = metadata.get("annotations")
        if isinstance(annotations, dict):
            annotations.pop(LAST_APPLIED_CONFIGURATION_ANNOTATION_KEY, None)
            if not annotations:
                del metadata["annotations"]
    try:
        return json.dumps(content, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        log.exception("unable to marshal the object %s", resource.namespaced_name)
        return repr(content)


def retain_cluster_ip(new_resource: KubeObject, existing: KubeObject) -> None:
    """Copy spec.clusterIP from the existing object into the new one, if present."""
    cluster_ip = existing.get_nested("spec", "clusterIP")
    if cluster_ip is None:
        return
    if not isinstance(cluster_ip, str):
        raise TypeError(
            f"spec.clusterIP accessor error: {cluster_ip!r} is of type "
            f"{type(cluster_ip).__name__}, expected str"
        )
    new_resource.set_nested(cluster_ip, "spec", "clusterIP")


def _same_owner(ref: Mapping[str, Any], owner_ref: Mapping[str, Any]) -> bool:
    group = str(ref.get("apiVersion", "")).rpartition("/")[0]
    owner_group = str(owner_ref.get("apiVersion", "")).rpartition("/")[0]
    return (
        group == owner_group
        and ref.get("kind") == owner_ref.get("kind")
        and ref.get("name") == owner_ref.get("name")
    )


def _set_controller_reference(owner: KubeObject, obj: KubeObject) -> None:
    if owner.namespace and owner.namespace != obj.namespace:
        raise ApplyError(
            f"cross-namespace owner references are disallowed, owner's namespace "
            f"{owner.namespace}, obj's namespace {obj.namespace}"
        )
    owner_ref = {
        "apiVersion": owner.api_version,
        "kind": owner.kind,
        "name": owner.name,
        "uid": owner.metadata.get("uid", ""),
        "controller": True,
        "blockOwnerDeletion": True,
    }
    references = []
    replaced = False
    for ref in obj.owner_references:
        if _same_owner(ref, owner_ref):
            references.append(owner_ref)
            replaced = True
            continue
        if ref.get("controller"):
            raise ApplyError(
                f"Object {obj.namespace}/{obj.name} is already owned by another "
                f"{ref.get('kind')} controller {ref.get('name')}"
            )
        references.append(ref)
    if not replaced:
        references.append(owner_ref)
    obj.owner_references = references


class ApplyClient:
    """Creates objects that are missing and updates those that changed."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def apply_object(
        self,
        obj: KubeObject,
        *,
        owner: KubeObject | None = None,
        force_update: bool = False,
        save_configuration: bool = True,
    ) -> bool:
        """Create or update the object.

        Returns True when the object was created or its generation changed.
        """
        if not isinstance(obj, KubeObject):
            raise TypeError(f"unable to cast of the object to KubeObject: {obj!r}")
        kind, version = obj.kind, obj.version
        try:
            return self._apply(obj, owner, force_update, save_configuration)
        except ApplyError as err:
            raise ApplyError(
                f"unable to create resource of kind: {kind}, version: {version}: {err}"
            ) from err

    def _apply(
        self,
        obj: KubeObject,
        owner: KubeObject | None,
        force_update: bool,
        save_configuration: bool,
    ) -> bool:
        new_configuration = ""
        if save_configuration:
            new_configuration = get_new_configuration(obj)
            merge_annotations(
                obj, {LAST_APPLIED_CONFIGURATION_ANNOTATION_KEY: new_configuration}
            )

        try:
            existing = self.client.get(obj.kind, obj.namespace, obj.name)
        except NotFoundError:
            obj.resource_version = ""
            self._create(obj, owner)
            return True
        except Exception as err:
            raise ApplyError(
                f"unable to get the resource '{obj.namespaced_name}': {err}"
            ) from err

        if not force_update:
            last_applied = existing.annotations.get(
                LAST_APPLIED_CONFIGURATION_ANNOTATION_KEY
            )
            if new_configuration and last_applied == new_configuration:
                return False

        original_generation = existing.generation
        obj.resource_version = existing.resource_version

        # Reapplying a ServiceAccount would make the cluster mint new secrets for it,
        # so the existing object is kept, with the new labels and annotations.
        if obj.kind.lower() == "serviceaccount":
            merge_annotations(existing, obj.annotations)
            merge_labels(existing, obj.labels)
            obj = existing

        try:
            retain_cluster_ip(obj, existing)
        except TypeError as err:
            raise ApplyError(str(err)) from err

        try:
            self.client.update(obj)
        except Exception as err:
            raise ApplyError(
                f"unable to update the resource '{obj.namespaced_name}': {err}"
            ) from err

        return original_generation != obj.generation

    def _create(self, obj: KubeObject, owner: KubeObject | None) -> None:
        if owner is not None:
            try:
                _set_controller_reference(owner, obj)
            except ApplyError as err:
                raise ApplyError(f"unable to set controller references: {err}") from err
        try:
            self.client.create(obj)
        except Exception as err:
            raise ApplyError(
                f"unable to create the resource '{obj.namespaced_name}': {err}"
            ) from err

    def apply(
        self, objects: Iterable[KubeObject], new_labels: Mapping[str, str]
    ) -> bool:
        """Apply every object with the new labels, forcing updates.

        Returns True when at least one object was created or changed.
        """
        created_or_updated = False
        for obj in objects:
            merge_labels(obj, new_labels)
            result = self.apply_object(obj, force_update=True)
            created_or_updated = created_or_updated or result
        return created_or_updated


def apply_unstructured_objects_with_new_labels(
    client: Any, objects: Iterable[KubeObject], new_labels: Mapping[str, str]
) -> None:
    """Apply the objects with the new labels, without saving their configuration."""
    apply_client = ApplyClient(client)
    for obj in objects:
        log.info(
            "applying object namespace=%s name=%s/%s", obj.namespace, obj.kind, obj.name
        )
        merge_labels(obj, new_labels)
        apply_client.apply_object(obj, save_configuration=False)