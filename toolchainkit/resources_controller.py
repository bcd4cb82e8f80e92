"""Reconciler that applies a fixed set of template objects with a provider label."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from toolchainkit.apply import apply_unstructured_objects_with_new_labels
from toolchainkit.handlers import Request, Result
from toolchainkit.kube import KubeObject

# Added to every resource managed by this controller, so events on them can be filtered.
RESOURCE_CONTROLLER_LABEL_VALUE = "toolchaincluster-resources-controller"
PROVIDER_LABEL_KEY = "toolchain.dev.openshift.com/provider"

log = logging.getLogger(__name__)


@dataclass
class ResourcesReconciler:
    """Applies the template objects in the cluster, labelled as managed by it."""

    client: Any
    template_objects: list[KubeObject] | None = None

    def reconcile(self, request: Request) -> Result:
        """Create or update every template object."""
        log.info("Reconciling ToolchainCluster resources controller")
        if self.template_objects is None:
            raise ValueError("no templates configured")
        new_labels = {PROVIDER_LABEL_KEY: RESOURCE_CONTROLLER_LABEL_VALUE}
        apply_unstructured_objects_with_new_labels(
            self.client, [obj.deep_copy() for obj in self.template_objects], new_labels
        )
        return Result()