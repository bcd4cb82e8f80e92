# toolchainkit

Building blocks for operators that reconcile Kubernetes-style objects:

- **`toolchainkit.kube`**: an object model and an in-memory store.
  `KubeObject` wraps a plain dictionary and exposes `name`, `namespace`,
  `labels`, `annotations`, `generation`, `resource_version` and related fields.
  It also has `deep_copy`, `get_nested`, `set_nested` and `to_dict`.
  `NamespacedName` identifies an object. `KubeClient` stores objects and has
  `get`, `create`, `update`, `update_status` and `list`. `get` raises
  `NotFoundError` when an object is missing. An update that changes anything
  outside `metadata` and `status` bumps the generation. The module also has the
  helpers `sort_objects_by_name` (sorts by `"namespace,name"`) and
  `same_gvk_and_name`.
- **`toolchainkit.condition`**: status-condition helpers. These are
  `add_or_update_status_conditions`,
  `add_or_update_status_conditions_with_last_updated_timestamp`,
  `add_status_conditions`, `find_condition_by_type`, `is_true`, `is_false`,
  `is_not_true`, `is_true_with_reason`, `is_false_with_reason`, `count` and
  `has_condition_reason`. Statuses are given by `ConditionStatus`.
- **`toolchainkit.apply`**: `ApplyClient` creates an object or updates it. It
  does the following:
  - It can store the last-applied configuration in the
    `toolchain.dev.openshift.com/last-applied-configuration` annotation.
  - It skips the update when that configuration has not changed, unless
    `force_update=True`.
  - It keeps an existing `spec.clusterIP`.
  - For a ServiceAccount, it keeps the existing object and merges only the new
    labels and annotations into it.
  - It can set a controller owner reference.

  The module also has `merge_labels`, `merge_annotations`, `retain_cluster_ip`,
  `get_new_configuration` and `apply_unstructured_objects_with_new_labels`.
  Failures raise `ApplyError`.
- **`toolchainkit.handlers`**: `Request` and `Result`, plus the event mappers
  `map_to_owner_by_label` and `map_to_controller_by_matching_label`.
- **`toolchainkit.resources_controller`**: `ResourcesReconciler` applies a
  fixed list of template objects. Each one is labelled
  `toolchain.dev.openshift.com/provider: toolchaincluster-resources-controller`.
- **`toolchainkit.github`**: `new_github_session` returns a `requests.Session`
  with a bearer token set. `can_issue_github_request` limits calls to one per
  minute. `GitHubRepository` is a plain record type.

## Installation

```
pip install toolchainkit
```

## Working with conditions

```python
from toolchainkit.condition import (
    Condition,
    ConditionStatus,
    add_or_update_status_conditions,
    is_true,
)

conditions, changed = add_or_update_status_conditions(
    [],
    Condition(type="Ready", status=ConditionStatus.TRUE, reason="Provisioned"),
)
assert changed
assert is_true(conditions, "Ready")
```

`add_or_update_status_conditions` never changes the list you pass in. Suppose
a condition of the same type is already in the list, with the same status,
reason and message. Then you get the original list back, with `changed` set to
`False`. The last transition time changes only when the status changes.

## Applying objects

```python
from toolchainkit.apply import ApplyClient
from toolchainkit.kube import KubeClient, KubeObject

client = KubeClient()
applier = ApplyClient(client)
config_map = KubeObject(
    {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": "settings", "namespace": "demo"},
        "data": {"mode": "fast"},
    }
)
assert applier.apply_object(config_map)       # created
assert not applier.apply_object(config_map)   # unchanged, nothing to do
```

`ApplyClient.apply(objects, new_labels)` does two things to every object:

1. It merges the labels into the object.
2. It applies the object with `force_update=True`.

It returns `True` if any object was created or changed.

## Mapping events to requests

```python
from toolchainkit.handlers import map_to_owner_by_label
from toolchainkit.kube import KubeObject

mapper = map_to_owner_by_label("operator-ns", "owner")
requests_ = mapper(KubeObject({"metadata": {"name": "a", "labels": {"owner": "foo"}}}))
assert requests_[0].name == "foo"
```

## Rate-limited GitHub access

```python
from toolchainkit.github import can_issue_github_request, new_github_session

session = new_github_session("token")
if can_issue_github_request(None):  # no call made yet
    ...
```

## What this package does not do

`KubeClient` is an in-memory store only. The package has no network client for
a real Kubernetes API server, and no controller manager that watches objects
and calls reconcilers. The package also has none of the following:

- a registry of member and host clusters
- `/healthz` health probing
- service-account token requests

Reconcilers here are called directly with a `Request`.

## Running the tests

```
pip install -e ".[test]"
pytest
```