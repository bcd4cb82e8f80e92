import pytest

from toolchainkit.handlers import Request, Result
from toolchainkit.kube import KubeClient, KubeObject, NamespacedName
from toolchainkit.resources_controller import (
    PROVIDER_LABEL_KEY,
    RESOURCE_CONTROLLER_LABEL_VALUE,
    ResourcesReconciler,
)

MEMBER_NS = "toolchain-member-operator"
REQUEST = Request(NamespacedName(MEMBER_NS, "existing-sa"))


def _obj(api_version, kind, name, namespace=MEMBER_NS, **extra):
    data = {
        "apiVersion": api_version,
        "kind": kind,
        "metadata": {"name": name, "namespace": namespace},
    }
    data.update(extra)
    return KubeObject(data)


def _existing_sa():
    return _obj("v1", "ServiceAccount", "existing-sa")


def _service_account_templates():
    return [
        _obj("v1", "ServiceAccount", "toolchaincluster-host"),
        _obj(
            "rbac.authorization.k8s.io/v1",
            "Role",
            "toolchaincluster-host",
            rules=[
                {
                    "apiGroups": ["toolchain.dev.openshift.com"],
                    "resources": ["*"],
                    "verbs": ["*"],
                }
            ],
        ),
        _obj(
            "rbac.authorization.k8s.io/v1",
            "RoleBinding",
            "toolchaincluster-host",
            roleRef={"kind": "Role", "name": "toolchaincluster-host"},
            subjects=[{"kind": "ServiceAccount", "name": "toolchaincluster-host"}],
        ),
    ]


def test_creates_service_account_resources():
    client = KubeClient(_existing_sa())
    controller = ResourcesReconciler(client, _service_account_templates())

    result = controller.reconcile(REQUEST)

    assert result == Result()
    for kind in ("ServiceAccount", "Role", "RoleBinding"):
        obj = client.get(kind, MEMBER_NS, "toolchaincluster-host")
        assert obj.labels[PROVIDER_LABEL_KEY] == RESOURCE_CONTROLLER_LABEL_VALUE


def test_creates_cluster_role():
    client = KubeClient(_existing_sa())
    template = _obj(
        "rbac.authorization.k8s.io/v1",
        "ClusterRole",
        "member-toolchaincluster-cr",
        namespace="",
        rules=[{"apiGroups": [""], "resources": ["secrets"], "verbs": ["get"]}],
    )
    controller = ResourcesReconciler(client, [template])

    controller.reconcile(REQUEST)

    cr = client.get("ClusterRole", "", "member-toolchaincluster-cr")
    assert cr.labels[PROVIDER_LABEL_KEY] == RESOURCE_CONTROLLER_LABEL_VALUE


def test_error_when_no_templates_configured():
    controller = ResourcesReconciler(KubeClient(_existing_sa()), None)

    with pytest.raises(ValueError, match="no templates configured"):
        controller.reconcile(REQUEST)


def test_reconcile_twice_keeps_templates_untouched():
    client = KubeClient(_existing_sa())
    templates = _service_account_templates()
    controller = ResourcesReconciler(client, templates)

    controller.reconcile(REQUEST)
    controller.reconcile(REQUEST)

    assert all(PROVIDER_LABEL_KEY not in t.labels for t in templates)
    role = client.get("Role", MEMBER_NS, "toolchaincluster-host")
    assert role.data["rules"][0]["resources"] == ["*"]


def test_existing_service_account_keeps_secret_refs():
    secrets = [{"name": "secret", "namespace": MEMBER_NS}]
    existing = _obj("v1", "ServiceAccount", "toolchaincluster-host", secrets=secrets)
    client = KubeClient(existing)
    controller = ResourcesReconciler(client, _service_account_templates()[:1])

    controller.reconcile(REQUEST)

    sa = client.get("ServiceAccount", MEMBER_NS, "toolchaincluster-host")
    assert sa.data["secrets"] == secrets
    assert sa.labels[PROVIDER_LABEL_KEY] == RESOURCE_CONTROLLER_LABEL_VALUE