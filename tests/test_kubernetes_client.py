from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from urllib3.exceptions import MaxRetryError

from conftest import FakeAppsApi, FakeCoreApi, build_client, make_namespace, make_pod, owner
from pod_ttl_restarter.exceptions import FetchError, NamespaceListError, PodListError
from pod_ttl_restarter.kubernetes_client import KubernetesClient
from pod_ttl_restarter.models import OwnerKind


def test_list_namespaces_converts_objects():
    core = FakeCoreApi(namespaces=[make_namespace("ns1", ttl="1h"), make_namespace("ns2")])

    namespaces = build_client(core, FakeAppsApi()).list_namespaces()

    assert [ns.name for ns in namespaces] == ["ns1", "ns2"]
    assert namespaces[0].annotations == {"restart.k8s.hpa.de/ttl": "1h"}
    assert namespaces[1].annotations == {}


def test_list_pods_converts_owner_references():
    core = FakeCoreApi(pods=[
        make_pod("web-1", "ns1", owners=[owner("ReplicaSet", "web-rs"), owner("CronJob", "x")]),
        make_pod("bare", "ns1"),
    ])

    web, bare = build_client(core, FakeAppsApi()).list_pods("ns1")

    assert [o.kind for o in web.owner_references] == [OwnerKind.REPLICA_SET, OwnerKind.OTHER]
    assert web.owner_references[1].display_kind == "CronJob"
    assert bare.owner_references == []
    assert bare.annotations == {}


def test_namespace_list_failure():
    client = build_client(FakeCoreApi(fail_list_namespaces=True), FakeAppsApi())

    with pytest.raises(NamespaceListError) as exc:
        client.list_namespaces()
    assert exc.value.status_code == 500


def test_pod_list_failure():
    client = build_client(FakeCoreApi(fail_pod_lists={"ns1"}), FakeAppsApi())

    with pytest.raises(PodListError) as exc:
        client.list_pods("ns1")
    assert "Forbidden" in str(exc.value)


def test_get_pod_not_found():
    client = build_client(FakeCoreApi(), FakeAppsApi())

    with pytest.raises(FetchError) as exc:
        client.get_pod("ns1", "ghost")

    assert exc.value.status_code == 404
    assert str(exc.value) == "Failed to read pod: Not Found (status: 404) [Pod/ghost in ns1]"


def test_connection_errors_are_translated():
    core = MagicMock()
    core.list_namespace.side_effect = MaxRetryError(None, "/api/v1/namespaces")
    client = KubernetesClient(core_api=core, apps_api=MagicMock())

    with pytest.raises(NamespaceListError):
        client.list_namespaces()


def test_request_timeout_is_passed():
    core = MagicMock()
    core.list_namespace.return_value = SimpleNamespace(items=[])
    client = KubernetesClient(core_api=core, apps_api=MagicMock(), request_timeout=7)

    client.list_namespaces()

    core.list_namespace.assert_called_once_with(_request_timeout=7)


def test_kube_config_loaded_only_without_injected_apis():
    with patch("pod_ttl_restarter.kubernetes_client.load_kube_configuration") as load, \
            patch("pod_ttl_restarter.kubernetes_client.client") as k8s:
        KubernetesClient(kube_config_path="/tmp/kubeconfig", in_cluster=False)
        load.assert_called_once_with("/tmp/kubeconfig", False)
        k8s.CoreV1Api.assert_called_once_with()

        load.reset_mock()
        KubernetesClient(core_api=MagicMock(), apps_api=MagicMock())
        load.assert_not_called()
