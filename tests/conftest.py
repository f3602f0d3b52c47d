from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from kubernetes.client import ApiException

from pod_ttl_restarter import TTL_ANNOTATION
from pod_ttl_restarter.config import Config
from pod_ttl_restarter.kubernetes_client import KubernetesClient

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def owner(kind, name):
    return SimpleNamespace(kind=kind, name=name)


def make_namespace(name, ttl=None, annotations=None):
    annotations = dict(annotations or {})
    if ttl is not None:
        annotations[TTL_ANNOTATION] = ttl
    return SimpleNamespace(metadata=SimpleNamespace(name=name, annotations=annotations or None))


def make_pod(name, namespace, age=timedelta(hours=2), ttl=None, owners=None, annotations=None):
    annotations = dict(annotations or {})
    if ttl is not None:
        annotations[TTL_ANNOTATION] = ttl
    return SimpleNamespace(
        metadata=SimpleNamespace(
            name=name,
            namespace=namespace,
            creation_timestamp=NOW - age,
            annotations=annotations or None,
            owner_references=owners,
        )
    )


def make_controller(name, namespace, template_annotations=None, resource_version="1"):
    return SimpleNamespace(
        metadata=SimpleNamespace(name=name, namespace=namespace,
                                 resource_version=resource_version),
        spec=SimpleNamespace(
            template=SimpleNamespace(
                metadata=SimpleNamespace(annotations=template_annotations)
            )
        ),
    )


class FakeCoreApi:
    def __init__(self, namespaces=None, pods=None, fail_list_namespaces=False,
                 fail_pod_lists=None, fail_pod_reads=None):
        self.namespaces = list(namespaces or [])
        self.pods = list(pods or [])
        self.fail_list_namespaces = fail_list_namespaces
        self.fail_pod_lists = set(fail_pod_lists or [])
        self.fail_pod_reads = set(fail_pod_reads or [])
        self.listed_namespaces = []

    def list_namespace(self, **kwargs):
        if self.fail_list_namespaces:
            raise ApiException(status=500, reason="boom")
        return SimpleNamespace(items=list(self.namespaces))

    def read_namespace(self, name, **kwargs):
        for ns in self.namespaces:
            if ns.metadata.name == name:
                return ns
        raise ApiException(status=404, reason="Not Found")

    def list_namespaced_pod(self, namespace, **kwargs):
        self.listed_namespaces.append(namespace)
        if namespace in self.fail_pod_lists:
            raise ApiException(status=403, reason="Forbidden")
        return SimpleNamespace(items=[p for p in self.pods if p.metadata.namespace == namespace])

    def read_namespaced_pod(self, name, namespace, **kwargs):
        if (namespace, name) in self.fail_pod_reads:
            raise ApiException(status=500, reason="boom")
        for pod in self.pods:
            if pod.metadata.name == name and pod.metadata.namespace == namespace:
                return pod
        raise ApiException(status=404, reason="Not Found")

    def get_api_resources(self, **kwargs):
        return SimpleNamespace(resources=[])


class FakeAppsApi:
    def __init__(self, replica_sets=None, controllers=None, fail_reads=None,
                 fail_updates=None):
        # replica_sets: {(namespace, name): [owner, ...] or None}
        self.replica_sets = dict(replica_sets or {})
        # controllers: {(kind, namespace, name): controller object}
        self.controllers = dict(controllers or {})
        self.fail_reads = set(fail_reads or [])
        self.fail_updates = set(fail_updates or [])
        self.updates = []
        self.replica_set_reads = []

    def read_namespaced_replica_set(self, name, namespace, **kwargs):
        self.replica_set_reads.append((namespace, name))
        if (namespace, name) not in self.replica_sets:
            raise ApiException(status=404, reason="Not Found")
        return SimpleNamespace(metadata=SimpleNamespace(
            name=name, owner_references=self.replica_sets[(namespace, name)]))

    def _read(self, kind, name, namespace):
        key = (kind, namespace, name)
        if key in self.fail_reads or key not in self.controllers:
            raise ApiException(status=404, reason="Not Found")
        return self.controllers[key]

    def _replace(self, kind, name, namespace, body):
        key = (kind, namespace, name)
        if key in self.fail_updates:
            raise ApiException(status=409, reason="Conflict")
        self.controllers[key] = body
        self.updates.append((kind, namespace, name,
                             dict(body.spec.template.metadata.annotations)))
        return body

    def read_namespaced_deployment(self, name, namespace, **kwargs):
        return self._read("Deployment", name, namespace)

    def read_namespaced_daemon_set(self, name, namespace, **kwargs):
        return self._read("DaemonSet", name, namespace)

    def read_namespaced_stateful_set(self, name, namespace, **kwargs):
        return self._read("StatefulSet", name, namespace)

    def replace_namespaced_deployment(self, name, namespace, body, **kwargs):
        return self._replace("Deployment", name, namespace, body)

    def replace_namespaced_daemon_set(self, name, namespace, body, **kwargs):
        return self._replace("DaemonSet", name, namespace, body)

    def replace_namespaced_stateful_set(self, name, namespace, body, **kwargs):
        return self._replace("StatefulSet", name, namespace, body)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def sweep_config():
    return Config()


def build_client(core_api, apps_api):
    return KubernetesClient(core_api=core_api, apps_api=apps_api, request_timeout=5)
