import os
import logging
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from pod_ttl_restarter.exceptions import (
    FetchError,
    NamespaceListError,
    PodListError,
    UpdateError,
)
from pod_ttl_restarter.models import (
    ControllerKind,
    NamespaceInfo,
    OwnerKind,
    OwnerRef,
    PodInfo,
)

logger = logging.getLogger(__name__)

KUBECONFIG_FALLBACK_PATHS = [
    os.path.expanduser("~/.kube/config"),
    "/etc/kubernetes/admin.conf",
    "/etc/rancher/k3s/k3s.yaml",
]

READ_METHODS = {
    ControllerKind.DEPLOYMENT: "read_namespaced_deployment",
    ControllerKind.DAEMON_SET: "read_namespaced_daemon_set",
    ControllerKind.STATEFUL_SET: "read_namespaced_stateful_set",
}

REPLACE_METHODS = {
    ControllerKind.DEPLOYMENT: "replace_namespaced_deployment",
    ControllerKind.DAEMON_SET: "replace_namespaced_daemon_set",
    ControllerKind.STATEFUL_SET: "replace_namespaced_stateful_set",
}


def load_kube_configuration(kube_config_path=None, in_cluster=True):
    """Load cluster credentials, trying the usual locations in order"""
    kubeconfig_path = kube_config_path or os.getenv('KUBECONFIG')
    if kubeconfig_path and os.path.exists(kubeconfig_path):
        logger.info(f"Loading kubeconfig from {kubeconfig_path}")
        config.load_kube_config(config_file=kubeconfig_path)
        return

    if in_cluster:
        try:
            config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes configuration")
            return
        except ConfigException:
            logger.info("Not running in a cluster, trying kubeconfig")

    try:
        config.load_kube_config()
        logger.info("Loaded kubeconfig from default location")
        return
    except ConfigException:
        pass

    for kube_path in KUBECONFIG_FALLBACK_PATHS:
        if os.path.exists(kube_path):
            logger.info(f"Loading kubeconfig from: {kube_path}")
            config.load_kube_config(config_file=kube_path)
            return

    raise ConfigException(
        "Could not load Kubernetes configuration. "
        "Run inside a cluster, configure kubectl, or set KUBECONFIG"
    )


def _owner_refs(metadata):
    refs = []
    for ref in (metadata.owner_references or []):
        kind = OwnerKind.parse(ref.kind)
        refs.append(OwnerRef(kind=kind, name=ref.name, raw_kind=ref.kind or ""))
    return refs


def to_namespace_info(namespace):
    return NamespaceInfo(
        name=namespace.metadata.name,
        annotations=dict(namespace.metadata.annotations or {}),
    )


def to_pod_info(pod):
    metadata = pod.metadata
    return PodInfo(
        name=metadata.name,
        namespace=metadata.namespace,
        creation_timestamp=metadata.creation_timestamp,
        annotations=dict(metadata.annotations or {}),
        owner_references=_owner_refs(metadata),
    )


class KubernetesClient:
    """Thin wrapper over CoreV1Api/AppsV1Api used by a sweep.

    Every call translates API failures into the sweep's error types so
    callers can decide the blast radius.
    """

    def __init__(self, core_api=None, apps_api=None, request_timeout=None,
                 kube_config_path=None, in_cluster=True):
        self.request_timeout = request_timeout

        if core_api is None or apps_api is None:
            try:
                load_kube_configuration(kube_config_path, in_cluster)
            except Exception as e:
                logger.error(f"Failed to initialize Kubernetes client: {e}")
                raise

        self.v1 = core_api or client.CoreV1Api()
        self.apps_v1 = apps_api or client.AppsV1Api()

    def _call(self, error_cls, message, method, *args, resource_type=None,
              resource_name=None, namespace=None, **kwargs):
        if self.request_timeout:
            kwargs['_request_timeout'] = self.request_timeout
        try:
            return method(*args, **kwargs)
        except ApiException as e:
            raise error_cls(
                f"{message}: {e.reason}",
                status_code=e.status,
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            ) from e
        except HTTPError as e:
            raise error_cls(
                f"{message}: {e}",
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            ) from e

    def list_namespaces(self):
        """List all namespaces"""
        result = self._call(NamespaceListError, "Failed to list namespaces",
                            self.v1.list_namespace)
        return [to_namespace_info(ns) for ns in result.items]

    def get_namespace(self, name):
        result = self._call(FetchError, "Failed to read namespace",
                            self.v1.read_namespace, name,
                            resource_type="Namespace", resource_name=name)
        return to_namespace_info(result)

    def list_pods(self, namespace):
        """List pods of one namespace"""
        result = self._call(PodListError, "Failed to list pods",
                            self.v1.list_namespaced_pod, namespace,
                            resource_type="Namespace", resource_name=namespace)
        return [to_pod_info(pod) for pod in result.items]

    def get_pod(self, namespace, name):
        result = self._call(FetchError, "Failed to read pod",
                            self.v1.read_namespaced_pod, name, namespace,
                            resource_type="Pod", resource_name=name,
                            namespace=namespace)
        return to_pod_info(result)

    def get_replica_set_owners(self, namespace, name):
        """Return the owner references of a ReplicaSet"""
        result = self._call(FetchError, "Failed to read replicaset",
                            self.apps_v1.read_namespaced_replica_set, name, namespace,
                            resource_type="ReplicaSet", resource_name=name,
                            namespace=namespace)
        return _owner_refs(result.metadata)

    def get_controller(self, target):
        """Read the raw Deployment/DaemonSet/StatefulSet object for target"""
        method = getattr(self.apps_v1, READ_METHODS[target.kind])
        return self._call(FetchError, f"Failed to read {target.kind.value}",
                          method, target.name, target.namespace,
                          resource_type=target.kind.value,
                          resource_name=target.name, namespace=target.namespace)

    def replace_controller(self, target, body):
        """Write a controller back; the body's resourceVersion guards against lost updates"""
        method = getattr(self.apps_v1, REPLACE_METHODS[target.kind])
        return self._call(UpdateError, f"Failed to update {target.kind.value}",
                          method, target.name, target.namespace, body,
                          resource_type=target.kind.value,
                          resource_name=target.name, namespace=target.namespace)

    def test_connection(self):
        """Test Kubernetes connection"""
        try:
            self.v1.get_api_resources()
            return True
        except (ApiException, HTTPError):
            return False
