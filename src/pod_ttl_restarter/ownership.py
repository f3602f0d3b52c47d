"""
Owner chain resolution: pod -> restartable controller
"""

import logging

from pod_ttl_restarter.exceptions import OrphanedResourceError, UnsupportedOwnerKindError
from pod_ttl_restarter.models import ControllerKind, ControllerRef, OwnerKind

logger = logging.getLogger(__name__)

DIRECT_TARGETS = {
    OwnerKind.DAEMON_SET: ControllerKind.DAEMON_SET,
    OwnerKind.STATEFUL_SET: ControllerKind.STATEFUL_SET,
}


class OwnershipResolver:
    """Find the Deployment, DaemonSet or StatefulSet behind a pod.

    Only the first owner reference of the pod counts. A ReplicaSet owner is
    followed one hop to its Deployment; deeper chains are not walked.
    """

    def __init__(self, k8s_client):
        self.k8s_client = k8s_client

    def resolve(self, pod):
        if not pod.owner_references:
            raise OrphanedResourceError(
                f"Pod {pod.name} has no owner and would be deleted permanently",
                namespace=pod.namespace,
                pod_name=pod.name,
            )

        owner = pod.owner_references[0]

        if owner.kind in DIRECT_TARGETS:
            return ControllerRef(DIRECT_TARGETS[owner.kind], pod.namespace, owner.name)

        if owner.kind is OwnerKind.REPLICA_SET:
            return self._resolve_replica_set(pod, owner)

        raise UnsupportedOwnerKindError(
            f"Pod {pod.name} is owned by unsupported kind {owner.display_kind}",
            namespace=pod.namespace,
            pod_name=pod.name,
            owner_kind=owner.display_kind,
            owner_name=owner.name,
        )

    def _resolve_replica_set(self, pod, replica_set):
        # FetchError propagates to the caller, which skips the pod
        rs_owners = self.k8s_client.get_replica_set_owners(pod.namespace, replica_set.name)

        if not rs_owners:
            raise OrphanedResourceError(
                f"ReplicaSet {replica_set.name} has no owner and would be deleted permanently",
                namespace=pod.namespace,
                pod_name=pod.name,
                owner_kind=OwnerKind.REPLICA_SET.value,
                owner_name=replica_set.name,
            )

        deployment = rs_owners[0]
        if deployment.kind is not OwnerKind.DEPLOYMENT:
            raise UnsupportedOwnerKindError(
                f"ReplicaSet {replica_set.name} is owned by unsupported kind {deployment.display_kind}",
                namespace=pod.namespace,
                pod_name=pod.name,
                owner_kind=deployment.display_kind,
                owner_name=deployment.name,
            )

        logger.debug(f"Pod {pod.namespace}/{pod.name} -> ReplicaSet {replica_set.name} "
                     f"-> Deployment {deployment.name}")
        return ControllerRef(ControllerKind.DEPLOYMENT, pod.namespace, deployment.name)
