"""
Error types raised during a sweep
"""

from typing import Optional


class RestarterError(Exception):
    """Base exception for Pod TTL Restarter"""


class InvalidTTLFormatError(RestarterError, ValueError):
    """A TTL annotation value could not be parsed"""

    def __init__(self, value: str, source: Optional[str] = None):
        self.value = value
        self.source = source
        where = f" on {source}" if source else ""
        super().__init__(f"Invalid TTL value {value!r}{where}")


class OwnershipError(RestarterError):
    """The owner chain of a pod does not lead to a restartable controller"""

    def __init__(self, message: str, namespace: str, pod_name: str,
                 owner_kind: Optional[str] = None, owner_name: Optional[str] = None):
        super().__init__(message)
        self.namespace = namespace
        self.pod_name = pod_name
        self.owner_kind = owner_kind
        self.owner_name = owner_name


class OrphanedResourceError(OwnershipError):
    """The pod, or the ReplicaSet owning it, has no owner reference.

    Restarting such a resource would delete it for good instead of
    rolling it, so it is never touched.
    """


class UnsupportedOwnerKindError(OwnershipError):
    """The owner is not a Deployment, DaemonSet or StatefulSet"""


class ClusterAPIError(RestarterError):
    """Base exception for failed Kubernetes API calls.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from the API server (if any).
        resource_type: Kind of the resource involved.
        resource_name: Name of the resource involved.
        namespace: Namespace of the resource (if applicable).
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        resource_type: Optional[str] = None,
        resource_name: Optional[str] = None,
        namespace: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.resource_type = resource_type
        self.resource_name = resource_name
        self.namespace = namespace

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        if self.resource_type and self.resource_name:
            loc = f"[{self.resource_type}/{self.resource_name}"
            if self.namespace:
                loc += f" in {self.namespace}"
            loc += "]"
            parts.append(loc)
        return " ".join(parts)


class FetchError(ClusterAPIError):
    """Reading a single resource failed"""


class UpdateError(ClusterAPIError):
    """Writing a controller back failed (includes 409 conflicts)"""


class NamespaceListError(ClusterAPIError):
    """Listing namespaces failed; the sweep cannot run"""


class PodListError(ClusterAPIError):
    """Listing pods of one namespace failed"""
