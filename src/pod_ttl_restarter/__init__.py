"""
Pod TTL Restarter - Kubernetes workload restarts driven by pod age

A Python application that finds pods older than their TTL annotation and
triggers a rolling restart of the Deployment, DaemonSet or StatefulSet
that owns them.
"""

__version__ = "1.0.0"
__author__ = "Pod TTL Restarter Team"

# Pod or namespace annotation holding the TTL, pod level wins
TTL_ANNOTATION = "restart.k8s.hpa.de/ttl"

# Pod template annotation that forces a rollout (same key as kubectl rollout restart)
RESTARTED_AT_ANNOTATION = "kubectl.kubernetes.io/restartedAt"
