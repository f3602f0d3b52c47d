"""
Sweep metrics for Prometheus, optionally pushed to a Pushgateway
"""

import logging

import requests
from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

logger = logging.getLogger(__name__)


class SweepMetrics:
    """Prometheus counters for restarts, skips and errors.

    Each instance owns its registry, so several sweepers (or tests) never
    collide on metric registration.
    """

    def __init__(self, pushgateway_url=None, job_name="pod_ttl_restarter",
                 cluster_name="unknown", registry=None):
        self.pushgateway_url = pushgateway_url
        self.job_name = job_name
        self.cluster_name = cluster_name
        self.registry = registry or CollectorRegistry()

        self.restarts = Counter(
            'pod_ttl_restarter_restarts_total',
            'Controllers restarted because a pod outlived its TTL',
            ['cluster', 'namespace', 'kind'],
            registry=self.registry,
        )
        self.skips = Counter(
            'pod_ttl_restarter_skipped_pods_total',
            'Pods skipped during a sweep',
            ['cluster', 'reason'],
            registry=self.registry,
        )
        self.errors = Counter(
            'pod_ttl_restarter_errors_total',
            'Failed cluster API calls and invalid annotations',
            ['cluster', 'stage'],
            registry=self.registry,
        )
        self.pods_checked = Counter(
            'pod_ttl_restarter_pods_checked_total',
            'Pods evaluated by sweeps',
            ['cluster'],
            registry=self.registry,
        )
        self.last_sweep_timestamp = Gauge(
            'pod_ttl_restarter_last_sweep_timestamp_seconds',
            'Unix time the last sweep finished',
            ['cluster'],
            registry=self.registry,
        )
        self.last_sweep_duration = Gauge(
            'pod_ttl_restarter_last_sweep_duration_seconds',
            'Duration of the last sweep',
            ['cluster'],
            registry=self.registry,
        )

    def record_restart(self, target):
        self.restarts.labels(cluster=self.cluster_name, namespace=target.namespace,
                             kind=target.kind.value).inc()

    def record_skip(self, reason):
        self.skips.labels(cluster=self.cluster_name, reason=reason).inc()

    def record_error(self, stage):
        self.errors.labels(cluster=self.cluster_name, stage=stage).inc()

    def record_pod_checked(self):
        self.pods_checked.labels(cluster=self.cluster_name).inc()

    def record_sweep(self, result):
        self.last_sweep_duration.labels(cluster=self.cluster_name).set(result.duration_seconds)
        if result.finished_at is not None:
            self.last_sweep_timestamp.labels(cluster=self.cluster_name).set(
                result.finished_at.timestamp())

    def push(self):
        """Push the registry to the Pushgateway if one is configured.

        Returns True when metrics were pushed. Failures are logged and
        reported as False; they never fail the sweep.
        """
        if not self.pushgateway_url:
            return False

        url = f"{self.pushgateway_url.rstrip('/')}/metrics/job/{self.job_name}"
        try:
            response = requests.put(url, data=generate_latest(self.registry), timeout=10)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to push metrics to Pushgateway: {e}")
            return False

        logger.debug(f"Pushed sweep metrics to {url}")
        return True
