import logging
import uuid

from pod_ttl_restarter.config import config as default_config
from pod_ttl_restarter.exceptions import (
    FetchError,
    InvalidTTLFormatError,
    NamespaceListError,
    OrphanedResourceError,
    PodListError,
    UnsupportedOwnerKindError,
    UpdateError,
)
from pod_ttl_restarter.logger import RestarterLogger
from pod_ttl_restarter.models import RestartMemo, SweepResult
from pod_ttl_restarter.notifications import SweepMetrics
from pod_ttl_restarter.ownership import OwnershipResolver
from pod_ttl_restarter.restarter import RestartExecutor, utc_now
from pod_ttl_restarter.ttl import is_expired, pod_age, resolve_ttl

logger = logging.getLogger(__name__)


class Sweeper:
    """Runs sweeps: namespaces -> pods -> TTL -> owner -> dedup -> restart.

    A sweep is strictly sequential. Its RestartMemo lives only for the
    duration of run_sweep, so consecutive sweeps share no state.
    """

    def __init__(self, k8s_client, cfg=None, clock=utc_now, metrics=None, audit=None):
        self.cfg = cfg or default_config
        self.k8s_client = k8s_client
        self.clock = clock
        self.ownership = OwnershipResolver(k8s_client)
        self.executor = RestartExecutor(k8s_client, clock=clock, dry_run=self.cfg.dry_run)
        self.metrics = metrics or SweepMetrics(
            pushgateway_url=self.cfg.pushgateway_url,
            job_name=self.cfg.prometheus_job_name,
            cluster_name=self.cfg.cluster_name,
        )
        self.audit = audit or RestarterLogger()

    def run_sweep(self):
        """Run one sweep over all selected namespaces.

        Raises NamespaceListError if namespaces cannot be listed; every
        other failure is contained to its namespace or pod.
        """
        sweep_id = uuid.uuid4().hex[:8]
        now = self.clock()
        result = SweepResult(started_at=now, dry_run=self.cfg.dry_run)
        memo = RestartMemo(self.cfg.dedup_mode)
        self.audit.log_sweep_start(sweep_id, self.cfg.dry_run)

        try:
            namespaces = self._select_namespaces(result)
        except NamespaceListError as e:
            self.audit.log_error(e, context="list_namespaces", sweep_id=sweep_id)
            self.metrics.record_error("list_namespaces")
            self.metrics.push()
            raise

        for namespace in namespaces:
            self._sweep_namespace(namespace, now, memo, result)

        result.finished_at = self.clock()
        self.audit.log_sweep_end(sweep_id, result)
        self.metrics.record_sweep(result)
        self.metrics.push()
        return result

    def _select_namespaces(self, result):
        if self.cfg.namespaces:
            namespaces = []
            for name in self.cfg.namespaces:
                try:
                    namespaces.append(self.k8s_client.get_namespace(name))
                except FetchError as e:
                    self._namespace_failed(name, e, result, stage="get_namespace")
        else:
            namespaces = self.k8s_client.list_namespaces()

        excluded = set(self.cfg.excluded_namespaces)
        selected = [ns for ns in namespaces if ns.name not in excluded]
        logger.info(f"Sweeping {len(selected)} namespaces "
                    f"({len(namespaces) - len(selected)} excluded)")
        return selected

    def _namespace_failed(self, name, error, result, stage):
        self.audit.log_namespace_failed(name, error)
        self.metrics.record_error(stage)
        result.namespaces_failed.append(name)
        result.errors[stage] += 1

    def _sweep_namespace(self, namespace, now, memo, result):
        try:
            pods = self.k8s_client.list_pods(namespace.name)
        except PodListError as e:
            self._namespace_failed(namespace.name, e, result, stage="list_pods")
            return

        result.namespaces_processed += 1
        for pod in pods:
            self._sweep_pod(pod, namespace, now, memo, result)

    def _skip(self, result, pod, reason, level="info", **context):
        result.skipped[reason] += 1
        self.metrics.record_skip(reason)
        self.audit.log_pod_skipped(pod.namespace, pod.name, reason, level=level, **context)

    def _error(self, result, stage):
        result.errors[stage] += 1
        self.metrics.record_error(stage)

    def _sweep_pod(self, pod, namespace, now, memo, result):
        result.pods_checked += 1
        self.metrics.record_pod_checked()

        try:
            self._process_pod(pod, namespace, now, memo, result)
        except Exception as e:
            # one broken pod must not end the sweep
            self._error(result, "pod")
            self.audit.log_error(e, context="pod", namespace=pod.namespace,
                                 pod_name=pod.name, exc_info=True)

    def _process_pod(self, pod, namespace, now, memo, result):
        try:
            ttl = resolve_ttl(pod.annotations, namespace.annotations)
        except InvalidTTLFormatError as e:
            self._error(result, "resolve_ttl")
            self._skip(result, pod, "invalid_ttl", level="warning",
                       ttl=e.value, ttl_source=e.source)
            return

        if ttl is None:
            self._skip(result, pod, "no_ttl", level="debug")
            return

        age = pod_age(now, pod.creation_timestamp) if pod.creation_timestamp else None
        context = {
            "age_seconds": int(age.total_seconds()) if age is not None else None,
            "ttl": ttl.raw,
            "ttl_source": ttl.source,
        }

        if not is_expired(now, pod.creation_timestamp, ttl.duration,
                          inclusive=self.cfg.expiry_inclusive):
            self._skip(result, pod, "not_expired", level="debug", **context)
            return

        try:
            current = self.k8s_client.get_pod(pod.namespace, pod.name)
            target = self.ownership.resolve(current)
        except OrphanedResourceError as e:
            self._skip(result, pod, "orphaned", level="warning",
                       owner_kind=e.owner_kind, owner_name=e.owner_name, **context)
            return
        except UnsupportedOwnerKindError as e:
            self._skip(result, pod, "unsupported_owner_kind", level="debug",
                       owner_kind=e.owner_kind, owner_name=e.owner_name, **context)
            return
        except FetchError as e:
            self._error(result, "resolve_owner")
            self._skip(result, pod, "owner_lookup_failed", level="warning",
                       error=str(e), **context)
            return

        if memo.should_skip(target.namespace, target.name, target.kind):
            self._skip(result, pod, "already_restarted", level="info",
                       owner_kind=target.kind.value, owner_name=target.name, **context)
            return

        try:
            restarted_at = self.executor.restart(target)
        except (FetchError, UpdateError) as e:
            self._error(result, "restart")
            self.audit.log_error(e, context="restart", namespace=pod.namespace,
                                 pod_name=pod.name, owner_kind=target.kind.value,
                                 owner_name=target.name)
            return

        memo.record(target.namespace, target.name, target.kind)
        result.restarted.append(target)
        self.metrics.record_restart(target)
        self.audit.log_restart(target, pod, age, ttl, restarted_at, dry_run=self.cfg.dry_run)
