"""
Rolling restarts by pod template annotation.

Setting kubectl.kubernetes.io/restartedAt on the pod template makes the
controller replace its pods under its normal rollout strategy, which is
what ``kubectl rollout restart`` does. Nothing is created or deleted.
"""

import logging
from datetime import datetime, timezone

from kubernetes import client

from pod_ttl_restarter import RESTARTED_AT_ANNOTATION

logger = logging.getLogger(__name__)

RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utc_now():
    return datetime.now(timezone.utc)


def format_restarted_at(moment):
    """Format a datetime as an RFC 3339 UTC timestamp"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(RFC3339_FORMAT)


class RestartExecutor:
    """Marks controllers for a rolling restart"""

    def __init__(self, k8s_client, clock=utc_now, dry_run=False):
        self.k8s_client = k8s_client
        self.clock = clock
        self.dry_run = dry_run

    def restart(self, target):
        """Stamp target's pod template and write it back.

        Returns the timestamp written. Raises FetchError when the controller
        cannot be read and UpdateError when the write is rejected, including
        conflicts with a concurrent change.
        """
        controller = self.k8s_client.get_controller(target)

        template = controller.spec.template
        if template.metadata is None:
            template.metadata = client.V1ObjectMeta()
        if template.metadata.annotations is None:
            template.metadata.annotations = {}

        restarted_at = format_restarted_at(self.clock())
        template.metadata.annotations[RESTARTED_AT_ANNOTATION] = restarted_at

        if self.dry_run:
            logger.info(f"DRY RUN - would restart {target} at {restarted_at}")
            return restarted_at

        self.k8s_client.replace_controller(target, controller)
        logger.info(f"Restarted {target} at {restarted_at}")
        return restarted_at
