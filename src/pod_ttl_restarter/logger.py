"""
Logging configuration for Pod TTL Restarter
"""

import logging
import sys
from typing import Any, Dict, Optional
import structlog
from colorama import init as colorama_init

from pod_ttl_restarter import __version__
from pod_ttl_restarter.config import config


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Setup structured logging for the application"""
    log_level = log_level or config.log_level
    log_format = log_format or config.log_format

    if log_format != "json":
        # Initialize colorama for cross-platform colored output
        colorama_init()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if log_format == "json"
            else structlog.dev.ConsoleRenderer(colors=True)
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    # Suppress verbose kubernetes client logs
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)


def _seconds(value) -> Optional[int]:
    if value is None:
        return None
    return int(value.total_seconds())


class RestarterLogger:
    """Audit logger: one event per sweep, restart, skip and error"""

    def __init__(self):
        self.logger = get_logger("pod-ttl-restarter")

    def log_startup(self, config_dict: Dict[str, Any]) -> None:
        self.logger.info(
            "Pod TTL Restarter starting up",
            version=__version__,
            config=config_dict
        )

    def log_sweep_start(self, sweep_id: str, dry_run: bool) -> None:
        self.logger.info("Starting sweep", sweep_id=sweep_id, dry_run=dry_run)

    def log_sweep_end(self, sweep_id: str, result) -> None:
        self.logger.info(
            "Sweep completed",
            sweep_id=sweep_id,
            namespaces_processed=result.namespaces_processed,
            namespaces_failed=result.namespaces_failed,
            pods_checked=result.pods_checked,
            restarted=[str(target) for target in result.restarted],
            skipped=dict(result.skipped),
            errors=dict(result.errors),
            duration_seconds=round(result.duration_seconds, 3),
            dry_run=result.dry_run,
        )

    def log_restart(self, target, pod, age, ttl, restarted_at: str,
                    dry_run: bool = False) -> None:
        self.logger.info(
            "Controller restarted" if not dry_run else "Controller restart planned (dry run)",
            namespace=target.namespace,
            owner_kind=target.kind.value,
            owner_name=target.name,
            pod_name=pod.name,
            age_seconds=_seconds(age),
            ttl=ttl.raw,
            ttl_source=ttl.source,
            restarted_at=restarted_at,
        )

    def log_pod_skipped(self, namespace: str, pod_name: str, reason: str,
                        level: str = "info", **context) -> None:
        """Log when a pod is skipped"""
        getattr(self.logger, level)(
            "Pod skipped",
            namespace=namespace,
            pod_name=pod_name,
            reason=reason,
            **context
        )

    def log_namespace_failed(self, namespace: str, error: Exception) -> None:
        self.logger.error(
            "Namespace skipped",
            namespace=namespace,
            error=str(error),
            error_type=type(error).__name__,
        )

    def log_error(self, error: Exception, context: str = None, **kwargs) -> None:
        """Log errors with context"""
        self.logger.error(
            "Error occurred",
            error=str(error),
            error_type=type(error).__name__,
            context=context,
            **kwargs
        )
