"""
Configuration management for Pod TTL Restarter
"""

import os
from typing import List, Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

from pod_ttl_restarter.models import DedupMode

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).strip().lower() == "true"


def _env_list(name: str) -> Optional[List[str]]:
    value = os.getenv(name)
    if not value:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Config:
    """Configuration class for Pod TTL Restarter"""

    # Kubernetes configuration
    kube_config_path: Optional[str] = None
    in_cluster: bool = True
    request_timeout_seconds: int = 30

    # Namespace configuration; an empty include list means every namespace
    namespaces: List[str] = field(default_factory=list)
    excluded_namespaces: List[str] = field(default_factory=list)

    # Sweep behaviour
    dry_run: bool = False
    dedup_mode: str = DedupMode.SWEEP.value
    expiry_inclusive: bool = True

    # Scheduling configuration, 0 runs a single sweep
    run_interval_minutes: int = 0

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"

    # Prometheus
    pushgateway_url: Optional[str] = None
    prometheus_job_name: str = "pod_ttl_restarter"
    cluster_name: str = "unknown"

    @classmethod
    def from_env(cls) -> "Config":
        """Build a configuration, letting environment variables override defaults"""
        cfg = cls()
        cfg.kube_config_path = os.getenv("KUBE_CONFIG_PATH", cfg.kube_config_path)
        cfg.in_cluster = _env_bool("IN_CLUSTER", cfg.in_cluster)
        cfg.request_timeout_seconds = int(
            os.getenv("REQUEST_TIMEOUT_SECONDS", cfg.request_timeout_seconds))

        cfg.namespaces = _env_list("NAMESPACES") or cfg.namespaces
        cfg.excluded_namespaces = _env_list("EXCLUDED_NAMESPACES") or cfg.excluded_namespaces

        cfg.dry_run = _env_bool("DRY_RUN", cfg.dry_run)
        cfg.dedup_mode = os.getenv("DEDUP_MODE", cfg.dedup_mode).strip().lower()
        cfg.expiry_inclusive = _env_bool("EXPIRY_INCLUSIVE", cfg.expiry_inclusive)

        cfg.run_interval_minutes = int(os.getenv("RUN_INTERVAL_MINUTES", cfg.run_interval_minutes))

        cfg.log_level = os.getenv("LOG_LEVEL", cfg.log_level)
        cfg.log_format = os.getenv("LOG_FORMAT", cfg.log_format)

        cfg.pushgateway_url = os.getenv("PROMETHEUS_PUSHGATEWAY_URL", cfg.pushgateway_url)
        cfg.prometheus_job_name = os.getenv("PROMETHEUS_JOB_NAME", cfg.prometheus_job_name)
        cfg.cluster_name = os.getenv("CLUSTER_NAME", cfg.cluster_name)

        cfg.validate()
        return cfg

    def validate(self) -> None:
        # raises ValueError for unknown modes
        DedupMode(self.dedup_mode)
        if self.run_interval_minutes < 0:
            raise ValueError("RUN_INTERVAL_MINUTES must not be negative")
        if self.request_timeout_seconds <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be positive")

    def as_dict(self) -> dict:
        """Settings safe to log at startup"""
        return {
            "namespaces": self.namespaces or "all",
            "excluded_namespaces": self.excluded_namespaces,
            "dry_run": self.dry_run,
            "dedup_mode": self.dedup_mode,
            "expiry_inclusive": self.expiry_inclusive,
            "run_interval_minutes": self.run_interval_minutes,
            "pushgateway": bool(self.pushgateway_url),
        }


# Global configuration instance
config = Config.from_env()
