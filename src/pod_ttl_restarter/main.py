#!/usr/bin/env python3
"""
Pod TTL Restarter - Main Application
"""

import logging
import time

from pod_ttl_restarter.config import config
from pod_ttl_restarter.exceptions import NamespaceListError
from pod_ttl_restarter.logger import RestarterLogger, setup_logging


def build_sweeper(cfg):
    from pod_ttl_restarter.kubernetes_client import KubernetesClient
    from pod_ttl_restarter.sweeper import Sweeper

    k8s_client = KubernetesClient(
        request_timeout=cfg.request_timeout_seconds,
        kube_config_path=cfg.kube_config_path,
        in_cluster=cfg.in_cluster,
    )
    if not k8s_client.test_connection():
        logging.getLogger('main').warning("Kubernetes connection test failed, sweeping anyway")
    return Sweeper(k8s_client, cfg)


def run_once(sweeper, logger):
    try:
        sweeper.run_sweep()
    except NamespaceListError as e:
        logger.error(f"Sweep aborted: {e}")
        return False
    return True


def main(cfg=None):
    """Main application entry point"""
    cfg = cfg or config
    setup_logging(cfg.log_level, cfg.log_format)
    logger = logging.getLogger('main')
    RestarterLogger().log_startup(cfg.as_dict())

    if cfg.dry_run:
        logger.info("Running in DRY RUN mode - no controller will be updated")

    try:
        sweeper = build_sweeper(cfg)
    except Exception as e:
        logger.error(f"Application failed to start: {e}")
        return 1

    if not cfg.run_interval_minutes:
        logger.info("Running a single sweep")
        return 0 if run_once(sweeper, logger) else 1

    logger.info(f"Starting main loop ({cfg.run_interval_minutes} minute intervals)")
    interval = cfg.run_interval_minutes * 60
    sweep_count = 0
    ok = True
    try:
        while True:
            sweep_count += 1
            logger.info(f"Starting sweep #{sweep_count}")
            ok = run_once(sweeper, logger)
            logger.info(f"Waiting {cfg.run_interval_minutes} minutes until next sweep...")
            time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down...")

    return 0 if ok else 1


if __name__ == "__main__":
    exit(main())
