"""Kubernetes client helpers shared by discovery and the adapters."""

import asyncio
import functools
import logging

import kubernetes
from kubernetes import config

logger = logging.getLogger(__name__)

_config_loaded = False


def load_kubernetes_config() -> None:
    """Load in-cluster config, falling back to the local kubeconfig."""
    global _config_loaded
    if _config_loaded:
        return
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
    except kubernetes.config.ConfigException:
        config.load_kube_config()
        logger.info("Loaded Kubernetes configuration from kubeconfig")
    _config_loaded = True


async def run_sync(func, *args, **kwargs):
    """Run a blocking client call in the default executor."""
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


def api_status(error: BaseException):
    """HTTP status of a kubernetes ApiException, or None for other errors."""
    if isinstance(error, kubernetes.client.rest.ApiException):
        return error.status
    return None
