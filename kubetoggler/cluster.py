"""
Kubernetes client helper.

- Prefers the local kubeconfig (KUBECONFIG, then ~/.kube/config).
- Falls back to in-cluster configuration when running inside a pod.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import yaml
from kubernetes import client, config
from kubernetes.client import ApiException
from kubernetes.config.config_exception import ConfigException

from .errors import ClusterConfigError
from .utils import LOG, API_CALLS, API_ERRORS


@dataclass(frozen=True)
class KubeClients:
    apps: client.AppsV1Api
    core: client.CoreV1Api


def load_clients(kubeconfig: Optional[str] = None, context: Optional[str] = None) -> KubeClients:
    """Create API clients, loading kubeconfig once per invocation."""
    try:
        config.load_kube_config(config_file=kubeconfig, context=context)
        LOG.debug("Loaded kubeconfig %s (context=%s)", kubeconfig or "from default locations", context or "current")
    except (yaml.YAMLError, OSError) as e:
        raise ClusterConfigError(f"cannot read kubeconfig: {e}") from e
    except ConfigException as e:
        if kubeconfig or "KUBERNETES_SERVICE_HOST" not in os.environ:
            raise ClusterConfigError(f"cannot load kubeconfig: {e}") from e
        LOG.info("No kubeconfig found, trying in-cluster configuration")
        try:
            config.load_incluster_config()
        except ConfigException as e2:
            raise ClusterConfigError(f"cannot load in-cluster config: {e2}") from e2

    return KubeClients(apps=client.AppsV1Api(), core=client.CoreV1Api())


def api_call(verb: str, resource: str, fn, *args, **kwargs):
    """Run one API call, counting it and any ApiException it raises."""
    API_CALLS.labels(verb, resource).inc()
    try:
        return fn(*args, **kwargs)
    except ApiException as e:
        API_ERRORS.labels(verb, resource).inc()
        LOG.error("%s %s failed: %s %s", verb, resource, e.status, e.reason)
        raise
