from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from ..cluster import KubeClients, api_call
from ..selectors import selector_as_map, format_selector
from ..utils import LOG

TIMESTAMP_FORMAT = "%Y-%m-%d|%H:%M:%S UTC"


def get_pods(kube: KubeClients, namespace: str, deployment: str):
    """Pods currently selected by a deployment's label selector."""
    dep = api_call("get", "deployment", kube.apps.read_namespaced_deployment,
                   name=deployment, namespace=namespace)
    selector = format_selector(selector_as_map(dep.spec.selector))
    resp = api_call("list", "pod", kube.core.list_namespaced_pod,
                    namespace=namespace, label_selector=selector)
    LOG.info("deployment %s/%s selects %d pods (%s)", namespace, deployment, len(resp.items), selector)
    return resp.items


def format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def time_elapsed(timestamp: str, now: Optional[datetime] = None) -> timedelta:
    past = datetime.strptime(timestamp, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    # clock skew between us and the API server can put creation in the future
    return max(now - past, timedelta(0))


def format_lifetime(d: timedelta) -> str:
    """Whole-second duration as hours, minutes and seconds, e.g. 25h30m5s."""
    h, rem = divmod(int(d.total_seconds()), 3600)
    m, s = divmod(rem, 60)
    if h:
        return f"{h}h{m}m{s}s"
    if m:
        return f"{m}m{s}s"
    return f"{s}s"


def get_pod_creation_timestamps(kube: KubeClients, namespace: str, deployment: str) -> Dict[str, str]:
    return {p.metadata.name: format_timestamp(p.metadata.creation_timestamp)
            for p in get_pods(kube, namespace, deployment)}


def get_pod_lifetimes(kube: KubeClients, namespace: str, deployment: str,
                      now: Optional[datetime] = None) -> Dict[str, str]:
    stamps = get_pod_creation_timestamps(kube, namespace, deployment)
    return {name: format_lifetime(time_elapsed(ts, now)) for name, ts in stamps.items()}


def get_pod_logs(kube: KubeClients, namespace: str, deployment: str) -> Dict[str, str]:
    logs = {}
    for pod in get_pods(kube, namespace, deployment):
        name = pod.metadata.name
        logs[name] = api_call("get", "pod/log", kube.core.read_namespaced_pod_log, name=name, namespace=namespace)
    return logs
