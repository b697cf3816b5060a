from typing import Dict, Optional

from ..cluster import KubeClients, api_call
from ..errors import ArgumentError, DeploymentNotFound, AmbiguousDeployment
from ..selectors import is_subset
from ..utils import LOG, DESIRED, SCALE_UPDATES


def list_deployments(kube: KubeClients, namespace: str):
    resp = api_call("list", "deployment", kube.apps.list_namespaced_deployment, namespace=namespace)
    LOG.info("listed %d deployments in %s", len(resp.items), namespace)
    return resp.items


def _matching_names(kube: KubeClients, namespace: str, labels: Dict[str, str]) -> list[str]:
    return [d.metadata.name for d in list_deployments(kube, namespace) if is_subset(labels, d.metadata.labels)]


def get_num_with_labels(kube: KubeClients, namespace: str, labels: Dict[str, str]) -> int:
    return len(_matching_names(kube, namespace, labels))


def get_names_with_labels(kube: KubeClients, namespace: str, labels: Dict[str, str]) -> list[str]:
    names = _matching_names(kube, namespace, labels)
    if not names:
        raise DeploymentNotFound(namespace, labels)
    return names


def get_single_name(kube: KubeClients, namespace: str, labels: Dict[str, str]) -> str:
    names = get_names_with_labels(kube, namespace, labels)
    if len(names) > 1:
        raise AmbiguousDeployment(namespace, labels, names)
    return names[0]


def resolve_names(kube: KubeClients, namespace: str,
                  labels: Optional[Dict[str, str]], names: Optional[list[str]]) -> list[str]:
    # explicit names win over labels
    if names is None and labels is None:
        raise ArgumentError("there must be at least one targeting field (either names or labels)")
    if names is not None:
        return names
    return get_names_with_labels(kube, namespace, labels)


def resolve_single(kube: KubeClients, namespace: str,
                   labels: Optional[Dict[str, str]], names: Optional[list[str]]) -> str:
    if names is not None:
        if len(names) != 1:
            raise ArgumentError(f"expected exactly one deployment name, got {len(names)}")
        return names[0]
    if labels is None:
        raise ArgumentError("there must be at least one targeting field (either names or labels)")
    return get_single_name(kube, namespace, labels)


def get_scale(kube: KubeClients, namespace: str, name: str) -> int:
    sc = api_call("get", "deployment/scale", kube.apps.read_namespaced_deployment_scale,
                  name=name, namespace=namespace)
    cur = int(sc.spec.replicas or 0)
    DESIRED.labels(namespace, name).set(cur)
    return cur


def get_scales(kube: KubeClients, namespace: str,
               labels: Optional[Dict[str, str]], names: Optional[list[str]]) -> Dict[str, int]:
    return {n: get_scale(kube, namespace, n) for n in resolve_names(kube, namespace, labels, names)}


def set_scale(kube: KubeClients, namespace: str, name: str, replicas: int):
    sc = api_call("get", "deployment/scale", kube.apps.read_namespaced_deployment_scale,
                  name=name, namespace=namespace)
    cur = sc.spec.replicas
    sc.spec.replicas = replicas
    updated = api_call("update", "deployment/scale", kube.apps.replace_namespaced_deployment_scale,
                       name=name, namespace=namespace, body=sc)
    SCALE_UPDATES.labels(namespace, name).inc()
    DESIRED.labels(namespace, name).set(replicas)
    LOG.info("scaled %s/%s from %s to %d", namespace, name, cur, replicas)
    return updated


def set_scales(kube: KubeClients, namespace: str,
               labels: Optional[Dict[str, str]], names: Optional[list[str]], replicas: int) -> list:
    return [set_scale(kube, namespace, n, replicas) for n in resolve_names(kube, namespace, labels, names)]


def toggle_on(kube, namespace, labels, names, replicas: int = 1):
    return set_scales(kube, namespace, labels, names, replicas)


def toggle_off(kube, namespace, labels, names):
    return set_scales(kube, namespace, labels, names, 0)


def reset(kube, namespace, labels, names, replicas: int = 1):
    toggle_off(kube, namespace, labels, names)
    return toggle_on(kube, namespace, labels, names, replicas)
