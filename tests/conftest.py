from datetime import datetime, timezone

import pytest
from kubernetes import client
from kubernetes.client import ApiException

from kubetoggler.cluster import KubeClients
from kubetoggler.selectors import is_subset


def make_deployment(name, namespace, labels, replicas, selector=None):
    return client.V1Deployment(
        metadata=client.V1ObjectMeta(name=name, namespace=namespace, labels=labels),
        spec=client.V1DeploymentSpec(
            replicas=replicas,
            selector=selector or client.V1LabelSelector(match_labels={"app": name}),
            template=client.V1PodTemplateSpec(),
        ),
    )


def make_pod(name, namespace, labels, created):
    return client.V1Pod(metadata=client.V1ObjectMeta(
        name=name, namespace=namespace, labels=labels, creation_timestamp=created))


class FakeAppsApi:
    """In-memory stand-in for AppsV1Api covering the calls the tools make."""

    def __init__(self):
        self.deployments = {}
        self.scale_updates = []

    def add(self, dep):
        self.deployments[(dep.metadata.namespace, dep.metadata.name)] = dep

    def _get(self, name, namespace):
        try:
            return self.deployments[(namespace, name)]
        except KeyError:
            raise ApiException(status=404, reason="Not Found") from None

    def list_namespaced_deployment(self, namespace, **kwargs):
        items = [d for (ns, _), d in self.deployments.items() if ns == namespace]
        return client.V1DeploymentList(items=items)

    def read_namespaced_deployment(self, name, namespace, **kwargs):
        return self._get(name, namespace)

    def read_namespaced_deployment_scale(self, name, namespace, **kwargs):
        dep = self._get(name, namespace)
        return client.V1Scale(
            metadata=client.V1ObjectMeta(name=name, namespace=namespace),
            spec=client.V1ScaleSpec(replicas=dep.spec.replicas),
        )

    def replace_namespaced_deployment_scale(self, name, namespace, body, **kwargs):
        dep = self._get(name, namespace)
        dep.spec.replicas = body.spec.replicas
        self.scale_updates.append((name, body.spec.replicas))
        return body


class FakeCoreApi:
    def __init__(self):
        self.pods = []
        self.logs = {}
        self.selectors = []

    def list_namespaced_pod(self, namespace, label_selector="", **kwargs):
        self.selectors.append(label_selector)
        wanted = dict(part.split("=", 1) for part in label_selector.split(",") if part)
        items = [p for p in self.pods
                 if p.metadata.namespace == namespace and is_subset(wanted, p.metadata.labels)]
        return client.V1PodList(items=items)

    def read_namespaced_pod_log(self, name, namespace, **kwargs):
        return self.logs.get(name, "")


@pytest.fixture
def kube():
    """One deployment d1 in ns labelled a=1 with 2 replicas."""
    apps, core = FakeAppsApi(), FakeCoreApi()
    apps.add(make_deployment("d1", "ns", {"a": "1"}, 2))
    return KubeClients(apps=apps, core=core)


@pytest.fixture
def busy_kube(kube):
    """Adds a second a=1 deployment, an unrelated one, and pods for d1."""
    kube.apps.add(make_deployment("d2", "ns", {"a": "1", "tier": "web"}, 3))
    kube.apps.add(make_deployment("other", "ns", {"a": "2"}, 1))
    kube.apps.add(make_deployment("d1", "elsewhere", {"a": "1"}, 4))
    created = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
    kube.core.pods = [
        make_pod("d1-abc", "ns", {"app": "d1"}, created),
        make_pod("d1-def", "ns", {"app": "d1", "extra": "x"}, created.replace(hour=13)),
        make_pod("d2-xyz", "ns", {"app": "d2"}, created),
    ]
    kube.core.logs = {"d1-abc": "hello\n", "d1-def": "world\n"}
    return kube
