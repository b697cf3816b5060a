class KubeToggleError(Exception): ...


class ArgumentError(KubeToggleError): ...


class ConfigError(KubeToggleError): ...


class ClusterConfigError(KubeToggleError): ...


class SelectorError(KubeToggleError): ...


class DeploymentNotFound(KubeToggleError):
    def __init__(self, namespace: str, labels: dict):
        super().__init__(f"no deployment in namespace {namespace!r} matches labels {labels}")
        self.namespace = namespace; self.labels = labels


class AmbiguousDeployment(KubeToggleError):
    def __init__(self, namespace: str, labels: dict, names: list[str]):
        super().__init__(
            f"{len(names)} deployments in namespace {namespace!r} match labels {labels}: {', '.join(names)}"
        )
        self.namespace = namespace; self.labels = labels; self.names = names
