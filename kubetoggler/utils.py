import logging, os, sys
from prometheus_client import CollectorRegistry, Counter, Gauge, write_to_textfile

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def env_log_level():
    """LOG_LEVEL from the environment, or None when unset or not a level name."""
    level = os.getenv("LOG_LEVEL", "").upper()
    return level if level in LOG_LEVELS else None


# stdout carries command output, so logs go to stderr
LOG = logging.getLogger("kubetoggler")
logging.basicConfig(stream=sys.stderr, level=env_log_level() or "WARNING",
                    format="%(asctime)s %(levelname)s %(message)s")

REGISTRY = CollectorRegistry()
API_CALLS = Counter('kubetoggler_k8s_api_calls_total', 'kubernetes API calls', ['verb', 'resource'],
                    registry=REGISTRY)
API_ERRORS = Counter('kubetoggler_k8s_api_errors_total', 'failed kubernetes API calls', ['verb', 'resource'],
                     registry=REGISTRY)
SCALE_UPDATES = Counter('kubetoggler_scale_updates_total', 'deployment scale updates', ['namespace', 'deployment'],
                        registry=REGISTRY)
DESIRED = Gauge('kubetoggler_deployment_desired_replicas', 'last observed desired replicas',
                ['namespace', 'deployment'], registry=REGISTRY)


def write_metrics(path: str):
    write_to_textfile(path, REGISTRY)
    LOG.debug("wrote metrics to %s", path)
