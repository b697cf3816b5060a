from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict
import yaml

from .errors import ConfigError
from .utils import LOG_LEVELS

MAX_SCALE = 2**31 - 1


class KubeCmd(BaseModel):
    cmd: str
    labels: Optional[Dict[str, str]] = None
    names: Optional[list[str]] = None
    scale: Optional[int] = Field(default=None, ge=0, le=MAX_SCALE)
    namespace: str = ""


class Variant(BaseModel):
    """A command-line tool built on the shared commands.

    ``commands`` lists the canonical command names the tool accepts;
    ``allow_names`` controls whether deployments may be targeted by name
    instead of by labels.
    """
    name: str
    description: str
    commands: frozenset[str]
    allow_names: bool = True


class ToolCfg(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kubeconfig: Optional[str] = None
    context: Optional[str] = None
    toggle_on_replicas: int = Field(default=1, ge=1, le=MAX_SCALE)
    metrics_textfile: Optional[str] = None
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"unknown log level {v}")
        return v.upper()

    @classmethod
    def load(cls, path: Optional[str]) -> "ToolCfg":
        if not path:
            return cls()
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot read config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"config {path} must be a mapping")
        return cls(**data)
