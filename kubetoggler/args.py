"""Turn a flat argument list into a KubeCmd.

Every command takes its targets first and the namespace last:

    getNumWithLabels key=value [key=value ...] <namespace>
    setScale <labels|names> <scale> <namespace>
    getPodLogs <name|key=value> <namespace>
"""
from typing import Dict, Optional, Sequence, Tuple

from .errors import ArgumentError
from .models import KubeCmd, Variant, MAX_SCALE

ALIASES = {"getNumWithLabel": "getNumWithLabels"}

LABEL_COMMANDS = {"getNumWithLabels", "getName", "getNames"}
TARGET_COMMANDS = {"getScale", "getScales", "toggleOn", "toggleOff", "reset"}
SCALE_COMMANDS = {"setScale", "setScales"}
POD_COMMANDS = {"getPodTimestamps", "getPodLifetimes", "getPodLogs"}

LABELCTL = Variant(
    name="kubelabelctl",
    description="Retrieve Kubernetes deployments by their labels and get or set their scale.",
    commands=frozenset(LABEL_COMMANDS | {"getScale", "getScales"} | SCALE_COMMANDS),
    allow_names=False,
)
TOGGLER = Variant(
    name="kubetoggler",
    description="Target Kubernetes deployments by labels or names and retrieve or modify their attributes.",
    commands=frozenset(LABEL_COMMANDS | TARGET_COMMANDS | SCALE_COMMANDS | POD_COMMANDS),
)


def split_labels(tokens: Sequence[str]) -> Dict[str, str]:
    labels = {}
    for tok in tokens:
        key, sep, val = tok.partition("=")
        if not sep or not key or not val:
            raise ArgumentError(f"invalid label argument {tok!r}, expected key=value")
        labels[key] = val
    return labels


def is_label_form(tokens: Sequence[str]) -> bool:
    """True for all ``key=value`` tokens, False for all plain names.

    Mixed forms, empty input and tokens with nothing on one side of ``=``
    are rejected.
    """
    if not tokens:
        raise ArgumentError("no deployment labels or names given")
    with_sep = 0
    for tok in tokens:
        if "=" not in tok:
            continue
        if tok.startswith("=") or tok.endswith("="):
            raise ArgumentError(f"invalid label argument {tok!r}, expected key=value")
        with_sep += 1
    if with_sep == len(tokens):
        return True
    if with_sep == 0:
        return False
    raise ArgumentError("arguments must be either labels or names, not both")


def parse_targets(tokens: Sequence[str], allow_names: bool = True) -> Tuple[Optional[Dict[str, str]], Optional[list[str]]]:
    if is_label_form(tokens):
        return split_labels(tokens), None
    if not allow_names:
        raise ArgumentError("deployments can only be targeted by key=value labels")
    return None, list(tokens)


def parse_scale(token: str) -> int:
    try:
        scale = int(token, 10)
    except ValueError:
        raise ArgumentError(f"invalid scale {token!r}, expected a whole number") from None
    if not 0 <= scale <= MAX_SCALE:
        raise ArgumentError(f"scale {scale} out of range 0..{MAX_SCALE}")
    return scale


def parse_args(argv: Sequence[str], variant: Variant = TOGGLER) -> KubeCmd:
    if not argv:
        return KubeCmd(cmd="empty")
    cmd = ALIASES.get(argv[0], argv[0])
    rest = list(argv[1:])
    if cmd not in variant.commands:
        raise ArgumentError(f"{variant.name}: unknown command {argv[0]!r}")
    # names, label keys and namespaces never start with "-"
    for tok in rest:
        if tok.startswith("-"):
            raise ArgumentError(f"unexpected option {tok!r} after {cmd}, options must come before the command")

    if cmd in LABEL_COMMANDS:
        if len(rest) < 2:
            raise ArgumentError(f"{cmd} needs at least one key=value label and a namespace")
        if not is_label_form(rest[:-1]):
            raise ArgumentError(f"{cmd} only accepts key=value labels")
        return KubeCmd(cmd=cmd, labels=split_labels(rest[:-1]), namespace=rest[-1])

    if cmd in TARGET_COMMANDS:
        if len(rest) < 2:
            raise ArgumentError(f"{cmd} needs at least one deployment target and a namespace")
        labels, names = parse_targets(rest[:-1], variant.allow_names)
        return KubeCmd(cmd=cmd, labels=labels, names=names, namespace=rest[-1])

    if cmd in SCALE_COMMANDS:
        if len(rest) < 3:
            raise ArgumentError(f"{cmd} needs at least one deployment target, a scale and a namespace")
        labels, names = parse_targets(rest[:-2], variant.allow_names)
        return KubeCmd(cmd=cmd, labels=labels, names=names, scale=parse_scale(rest[-2]), namespace=rest[-1])

    # pod commands: one deployment, one namespace
    if len(rest) != 2:
        raise ArgumentError(f"{cmd} needs exactly one deployment name or label and a namespace")
    labels, names = parse_targets(rest[:1], variant.allow_names)
    return KubeCmd(cmd=cmd, labels=labels, names=names, namespace=rest[-1])
