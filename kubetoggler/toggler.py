import argparse, logging, os, sys

from kubernetes.client import ApiException
from pydantic import ValidationError

from .args import parse_args, LABELCTL, TOGGLER
from .cluster import load_clients
from .errors import KubeToggleError
from .models import KubeCmd, ToolCfg, Variant
from .utils import LOG, env_log_level, write_metrics
from .actions import deployments as dep_act, pods as pod_act


def map_lines(m: dict) -> list[str]:
    return [f"{k}: {m[k]}" for k in sorted(m)]


def do_command(cmd: KubeCmd, kube, cfg: ToolCfg) -> list[str]:
    """Run one parsed command and return the lines to print."""
    ns = cmd.namespace
    if cmd.cmd == "getNumWithLabels":
        return [str(dep_act.get_num_with_labels(kube, ns, cmd.labels))]
    if cmd.cmd == "getName":
        return [dep_act.get_single_name(kube, ns, cmd.labels)]
    if cmd.cmd == "getNames":
        return dep_act.get_names_with_labels(kube, ns, cmd.labels)
    if cmd.cmd == "getScale":
        name = dep_act.resolve_single(kube, ns, cmd.labels, cmd.names)
        return [str(dep_act.get_scale(kube, ns, name))]
    if cmd.cmd == "getScales":
        return map_lines(dep_act.get_scales(kube, ns, cmd.labels, cmd.names))
    if cmd.cmd == "setScale":
        name = dep_act.resolve_single(kube, ns, cmd.labels, cmd.names)
        dep_act.set_scale(kube, ns, name, cmd.scale)
        return []
    if cmd.cmd == "setScales":
        dep_act.set_scales(kube, ns, cmd.labels, cmd.names, cmd.scale)
        return []
    if cmd.cmd == "toggleOn":
        dep_act.toggle_on(kube, ns, cmd.labels, cmd.names, cfg.toggle_on_replicas)
        return []
    if cmd.cmd == "toggleOff":
        dep_act.toggle_off(kube, ns, cmd.labels, cmd.names)
        return []
    if cmd.cmd == "reset":
        dep_act.reset(kube, ns, cmd.labels, cmd.names, cfg.toggle_on_replicas)
        return []
    if cmd.cmd in ("getPodTimestamps", "getPodLifetimes", "getPodLogs"):
        name = dep_act.resolve_single(kube, ns, cmd.labels, cmd.names)
        if cmd.cmd == "getPodTimestamps":
            return map_lines(pod_act.get_pod_creation_timestamps(kube, ns, name))
        if cmd.cmd == "getPodLifetimes":
            return map_lines(pod_act.get_pod_lifetimes(kube, ns, name))
        return map_lines(pod_act.get_pod_logs(kube, ns, name))
    raise KubeToggleError(f"unknown command {cmd.cmd}")


def usage(variant: Variant) -> str:
    cmds = ", ".join(sorted(variant.commands))
    return (f"{variant.description}\n"
            f"usage: {variant.name} <command> [key=value ...|name ...] [scale] <namespace>\n"
            f"commands: {cmds}")


def build_parser(variant: Variant) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog=variant.name, description=variant.description)
    ap.add_argument("--config", help="YAML config file (default: $KUBETOGGLER_CONFIG)")
    ap.add_argument("--kubeconfig", help="kubeconfig file (default: $KUBECONFIG or ~/.kube/config)")
    ap.add_argument("--context", help="kubeconfig context to use")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    ap.add_argument("args", nargs=argparse.REMAINDER, help="<command> [targets] [scale] <namespace>")
    return ap


def main(argv=None, variant: Variant = TOGGLER) -> int:
    opts = build_parser(variant).parse_args(argv)
    cfg = None
    try:
        cfg = ToolCfg.load(opts.config or os.getenv("KUBETOGGLER_CONFIG"))
        if opts.verbose:
            LOG.setLevel(logging.DEBUG)
        elif env_log_level() is None:
            LOG.setLevel(cfg.log_level)

        cmd = parse_args(opts.args, variant)
        if cmd.cmd == "empty":
            print(usage(variant))
            return 0
        LOG.debug("running %s", cmd)

        kube = load_clients(opts.kubeconfig or cfg.kubeconfig, opts.context or cfg.context)
        for line in do_command(cmd, kube, cfg):
            print(line)
        return 0
    except (KubeToggleError, ValidationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except ApiException as e:
        print(f"error: kubernetes API returned {e.status} {e.reason}", file=sys.stderr)
        return 1
    finally:
        if cfg is not None and cfg.metrics_textfile:
            try:
                write_metrics(cfg.metrics_textfile)
            except OSError as e:
                LOG.error("cannot write metrics to %s: %s", cfg.metrics_textfile, e)


def cli():
    sys.exit(main())


def labelctl_cli():
    sys.exit(main(variant=LABELCTL))


if __name__ == "__main__":
    cli()
