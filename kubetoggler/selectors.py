from typing import Dict, Optional

from .errors import SelectorError


def is_subset(query: Dict[str, str], target: Optional[Dict[str, str]]) -> bool:
    """True if every key/value pair of ``query`` is present in ``target``.

    An empty query matches any target, including one with no labels at all.
    """
    target = target or {}
    for key, val in query.items():
        if key not in target or target[key] != val:
            return False
    return True


def selector_as_map(selector) -> Dict[str, str]:
    """Flatten a V1LabelSelector into a plain label map.

    Only matchLabels and single-valued ``In`` expressions have a map form;
    any other expression raises SelectorError.
    """
    if selector is None:
        return {}
    out = dict(selector.match_labels or {})
    for expr in selector.match_expressions or []:
        values = expr.values or []
        if expr.operator != "In" or len(values) != 1:
            raise SelectorError(
                f"operator {expr.operator!r} on key {expr.key!r} without a single value "
                "cannot be converted to a label map"
            )
        out[expr.key] = values[0]
    return out


def format_selector(labels: Dict[str, str]) -> str:
    return ",".join(f"{k}={labels[k]}" for k in sorted(labels))
