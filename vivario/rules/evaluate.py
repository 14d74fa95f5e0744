"""
Condition Evaluator Core Logic

Interprets the visibility / scoring predicate language.

Defaults (LOCKED):
- absent condition -> True
- unknown node kind -> True
Absence of a rule never hides a block. Numeric comparators fail closed on
non-numeric input.
"""

import math
import operator
from typing import Any, Callable, Dict, Mapping, Optional

from .models import Condition, EvaluationContext

OPERATORS: Dict[str, Callable[[float, float], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
}


def to_number(value: Any) -> Optional[float]:
    """Coerce to float, None when the value is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        n = float(value)
    elif isinstance(value, str):
        try:
            n = float(value.strip().replace(",", "."))
        except ValueError:
            return None
    else:
        return None
    if math.isnan(n):
        return None
    return n


def is_answered(value: Any) -> bool:
    if isinstance(value, (list, tuple, set)):
        return len(value) > 0
    return value is not None and value != ""


def _includes(container: Any, needle: Any) -> bool:
    if isinstance(container, (list, tuple, set)):
        return needle in container
    if isinstance(container, str):
        return str(needle) in container
    return False


def _member_of(value: Any, allowed: Any) -> bool:
    if not isinstance(allowed, (list, tuple, set)):
        allowed = [allowed]
    if isinstance(value, (list, tuple, set)):
        return any(v in allowed for v in value)
    return value in allowed


def _compare(left: Any, op: str, right: Any) -> bool:
    fn = OPERATORS.get(op)
    a, b = to_number(left), to_number(right)
    if fn is None or a is None or b is None:
        return False
    return fn(a, b)


def _leaf_target(payload: Mapping[str, Any], ctx: EvaluationContext) -> Any:
    if "domain" in payload:
        return ctx.scores.get(str(payload["domain"]))
    if "var" in payload:
        return ctx.resolve(payload["var"])
    return ctx.answer(payload.get("id"))


# ---------------------------------------------------------------------------
# Leaf handlers ({"kind": {"id": ..., ...}} form)
# ---------------------------------------------------------------------------

def _eq(p, ctx):
    return _leaf_target(p, ctx) == p.get("value")


def _neq(p, ctx):
    return _leaf_target(p, ctx) != p.get("value")


def _gte(p, ctx):
    return _compare(_leaf_target(p, ctx), ">=", p.get("value"))


def _lte(p, ctx):
    return _compare(_leaf_target(p, ctx), "<=", p.get("value"))


def _includes_leaf(p, ctx):
    return _includes(_leaf_target(p, ctx), p.get("value"))


def _in(p, ctx):
    return _member_of(_leaf_target(p, ctx), p.get("values", []))


def _answered(p, ctx):
    return is_answered(_leaf_target(p, ctx))


def _num(p, ctx):
    return _compare(ctx.answer(p.get("id")), p.get("op", ""), p.get("value"))


def _score(p, ctx):
    # a domain nobody scored reads as 0
    raw = ctx.scores.get(str(p.get("domain")), 0)
    return _compare(raw, p.get("op", ""), p.get("value"))


def _energy(p, ctx):
    return ctx.energy == p.get("is")


LEAF_HANDLERS: Dict[str, Callable[[Mapping[str, Any], EvaluationContext], bool]] = {
    "eq": _eq,
    "neq": _neq,
    "gte": _gte,
    "lte": _lte,
    "includes": _includes_leaf,
    "in": _in,
    "answered": _answered,
    "num": _num,
    "score": _score,
    "energy": _energy,
}


def _evaluate_var_leaf(cond: Mapping[str, Any], ctx: EvaluationContext) -> bool:
    """{"var": "answers.p2", "eq": "faible"} form."""
    value = ctx.resolve(cond["var"])
    if "eq" in cond:
        return value == cond["eq"]
    if "neq" in cond:
        return value != cond["neq"]
    if "gte" in cond:
        return _compare(value, ">=", cond["gte"])
    if "lte" in cond:
        return _compare(value, "<=", cond["lte"])
    if "includes" in cond:
        return _includes(value, cond["includes"])
    if "in" in cond:
        return _member_of(value, cond["in"])
    if "answered" in cond:
        return is_answered(value) == bool(cond["answered"])
    return True


def evaluate(condition: Condition, context: Optional[EvaluationContext] = None) -> bool:
    """
    Evaluate a condition tree against a context.

    Args:
        condition: JSON predicate (dict), None, or a literal bool
        context: answers / scores / energy / variables

    Returns:
        True when the predicate holds (or when nothing constrains it)
    """
    if isinstance(condition, bool):
        return condition
    if not condition:
        return True
    if not isinstance(condition, dict):
        return True

    ctx = context or EvaluationContext()

    if isinstance(condition.get("all"), list):
        return all(evaluate(c, ctx) for c in condition["all"])
    if isinstance(condition.get("any"), list):
        return any(evaluate(c, ctx) for c in condition["any"])
    if "not" in condition:
        return not evaluate(condition["not"], ctx)

    if "var" in condition:
        return _evaluate_var_leaf(condition, ctx)

    for kind, handler in LEAF_HANDLERS.items():
        payload = condition.get(kind)
        if isinstance(payload, dict):
            return handler(payload, ctx)

    return True
