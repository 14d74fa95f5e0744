"""
Condition Evaluator Models

A condition is plain JSON loaded from the questionnaire file:

    {"all": [{"answered": {"id": "themes"}},
             {"not": {"energy": {"is": "low"}}}]}

    {"var": "scores.stress", "gte": 45}

The evaluation context carries everything a leaf may reference.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

Condition = Union[Dict[str, Any], bool, None]


@dataclass(frozen=True)
class EvaluationContext:
    """
    Read-only view used by evaluate().

    answers: block id -> raw value (option id, list of ids, number or text)
    scores: domain -> normalized score 0..100
    energy: "low" | "medium" | "high"
    variables: derived flags and set_vars output
    """
    answers: Mapping[str, Any] = field(default_factory=dict)
    scores: Mapping[str, float] = field(default_factory=dict)
    energy: Optional[str] = None
    variables: Mapping[str, Any] = field(default_factory=dict)

    def answer(self, block_id: str) -> Any:
        return self.answers.get(str(block_id))

    def resolve(self, path: str) -> Any:
        """
        Resolve a var path.

        "answers.<id>", "scores.<domain>", "vars.<name>[.<key>]", "energy",
        anything else is read as an answer id.
        """
        p = str(path or "").strip()
        if not p:
            return None
        if p == "energy":
            return self.energy

        head, _, rest = p.partition(".")
        if head == "answers" and rest:
            return self.answer(rest)
        if head == "scores" and rest:
            return self.scores.get(rest)
        if head == "vars" and rest:
            current: Any = self.variables
            for key in rest.split("."):
                if isinstance(current, Mapping) and key in current:
                    current = current[key]
                else:
                    return None
            return current
        return self.answer(p)
