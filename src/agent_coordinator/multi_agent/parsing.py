"""Parsing of routing decisions produced by a reasoning service.

A reasoning service may answer with a structured object, a JSON string, a
JSON object wrapped in a Markdown code fence, or JSON buried in prose. The
parser normalizes all of these into a RoutingDecision, or reports why it
could not, without ever raising.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import ValidationError

from .schemas import ParallelTargets, RoutingDecision, RoutingStrategy, SingleTarget

DEFAULT_CONFIDENCE = 0.5

_SINGLE_KEYS = ("targetAgent", "target_agent")
_PARALLEL_KEYS = ("targetAgents", "target_agents")
_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)


@dataclass(frozen=True)
class ParseError:
    """Why a payload could not be turned into a routing decision."""
    message: str
    raw: Any = None


@dataclass(frozen=True)
class ParseResult:
    """Either a routing decision or a parse error, never both."""
    decision: RoutingDecision | None = None
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.decision is not None


def parse_routing_decision(
    raw: Any,
    strategy: RoutingStrategy = RoutingStrategy.LLM_BASED,
) -> ParseResult:
    """Normalize a reasoning-service answer into a RoutingDecision.

    Args:
        raw: A RoutingDecision, a mapping, or text holding a JSON object.
        strategy: Strategy to stamp on the decision.

    Returns:
        A ParseResult holding the decision or the error.
    """
    if isinstance(raw, RoutingDecision):
        return ParseResult(decision=raw)
    if isinstance(raw, Mapping):
        return _from_mapping(raw, strategy)
    if isinstance(raw, str):
        data = _load_json_object(raw)
        if data is None:
            return _fail("No JSON object found in routing response", raw)
        return _from_mapping(data, strategy, raw=raw)
    return _fail(f"Unsupported routing response type: {type(raw).__name__}", raw)


def _fail(message: str, raw: Any) -> ParseResult:
    return ParseResult(error=ParseError(message=message, raw=raw))


def _first_present(data: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    # null and empty values count as absent
    for key in keys:
        value = data.get(key)
        if value not in (None, "", [], ()):
            return value
    return None


def _from_mapping(
    data: Mapping[str, Any],
    strategy: RoutingStrategy,
    raw: Any = None,
) -> ParseResult:
    raw = data if raw is None else raw
    single = _first_present(data, _SINGLE_KEYS)
    parallel = _first_present(data, _PARALLEL_KEYS)

    if single is not None and parallel is not None:
        return _fail("Ambiguous routing decision: both targetAgent and targetAgents are set", raw)
    if single is None and parallel is None:
        return _fail("Routing decision has no targetAgent or targetAgents", raw)

    confidence = data.get("confidence")
    if confidence is None:
        confidence = DEFAULT_CONFIDENCE
    elif isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        return _fail(f"Confidence must be a number, got {confidence!r}", raw)
    elif not 0.0 <= confidence <= 1.0:
        return _fail(f"Confidence must be between 0 and 1, got {confidence}", raw)

    reasoning = data.get("reasoning") or ""

    try:
        if single is not None:
            if not isinstance(single, str):
                return _fail(f"targetAgent must be a string, got {single!r}", raw)
            target: SingleTarget | ParallelTargets = SingleTarget(worker_id=single)
        else:
            if not isinstance(parallel, list) or not all(isinstance(w, str) for w in parallel):
                return _fail(f"targetAgents must be a list of strings, got {parallel!r}", raw)
            target = ParallelTargets(worker_ids=parallel)

        decision = RoutingDecision(
            target=target,
            reasoning=str(reasoning),
            confidence=float(confidence),
            strategy=strategy,
        )
    except ValidationError as e:
        return _fail(f"Invalid routing decision: {e}", raw)

    return ParseResult(decision=decision)


def _load_json_object(text: str) -> dict[str, Any] | None:
    """Find the JSON object in a piece of text.

    Tries, in order: the whole text, each fenced code block, then the first
    balanced ``{...}`` block.
    """
    candidates = [text.strip()]
    candidates.extend(match.strip() for match in _FENCE_PATTERN.findall(text))
    block = _first_balanced_block(text)
    if block is not None:
        candidates.append(block)

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(data, dict):
            return data
    return None


def _first_balanced_block(text: str) -> str | None:
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for idx in range(start, len(text)):
        char = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:idx + 1]
    return None
