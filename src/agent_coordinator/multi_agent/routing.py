"""Routing strategies for the supervisor.

Five interchangeable algorithms share one contract,
``route(state, config) -> RoutingDecision``:

- round-robin: cycle through available workers in registration order
- skill-based: score workers by skills and tool names found in the task
- load-balanced: pick the available worker with the lowest workload
- rule-based: delegate to a caller-supplied routing function
- llm-based: ask a reasoning service, running any tools it requests first

Every strategy except rule-based raises RoutingError when no worker is
available.
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Mapping

from ..core.prompt_builder import PromptBuilder
from ..core.tool_executor import ToolExecutor
from ..exceptions import ConfigurationError, RoutingError
from ..logging import get_logger
from ..types import UnifiedResponse
from .parsing import parse_routing_decision
from .prompts import SUPERVISOR_PROMPT, format_routing_prompt
from .schemas import RoutingDecision, RoutingStrategy, WorkerCapabilities
from .state import CoordinationState, current_task

if TYPE_CHECKING:
    from .supervisor import SupervisorConfig

DEFAULT_MAX_TOOL_RETRIES = 3

# skill matches weigh twice as much as tool matches
SKILL_WEIGHT = 2
TOOL_WEIGHT = 1
SCORE_SCALE = 5.0
FALLBACK_CONFIDENCE = 0.5


class RoutingStrategyImpl(ABC):
    """Contract shared by all routing strategies."""

    name: RoutingStrategy

    @abstractmethod
    def route(self, state: CoordinationState, config: "SupervisorConfig") -> RoutingDecision:
        """Choose the worker(s) for the current task.

        Raises:
            RoutingError: If no decision can be produced.
            ConfigurationError: If the strategy is missing a dependency.
        """

    def _logger(self, config: "SupervisorConfig") -> logging.Logger:
        return config.logger or get_logger(__name__)

    def _eligible(self, state: CoordinationState) -> list[tuple[str, WorkerCapabilities]]:
        eligible = [
            (worker_id, caps)
            for worker_id, caps in state.workers.items()
            if caps.available
        ]
        if not eligible:
            raise RoutingError(f"No available workers for {self.name.value} routing")
        return eligible

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.name.value}')"


class RoundRobinRouting(RoutingStrategyImpl):
    """Cycle through available workers in registration order."""

    name = RoutingStrategy.ROUND_ROBIN

    def route(self, state: CoordinationState, config: "SupervisorConfig") -> RoutingDecision:
        eligible = self._eligible(state)
        index = len(state.routing_history) % len(eligible)
        worker_id = eligible[index][0]

        self._logger(config).debug(
            "round-robin selected '%s' (index %d of %d)", worker_id, index, len(eligible)
        )
        return RoutingDecision.single(
            worker_id,
            reasoning=f"Round-robin selection: worker {index + 1} of {len(eligible)}",
            confidence=1.0,
            strategy=self.name,
        )


class SkillBasedRouting(RoutingStrategyImpl):
    """Score workers by the skills and tool names that appear in the task text."""

    name = RoutingStrategy.SKILL_BASED

    def route(self, state: CoordinationState, config: "SupervisorConfig") -> RoutingDecision:
        log = self._logger(config)
        eligible = self._eligible(state)
        task = current_task(state).lower()

        best_id: str | None = None
        best_score = 0
        best_matches: list[str] = []
        for worker_id, caps in eligible:
            skill_matches = [skill for skill in caps.skills if skill.lower() in task]
            tool_matches = [tool for tool in caps.tools if tool.lower() in task]
            score = SKILL_WEIGHT * len(skill_matches) + TOOL_WEIGHT * len(tool_matches)
            log.debug("skill score for '%s': %d", worker_id, score)
            # strict comparison keeps the earliest registered worker on ties
            if score > best_score:
                best_id, best_score = worker_id, score
                best_matches = skill_matches + tool_matches

        if best_id is None:
            fallback_id = eligible[0][0]
            log.info("no skill match, falling back to '%s'", fallback_id)
            return RoutingDecision.single(
                fallback_id,
                reasoning=f"No skill match found, using first available worker: {fallback_id}",
                confidence=FALLBACK_CONFIDENCE,
                strategy=self.name,
            )

        log.info("skill-based routing selected '%s' (score %d)", best_id, best_score)
        return RoutingDecision.single(
            best_id,
            reasoning=f"Best skill match (score {best_score}): {', '.join(best_matches)}",
            confidence=min(best_score / SCORE_SCALE, 1.0),
            strategy=self.name,
        )


class LoadBalancedRouting(RoutingStrategyImpl):
    """Pick the available worker with the lowest advisory workload."""

    name = RoutingStrategy.LOAD_BALANCED

    def route(self, state: CoordinationState, config: "SupervisorConfig") -> RoutingDecision:
        eligible = self._eligible(state)

        # min() returns the first minimum, which is the earliest registered
        worker_id, caps = min(eligible, key=lambda item: item[1].current_workload)
        workload = caps.current_workload
        mean = sum(c.current_workload for _, c in eligible) / len(eligible)

        if workload == 0:
            confidence = 1.0
        else:
            confidence = max(0.5, 1 - workload / (2 * mean))

        self._logger(config).debug(
            "load-balanced selected '%s' (workload %d, mean %.2f)", worker_id, workload, mean
        )
        return RoutingDecision.single(
            worker_id,
            reasoning=f"Lowest workload: {worker_id} has {workload} task(s), average is {mean:.1f}",
            confidence=confidence,
            strategy=self.name,
        )


class RuleBasedRouting(RoutingStrategyImpl):
    """Delegate the decision to ``config.routing_fn``."""

    name = RoutingStrategy.RULE_BASED

    def route(self, state: CoordinationState, config: "SupervisorConfig") -> RoutingDecision:
        if config.routing_fn is None:
            raise ConfigurationError("Rule-based routing requires a routing_fn")

        decision = config.routing_fn(state)
        if not isinstance(decision, RoutingDecision):
            raise RoutingError(
                f"routing_fn must return a RoutingDecision, got {type(decision).__name__}"
            )

        self._logger(config).debug("rule-based routing selected %s", decision.target_ids)
        return decision


class LLMBasedRouting(RoutingStrategyImpl):
    """Ask a reasoning service to choose the worker(s).

    The service sees every worker's skills, tools, status and workload. If it
    requests tool calls (for example asking the user for clarification), the
    tools run and their results are appended to a local transcript before the
    service is called again. The number of service calls is bounded by
    ``config.max_tool_retries``.

    The answer may be text, a structured mapping in the message content, or
    a mapping or RoutingDecision returned by ``generate`` in place of a
    UnifiedResponse.
    """

    name = RoutingStrategy.LLM_BASED

    def route(self, state: CoordinationState, config: "SupervisorConfig") -> RoutingDecision:
        log = self._logger(config)
        if config.client is None:
            raise ConfigurationError("LLM-based routing requires a client")

        self._eligible(state)
        max_retries = config.max_tool_retries or DEFAULT_MAX_TOOL_RETRIES
        tools = list(config.tools or [])
        executor = ToolExecutor(tools, logger=log)

        builder = PromptBuilder(config.system_prompt or SUPERVISOR_PROMPT)
        transcript = builder.start(format_routing_prompt(current_task(state), state.workers))

        for attempt in range(1, max_retries + 1):
            log.debug(
                "llm routing attempt %d/%d via %s (%d messages)",
                attempt,
                max_retries,
                config.client.describe(),
                len(transcript),
            )
            response = config.client.generate(transcript, tools or None)
            if isinstance(response, (Mapping, RoutingDecision)):
                # the service answered with the decision itself
                return self._decide(response, log)
            if not isinstance(response, UnifiedResponse):
                raise RoutingError(
                    f"Unexpected reasoning-service response: {type(response).__name__}"
                )
            message = response.message

            if message.tool_calls:
                if not tools:
                    raise ConfigurationError(
                        "Reasoning service requested tool calls but no tools are configured"
                    )
                log.info(
                    "llm routing requested %d tool call(s): %s",
                    len(message.tool_calls),
                    [tc.name for tc in message.tool_calls],
                )
                transcript.append(builder.build_assistant_message(message.content, message.tool_calls))
                transcript.extend(executor.execute_tool_calls(message.tool_calls))
                continue

            content = message.content if message.content is not None else ""
            return self._decide(content, log)

        raise RoutingError(f"Max tool retries ({max_retries}) exceeded without routing decision")

    def _decide(self, answer: Any, log: logging.Logger) -> RoutingDecision:
        parsed = parse_routing_decision(answer, strategy=self.name)
        if parsed.error is not None:
            raise RoutingError(f"Could not parse routing decision: {parsed.error.message}")

        log.info(
            "llm routing selected %s (confidence %.2f)",
            parsed.decision.target_ids,
            parsed.decision.confidence,
        )
        return parsed.decision


_STRATEGIES: dict[RoutingStrategy, RoutingStrategyImpl] = {
    strategy.name: strategy
    for strategy in (
        RoundRobinRouting(),
        SkillBasedRouting(),
        LoadBalancedRouting(),
        RuleBasedRouting(),
        LLMBasedRouting(),
    )
}


def get_available_strategies() -> list[str]:
    """Get the names of all routing strategies."""
    return [strategy.value for strategy in _STRATEGIES]


def get_routing_strategy(name: RoutingStrategy | str) -> RoutingStrategyImpl:
    """Resolve a strategy name to its implementation.

    Raises:
        ConfigurationError: If the name is not a known strategy.
    """
    try:
        key = RoutingStrategy(name)
    except ValueError:
        raise ConfigurationError(
            f"Unknown routing strategy: {name}. Available: {get_available_strategies()}"
        ) from None
    return _STRATEGIES[key]
