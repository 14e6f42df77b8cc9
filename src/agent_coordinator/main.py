"""Command line entry point: ``agent-coordinator [TASK]``.

Builds a coordinator from CLI flags, an optional YAML file and the
environment, then runs one task or an interactive session.
"""

import argparse
import os
import sys

import yaml

from .clients.base import BaseLLMClient
from .clients.factory import create_client, get_available_providers
from .config import get_settings
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    CoordinationError,
    ProviderUnavailableError,
    RateLimitError,
)
from .logging import setup_logging
from .multi_agent import (
    AggregatorConfig,
    CoordinationState,
    CoordinationStatus,
    MultiAgentSystem,
    SupervisorConfig,
    WorkerCapabilities,
    WorkerConfig,
    create_multi_agent_system,
    get_available_strategies,
)
from .multi_agent.prompts import (
    CODER_PROMPT,
    RESEARCHER_PROMPT,
    REVIEWER_PROMPT,
    WRITER_PROMPT,
)
from .multi_agent.workers import (
    create_coder_worker,
    create_researcher_worker,
    create_reviewer_worker,
    create_writer_worker,
)
from .tools.ask_user import AskUserTool

# keys in a yaml llm section that are not client parameters
_NON_CLIENT_KEYS = {
    "provider", "model", "preset", "skills", "tools", "description", "available", "workload",
}

_PRESETS = {
    "researcher": create_researcher_worker,
    "coder": create_coder_worker,
    "reviewer": create_reviewer_worker,
    "writer": create_writer_worker,
}

_PRESET_PROMPTS = {
    "researcher": RESEARCHER_PROMPT,
    "coder": CODER_PROMPT,
    "reviewer": REVIEWER_PROMPT,
    "writer": WRITER_PROMPT,
}


def load_yaml_config(path: str = "config.yaml") -> dict:
    """Parsed YAML config, or an empty dict when the file is absent or empty."""
    if not os.path.exists(path):
        return {}
    with open(path, encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def _first_set(*candidates):
    return next((value for value in candidates if value), None)


def get_provider_and_model(
    args: argparse.Namespace, yaml_config: dict
) -> tuple[str | None, str | None]:
    """Resolve provider and model: CLI flag, then config file, then environment.

    With nothing set anywhere the provider is detected from whichever API
    key is present.
    """
    settings = get_settings()
    llm_section = yaml_config.get("llm", {})
    provider = _first_set(args.provider, llm_section.get("provider"), settings.detect_provider())
    model = _first_set(args.model, llm_section.get("model"), settings.llm_model)
    return provider, model


def _client_config(section: dict) -> dict:
    return {key: value for key, value in section.items() if key not in _NON_CLIENT_KEYS}


def build_workers(
    workers_config: dict,
    default_client: BaseLLMClient,
    default_llm: dict,
) -> list[WorkerConfig]:
    """Turn the ``coordinator.workers`` section into worker configs.

    Each entry starts from the preset named by ``preset`` (or by its own id,
    when that is a preset). ``skills``, ``tools``, ``description``,
    ``available`` and ``workload`` replace the preset's capabilities. An
    entry naming its own ``provider`` or ``model`` gets a dedicated client;
    the rest share ``default_client``. An empty section yields all presets.

    Args:
        workers_config: Worker id to settings, in the order to register them.
        default_client: Shared client.
        default_llm: The top-level ``llm`` section, for provider and model
            fallbacks.
    """
    if not workers_config:
        return [make(default_client) for make in _PRESETS.values()]

    workers = []
    for worker_id, entry in workers_config.items():
        entry = entry or {}
        client = default_client
        if entry.get("provider") or entry.get("model"):
            client = create_client(
                entry.get("provider") or default_llm.get("provider"),
                entry.get("model") or default_llm.get("model"),
                _client_config(entry),
            )

        preset_name = entry.get("preset", worker_id)
        make = _PRESETS.get(preset_name)
        preset = make(client, worker_id=worker_id) if make else None
        base_caps = preset.capabilities if preset else WorkerCapabilities()

        workers.append(WorkerConfig(
            id=worker_id,
            capabilities=WorkerCapabilities(
                skills=entry.get("skills", base_caps.skills),
                tools=entry.get("tools", base_caps.tools),
                available=entry.get("available", base_caps.available),
                current_workload=entry.get("workload", base_caps.current_workload),
                description=entry.get("description", base_caps.description),
            ),
            client=client,
            system_prompt=_PRESET_PROMPTS.get(preset_name),
            max_tool_rounds=preset.max_tool_rounds if preset else 5,
        ))
    return workers


def _missing_provider_help() -> None:
    print("Error: no reasoning-service provider configured. Set one of:")
    for hint in (
        "LLM_PROVIDER in the environment",
        "llm.provider in the config file",
        "ANTHROPIC_API_KEY or OPENAI_API_KEY",
    ):
        print(f"  - {hint}")


def build_system(args: argparse.Namespace, yaml_config: dict) -> MultiAgentSystem | None:
    """Assemble the coordinator described by CLI flags and the config file.

    Returns:
        The system, or None after printing why it could not be built.
    """
    settings = get_settings()
    provider, model = get_provider_and_model(args, yaml_config)
    if not provider:
        _missing_provider_help()
        return None

    llm_section = yaml_config.get("llm", {})
    section = yaml_config.get("coordinator", {})
    strategy = _first_set(args.strategy, section.get("strategy"), settings.routing_strategy)
    max_iterations = _first_set(
        args.max_iterations, section.get("max_iterations"), settings.max_iterations
    )

    try:
        client = create_client(provider, model, _client_config(llm_section))
        supervisor = SupervisorConfig(
            strategy=strategy,
            client=client,
            tools=[AskUserTool()] if section.get("ask_user", True) else [],
            max_tool_retries=_first_set(section.get("max_tool_retries"), settings.max_tool_retries),
            priority=settings.default_priority,
        )
        system = create_multi_agent_system(
            supervisor=supervisor,
            workers=build_workers(section.get("workers", {}), client, llm_section),
            aggregator=AggregatorConfig(client=client if section.get("synthesize", True) else None),
            max_iterations=max_iterations,
            settings=settings,
        )
    except (ValueError, ConfigurationError) as e:
        print(f"Error: {e}")
        return None

    print(f"{client.describe()} | strategy={strategy} | workers: {', '.join(system.workers)}")
    return system


def _print_history(state: CoordinationState) -> None:
    print("\nRouting history:")
    for decision in state.routing_history:
        print(
            f"  -> {', '.join(decision.target_ids)} "
            f"[{decision.strategy.value}, confidence {decision.confidence:.2f}] "
            f"{decision.reasoning}"
        )
    for handoff in state.handoffs:
        print(f"  handoff {handoff.from_worker} -> {handoff.to_worker}: {handoff.reasoning}")
    for task in state.completed_tasks:
        print(f"  [{task.worker_id}] {'ok' if task.success else 'failed: ' + str(task.error)}")


def print_result(state: CoordinationState, show_history: bool = False) -> None:
    """Print the final response, or the error of a failed session."""
    if show_history:
        _print_history(state)

    if state.status == CoordinationStatus.FAILED:
        print(f"\nError: {state.error}")
    else:
        print(f"\nCoordinator: {state.response}")


# most specific first; CoordinationError catches the rest
_FAILURE_LABELS: list[tuple[type[CoordinationError], str]] = [
    (AuthenticationError, "Authentication failed; check your API key"),
    (RateLimitError, "Rate limited; wait a moment and try again"),
    (ProviderUnavailableError, "Provider unavailable; try again later"),
    (CoordinationError, "Coordination failed"),
]


def run_task(system: MultiAgentSystem, task: str, show_history: bool = False) -> bool:
    """Run one task through the system and print the outcome.

    Returns:
        Whether the session ended in the completed state.
    """
    try:
        state = system.invoke(task)
    except CoordinationError as e:
        label = next(text for kind, text in _FAILURE_LABELS if isinstance(e, kind))
        print(f"{label}: {e}")
        return False

    print_result(state, show_history=show_history)
    return state.status == CoordinationStatus.COMPLETED


def run_repl(system: MultiAgentSystem, show_history: bool = False) -> None:
    """Read tasks from stdin until exit, EOF or Ctrl-C."""
    print(f"\n{len(system.workers)} workers ready: {', '.join(system.workers)}")
    print("Enter a task, or 'exit' to quit.")

    while True:
        try:
            task = input("\ntask> ").strip()
        except (KeyboardInterrupt, EOFError):
            print()
            return
        if task.lower() in ("exit", "quit"):
            return
        if task:
            run_task(system, task, show_history=show_history)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-coordinator",
        description="Route a task across cooperating workers and combine their results.",
    )
    parser.add_argument("task", nargs="?", help="task to run; omit for an interactive session")
    parser.add_argument(
        "--strategy",
        # rule-based needs a routing function, which the cli cannot supply
        choices=[s for s in get_available_strategies() if s != "rule-based"],
        help="routing strategy (default: AGENT_COORDINATOR_STRATEGY or skill-based)",
    )
    parser.add_argument(
        "--max-iterations", type=int, help="routing iterations before aggregation is forced"
    )
    parser.add_argument("--provider", choices=get_available_providers())
    parser.add_argument("--model", help="model id for the default client")
    parser.add_argument("--config", default="config.yaml", help="YAML config file")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument(
        "--show-history",
        action="store_true",
        help="also print routing decisions, handoffs and task results",
    )
    return parser


def resolve_log_level(cli_level: str | None) -> str:
    """The --log-level flag, else the configured level (environment or .env)."""
    return cli_level or get_settings().log_level


def main():
    args = build_parser().parse_args()
    setup_logging(resolve_log_level(args.log_level))

    system = build_system(args, load_yaml_config(args.config))
    if system is None:
        sys.exit(1)

    if args.task:
        sys.exit(0 if run_task(system, args.task, show_history=args.show_history) else 1)
    run_repl(system, show_history=args.show_history)


if __name__ == "__main__":
    main()
