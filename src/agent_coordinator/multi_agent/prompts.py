"""Prompts for the multi-agent coordinator.

This module contains the system prompts for the supervisor, the aggregator and
the preset workers, plus the helpers that render coordination state into
reasoning-service prompts.
"""

import json
from typing import Any, Mapping

from .schemas import TaskResult, WorkerCapabilities

SUPERVISOR_PROMPT = """You are a supervisor agent responsible for routing tasks to specialized worker agents.

Your job is to:
1. Analyze the current task and context
2. Review available worker capabilities
3. Select the most appropriate worker(s) for the task
4. Provide clear reasoning for your decision

You can route to MULTIPLE workers for parallel execution when:
- The task requires information from multiple domains (e.g., code + documentation)
- Multiple workers have complementary expertise
- Parallel execution would provide a more comprehensive answer

Respond with a single JSON object and nothing else.

For SINGLE worker routing:
{
  "targetAgent": "worker_id",
  "reasoning": "explanation of why this worker is best suited",
  "confidence": 0.0-1.0
}

For PARALLEL multi-worker routing:
{
  "targetAgents": ["worker_id_1", "worker_id_2"],
  "reasoning": "explanation of why these workers should work in parallel",
  "confidence": 0.0-1.0
}

Never include both "targetAgent" and "targetAgents". Only route to workers whose
status is available. If you need more information from the user before routing,
use the tools you have been given."""


AGGREGATOR_PROMPT = """You are an aggregator agent responsible for combining results from multiple worker agents.

Your job is to:
1. Review all completed task results
2. Synthesize the information into a coherent response
3. Ensure all aspects of the original query are addressed
4. Provide a clear, comprehensive final answer

Be concise but thorough in your aggregation."""


WORKER_PROMPT = """You are the "{worker_id}" worker in a team of specialized agents.
{description}
Your skills: {skills}
Your tools: {tools}

Complete the task you are given and reply with the result only. A supervisor
reads your answer and combines it with the work of other agents."""


RESEARCHER_PROMPT = """You are a research specialist focused on finding and synthesizing information.

Your responsibilities:
- Search for relevant information using available tools
- Analyze and summarize findings clearly
- Provide accurate, well-sourced information
- Identify key insights and patterns

Focus on accuracy and relevance. If information is uncertain or incomplete, say so explicitly."""


CODER_PROMPT = """You are a senior software engineer focused on writing clean, efficient code.

Your responsibilities:
- Write well-structured, readable code
- Debug failures and explain their root cause
- Use the tools you have been given to compile, run and test code

Reply with the code or fix and a short explanation of it."""


REVIEWER_PROMPT = """You are a reviewer focused on quality, correctness, and security.

Your responsibilities:
- Review the material for correctness, style, and potential issues
- Check for security vulnerabilities and edge cases
- Suggest concrete improvements

Structure your review as a list of findings, most important first."""


WRITER_PROMPT = """You are a technical writer focused on clear, accurate documentation.

Your responsibilities:
- Turn technical material into readable prose
- Keep explanations short and well organized
- Adapt the tone to the intended audience

Reply with the finished text only."""


def format_worker_list(workers: Mapping[str, WorkerCapabilities]) -> str:
    """Render one line per worker with its skills, tools, status and workload."""
    lines = []
    for worker_id, caps in workers.items():
        status = "available" if caps.available else "busy"
        lines.append(
            f"- {worker_id}: Skills: [{', '.join(caps.skills)}], "
            f"Tools: [{', '.join(caps.tools)}], "
            f"Status: {status}, Workload: {caps.current_workload}"
        )
    return "\n".join(lines)


def format_routing_prompt(task: str, workers: Mapping[str, WorkerCapabilities]) -> str:
    """Build the user prompt for llm-based routing."""
    return (
        f"Current task: {task}\n\n"
        f"Available workers:\n{format_worker_list(workers)}\n\n"
        "Select the best worker(s) for this task and explain your reasoning."
    )


def format_worker_prompt(worker_id: str, capabilities: WorkerCapabilities) -> str:
    """Build a default system prompt for an llm-backed worker."""
    description = f"{capabilities.description}\n" if capabilities.description else ""
    return WORKER_PROMPT.format(
        worker_id=worker_id,
        description=description,
        skills=", ".join(capabilities.skills) or "none",
        tools=", ".join(capabilities.tools) or "none",
    )


def format_task_message(task: str, context: Any = None) -> str:
    """Build the user message a worker receives, prefixed by its context."""
    if context is None:
        return task
    return f"Context:\n{render_payload(context)}\n\nTask: {task}"


def format_aggregation_prompt(query: str, results: list[TaskResult]) -> str:
    """Build the user prompt for llm-based aggregation.

    Results are numbered in completion order and failed results show their
    error instead of a payload.
    """
    entries = []
    for idx, task in enumerate(results, start=1):
        status = "success" if task.success else "failed"
        body = render_payload(task.result) if task.success else f"Error: {task.error}"
        entries.append(f"{idx}. [{status}] Worker {task.worker_id}:\n{body}")

    worker_results = "\n\n".join(entries)
    return (
        f"Original query: {query}\n\n"
        f"Worker results:\n{worker_results}\n\n"
        "Please synthesize these results into a comprehensive response that "
        "addresses the original query."
    )


def render_payload(payload: Any) -> str:
    """Render an opaque result or context payload as text."""
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload
    try:
        return json.dumps(payload, default=str)
    except (TypeError, ValueError):
        return str(payload)
