import os

from dotenv import load_dotenv

# Import the necessary components
from agent_coordinator.clients import create_client
from agent_coordinator.multi_agent import (
    AggregatorConfig,
    CoordinationStatus,
    SupervisorConfig,
    WorkerCapabilities,
    WorkerConfig,
    create_multi_agent_system,
    create_researcher_worker,
    create_writer_worker,
    request_handoff,
)
from agent_coordinator.tools import AskUserTool

# Load environment variables (API keys)
load_dotenv()


# Example of a custom input callback for web deployment
def web_input_callback(question: str) -> str:
    """Example callback for web deployment.

    In a real web app, this would send the question to the frontend and
    block until the user answers.
    """
    print(f"\n[Web callback] Supervisor asks: {question}")
    return input("Your answer: ")


def triage(state, assignment, context=None):
    """A plain execution function that hands billing questions over."""
    if "invoice" in assignment.task.lower():
        request_handoff("billing", reasoning="invoices belong to billing")
    return f"Triage answered: {assignment.task}"


def billing(state, assignment, context=None):
    return f"Billing resolved: {assignment.task} (context: {assignment.context})"


def run_without_llm():
    # 1. Workers backed by plain functions, routed by skills
    workers = [
        WorkerConfig(
            id="triage",
            capabilities=WorkerCapabilities(skills=["support", "invoice"]),
            execute_fn=triage,
        ),
        WorkerConfig(
            id="billing",
            capabilities=WorkerCapabilities(skills=["payment", "refund"]),
            execute_fn=billing,
        ),
    ]

    # 2. Wire up the system
    system = create_multi_agent_system(
        supervisor=SupervisorConfig(strategy="skill-based"),
        workers=workers,
    )

    # 3. Run a task and watch each step
    for node, delta in system.stream("Support request: my invoice is wrong"):
        status = delta.status.value if delta.status else "-"
        print(f"[{node}] status={status}")

    final = system.invoke("Support request: my invoice is wrong")
    print(final.response)


def run_with_llm():
    # 1. Initialize the LLM client
    provider = "anthropic" if os.getenv("ANTHROPIC_API_KEY") else "openai"
    if not os.getenv("ANTHROPIC_API_KEY") and not os.getenv("OPENAI_API_KEY"):
        print("Please set ANTHROPIC_API_KEY or OPENAI_API_KEY in .env")
        return
    client = create_client(provider)

    # 2. LLM-based routing, allowed to ask the user before deciding
    supervisor = SupervisorConfig(
        strategy="llm-based",
        client=client,
        tools=[AskUserTool(input_callback=web_input_callback)],
    )

    system = create_multi_agent_system(
        supervisor=supervisor,
        workers=[create_researcher_worker(client), create_writer_worker(client)],
        aggregator=AggregatorConfig(client=client),
    )

    final = system.invoke("Research the history of the B-tree and write a short blog post about it")
    if final.status == CoordinationStatus.FAILED:
        print(f"Coordination failed: {final.error}")
    else:
        print(final.response)


if __name__ == "__main__":
    run_without_llm()
    run_with_llm()
