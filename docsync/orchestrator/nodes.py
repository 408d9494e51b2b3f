"""
Workflow Node Implementations
"""

from typing import Any, Dict, Literal

from docsync.exceptions import ConfigurationError, DependencyUnmetError
from docsync.orchestrator.registry import ActionRegistry
from docsync.orchestrator.state import RunState
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "PipelineNodes")

ACTION_RUN = "run"
ACTION_SKIP = "skip"
ACTION_COMPLETE = "complete"


def plan_node(state: RunState, registry: ActionRegistry) -> Dict[str, Any]:
    """
    Node 1: Check the plan

    Every step must name a registered action. Readiness is checked per step
    at decision time, not here.
    """
    run_id = state["run_id"]
    unknown = [step.action_id for step in state["plan"] if step.action_id not in registry]
    if unknown:
        raise ConfigurationError(f"Plan references unknown action(s): {', '.join(unknown)}")

    logger.info(
        f"Plan ({len(state['plan'])} steps): {' -> '.join(step.name for step in state['plan'])}",
        run_id=run_id,
    )
    return {"plan_index": state.get("plan_index", 0)}


def decision_node(state: RunState, registry: ActionRegistry) -> Dict[str, Any]:
    """
    Node 2: Decide on the next step

    Returns next_action "complete" when the plan is exhausted, "skip" when the
    step's condition is false, otherwise "run".

    Raises:
        DependencyUnmetError: If the step would run before its dependencies
    """
    run_id = state["run_id"]
    plan = state["plan"]
    index = state["plan_index"]

    if index >= len(plan):
        logger.debug("Plan complete, no more steps to execute", run_id=run_id)
        return {"next_action": ACTION_COMPLETE, "reasoning": "All planned steps executed"}

    step = plan[index]
    if not step.should_run(state["pipeline_state"]):
        return {"next_action": ACTION_SKIP, "reasoning": "Step condition not met"}

    unmet = registry.unmet_dependencies(step.action_id, state["completed_actions"])
    if unmet:
        logger.error(
            f"Cannot run {step.name}: dependency not satisfied ({', '.join(sorted(unmet))})",
            run_id=run_id,
        )
        raise DependencyUnmetError(
            f"Dependency not satisfied for {step.action_id}: {', '.join(sorted(unmet))} has not run"
        )

    logger.debug(f"Next in plan: {step.name} (step {index + 1}/{len(plan)})", run_id=run_id)
    return {"next_action": ACTION_RUN, "reasoning": "Dependencies satisfied"}


def execute_node(state: RunState, registry: ActionRegistry) -> Dict[str, Any]:
    """
    Node 3: Execute or skip the current step

    The action's delta is merged into a new pipeline state. Failures abort
    the run by propagating out of the graph.
    """
    run_id = state["run_id"]
    step = state["plan"][state["plan_index"]]
    execution_log = list(state["execution_log"])

    if state["next_action"] == ACTION_SKIP:
        logger.info(f"Skipping: {step.name} | Reason: {state['reasoning']}", run_id=run_id)
        execution_log.append(f"{step.name}: skipped")
        return {"execution_log": execution_log, "plan_index": state["plan_index"] + 1}

    action = registry.get(step.action_id)
    pipeline_state = state["pipeline_state"]

    try:
        params = step.resolve_params(pipeline_state)
        delta = action.execute(pipeline_state, params, run_id=run_id)
        pipeline_state = pipeline_state.merge(delta)
    except Exception as e:
        logger.error(f"Step failed: {step.name} - {e}", run_id=run_id)
        raise

    completed = list(state["completed_actions"])
    if step.action_id not in completed:
        completed.append(step.action_id)

    execution_log.append(f"{step.name}: completed")
    logger.debug(f"Completed: {step.name}", run_id=run_id)

    return {
        "pipeline_state": pipeline_state,
        "completed_actions": completed,
        "execution_log": execution_log,
        "plan_index": state["plan_index"] + 1,
    }


def should_continue(state: RunState) -> Literal["continue", "end"]:
    """Router: loop back to execute, or end the workflow."""
    if state.get("next_action") == ACTION_COMPLETE:
        return "end"
    return "continue"
