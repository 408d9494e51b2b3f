"""
docsync Orchestrator
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from langgraph.graph import StateGraph, END

from docsync.exceptions import DependencyUnmetError
from docsync.orchestrator.nodes import decision_node, execute_node, plan_node, should_continue
from docsync.orchestrator.plan import PlanStep
from docsync.orchestrator.registry import ActionRegistry
from docsync.orchestrator.state import PipelineState, RunState
from docsync.utils.correlation import generate_run_id
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "Orchestrator")


@dataclass
class RunResult:
    run_id: str
    state: PipelineState
    completed_actions: List[str] = field(default_factory=list)
    execution_log: List[str] = field(default_factory=list)
    duration: float = 0.0


class Orchestrator:
    """
    Runs a plan of actions against one pipeline state.

    Steps execute one at a time; each step's delta is merged into a new
    state before the next decision. The first failure aborts the run and
    propagates to the caller.
    """

    def __init__(self, registry: ActionRegistry):
        self.registry = registry
        self.graph = self._build_graph()
        logger.debug(f"Initialised Orchestrator with {len(registry)} action(s)", run_id="INIT")

    def _build_graph(self):
        workflow = StateGraph(RunState)

        workflow.add_node("check_plan", lambda state: plan_node(state, self.registry))
        workflow.add_node("decide", lambda state: decision_node(state, self.registry))
        workflow.add_node("execute", lambda state: execute_node(state, self.registry))

        workflow.set_entry_point("check_plan")
        workflow.add_edge("check_plan", "decide")
        workflow.add_conditional_edges("decide", should_continue, {"continue": "execute", "end": END})
        workflow.add_edge("execute", "decide")
        return workflow.compile()

    def run(
        self,
        initial_state: PipelineState,
        plan: List[PlanStep],
        run_id: Optional[str] = None,
    ) -> RunResult:
        run_id = run_id or generate_run_id()
        logger.info(f"Starting pipeline run with {len(plan)} planned step(s)", run_id=run_id)

        run_state: RunState = {
            "run_id": run_id,
            "pipeline_state": initial_state,
            "plan": list(plan),
            "plan_index": 0,
            "completed_actions": [],
            "execution_log": [],
            "next_action": "",
            "reasoning": "",
        }

        start_time = datetime.now()
        try:
            final_state: Dict[str, Any] = self.graph.invoke(
                run_state,
                config={"recursion_limit": 2 * len(plan) + 10},
            )
        except Exception as e:
            duration = (datetime.now() - start_time).total_seconds()
            logger.error(f"Pipeline run aborted after {duration:.2f}s: {e}", run_id=run_id)
            raise

        duration = (datetime.now() - start_time).total_seconds()
        result = RunResult(
            run_id=run_id,
            state=final_state["pipeline_state"],
            completed_actions=final_state["completed_actions"],
            execution_log=final_state["execution_log"],
            duration=duration,
        )
        self._log_summary(result)
        return result

    def execute_action(
        self,
        action_id: str,
        state: PipelineState,
        params: Optional[Dict[str, Any]] = None,
        completed: Iterable[str] = (),
        run_id: Optional[str] = None,
    ) -> PipelineState:
        """
        Run a single action outside a plan, for external planners.

        Args:
            action_id: Registered action id
            state: Current pipeline state
            params: Raw parameters for the action
            completed: Ids of actions that already ran successfully

        Returns:
            The merged state

        Raises:
            DependencyUnmetError: If a dependency is not in completed
        """
        unmet = self.registry.unmet_dependencies(action_id, completed)
        if unmet:
            raise DependencyUnmetError(
                f"Dependency not satisfied for {action_id}: {', '.join(sorted(unmet))} has not run"
            )
        delta = self.registry.get(action_id).execute(state, params, run_id=run_id)
        return state.merge(delta)

    def _log_summary(self, result: RunResult) -> None:
        logger.info(
            f"Executed {len(result.execution_log)} step(s) in {result.duration:.2f}s: "
            f"{' | '.join(result.execution_log)}",
            run_id=result.run_id,
        )
