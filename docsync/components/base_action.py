"""
Base action class with the common pattern for orchestrated execution
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, FrozenSet, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from docsync.exceptions import DocSyncError, InvalidParametersError
from docsync.orchestrator.state import PipelineState, StateDelta
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "BaseAction")


class ActionParams(BaseModel):
    """Base for the per-action parameter structs."""
    model_config = ConfigDict(frozen=True, extra="ignore")


class BaseAction(ABC):
    """
    Abstract base class for all pipeline actions.

    Class attributes every subclass declares:
    - action_id: unique id used by plans and dependency lists
    - description: one line for planners and logs
    - depends_on: ids that must have executed successfully first
    - params_model: ActionParams subclass validating the step parameters

    Subclasses MUST implement:
    - _execute(state, params, run_id): state -> delta

    Subclasses usually also expose a run(...) method with plain arguments
    for direct use outside a pipeline.
    """

    action_id: ClassVar[str]
    description: ClassVar[str] = ""
    depends_on: ClassVar[FrozenSet[str]] = frozenset()
    params_model: ClassVar[Type[ActionParams]] = ActionParams

    def parse_params(self, params: Union[ActionParams, Dict[str, Any], None]) -> ActionParams:
        """
        Validate raw step parameters into the action's parameter struct.

        Raises:
            InvalidParametersError: If required fields are missing or malformed
        """
        if isinstance(params, self.params_model):
            return params
        if isinstance(params, BaseModel):
            params = params.model_dump()
        try:
            return self.params_model.model_validate(params or {})
        except ValidationError as e:
            raise InvalidParametersError(
                f"Invalid parameters for {self.action_id}: {e.error_count()} error(s): {e}"
            ) from e

    @abstractmethod
    def _execute(self, state: PipelineState, params: ActionParams, run_id: Optional[str] = None) -> StateDelta:
        """
        Internal execution logic for pipeline integration.

        Should read what it needs from state, talk to the gateway and/or
        generator, and return a delta. It must never mutate state.
        """
        pass

    def execute(
        self,
        state: PipelineState,
        params: Union[ActionParams, Dict[str, Any], None] = None,
        run_id: Optional[str] = None,
    ) -> StateDelta:
        """
        Execute the action as a pipeline step.

        Don't override this method in subclasses. It validates parameters,
        calls _execute(), and logs the outcome. Errors propagate unchanged.
        """
        parsed = self.parse_params(params)
        logger.debug(f"{self._format_action_name()} starting", run_id=run_id)

        try:
            delta = self._execute(state, parsed, run_id)
        except DocSyncError as e:
            logger.error(f"{self._format_action_name()} failed: {e}", run_id=run_id)
            raise
        except Exception as e:
            logger.exception(f"{self._format_action_name()} failed unexpectedly: {e}", run_id=run_id)
            raise

        logger.debug(f"{self._format_action_name()} completed successfully", run_id=run_id)
        return delta if delta is not None else StateDelta()

    def _format_action_name(self) -> str:
        """e.g. "get_branch" -> "Get Branch" """
        return self.action_id.replace("_", " ").title()
