"""
Action registry: the action set a run may use, with its dependency graph
checked once at construction.
"""

from typing import Dict, Iterable, Iterator, List, Set

from docsync.components.base_action import BaseAction
from docsync.components.branch.branch_reconciler import BranchReconciler
from docsync.components.commit.committer import Committer
from docsync.components.discover.discovery import Discovery
from docsync.components.generate.generator import ContentGenerator
from docsync.components.ingest.commit_info import CommitInfoReader
from docsync.components.resolve.pr_reconciler import PRReconciler
from docsync.components.write.doc_writer import DocWriter
from docsync.exceptions import ConfigurationError
from docsync.gateway.base import RepositoryGateway


class ActionRegistry:
    """
    Holds actions by id.

    Raises ConfigurationError for duplicate ids, dependencies on unknown ids,
    and dependency cycles (including self-dependencies).
    """

    def __init__(self, actions: Iterable[BaseAction]):
        self._actions: Dict[str, BaseAction] = {}
        for action in actions:
            if action.action_id in self._actions:
                raise ConfigurationError(f"Duplicate action id: {action.action_id}")
            self._actions[action.action_id] = action

        for action in self._actions.values():
            unknown = set(action.depends_on) - set(self._actions)
            if unknown:
                raise ConfigurationError(
                    f"Action {action.action_id} depends on unknown action(s): {', '.join(sorted(unknown))}"
                )

        self._order = self._topological_order()

    def get(self, action_id: str) -> BaseAction:
        try:
            return self._actions[action_id]
        except KeyError:
            raise ConfigurationError(f"Unknown action: {action_id}") from None

    def __contains__(self, action_id: str) -> bool:
        return action_id in self._actions

    def __iter__(self) -> Iterator[BaseAction]:
        return iter(self._actions.values())

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def order(self) -> List[str]:
        """A dependency-respecting order of all action ids."""
        return list(self._order)

    def unmet_dependencies(self, action_id: str, completed: Iterable[str]) -> Set[str]:
        return set(self.get(action_id).depends_on) - set(completed)

    def _topological_order(self) -> List[str]:
        order: List[str] = []
        visiting: Set[str] = set()
        done: Set[str] = set()

        def visit(action_id: str, path: List[str]) -> None:
            if action_id in done:
                return
            if action_id in visiting:
                cycle = " -> ".join(path[path.index(action_id):] + [action_id])
                raise ConfigurationError(f"Dependency cycle detected: {cycle}")
            visiting.add(action_id)
            for dep in sorted(self._actions[action_id].depends_on):
                visit(dep, path + [action_id])
            visiting.discard(action_id)
            done.add(action_id)
            order.append(action_id)

        for action_id in self._actions:
            visit(action_id, [])
        return order


def build_default_registry(gateway: RepositoryGateway, generator: ContentGenerator) -> ActionRegistry:
    return ActionRegistry([
        CommitInfoReader(gateway),
        Discovery(gateway),
        BranchReconciler(gateway),
        DocWriter(generator),
        Committer(gateway),
        PRReconciler(gateway),
    ])
