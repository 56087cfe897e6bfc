"""
Result hierarchy with attach notifications.

A ResultHierarchy is a tree of arbitrary result objects. Callbacks can be
subscribed on any node; attaching a new child notifies every callback
registered on the new child's parent and on each ancestor up to the root,
exactly once per attach, with the arguments (child, parent).

Nodes are tracked by identity, so unhashable objects (e.g. mutable
dataclasses) can be stored.

EvaluationPipeline builds on this to re-run a list of evaluator callables
on every newly attached result, which is how statistics computed by this
package are wired into a larger analysis.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Iterable, Iterator

from pytendency.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

Listener = Callable[[Any, Any], None]
Evaluator = Callable[[Any, Any], None]


class ResultHierarchy:
    """
    Tree of results with publish/subscribe on attach.

    Usage:
        tree = ResultHierarchy(root)
        tree.subscribe(lambda child, parent: print(child))
        tree.attach(solution)            # under the root
        tree.attach(detail, solution)    # nested
    """

    def __init__(self, root: Any):
        self._root = root
        self._nodes: dict[int, Any] = {id(root): root}
        self._parents: dict[int, int | None] = {id(root): None}
        self._children: dict[int, list[int]] = {id(root): []}
        self._listeners: dict[int, list[tuple[int, Listener]]] = {}
        self._handle_owner: dict[int, int] = {}
        self._handles = itertools.count(1)

    @property
    def root(self) -> Any:
        return self._root

    def __contains__(self, node: Any) -> bool:
        return self._nodes.get(id(node)) is node

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Any]:
        """Pre-order traversal starting at the root."""
        stack = [id(self._root)]
        while stack:
            key = stack.pop()
            yield self._nodes[key]
            stack.extend(reversed(self._children[key]))

    def _key(self, node: Any, name: str) -> int:
        key = id(node)
        if self._nodes.get(key) is not node:
            raise ValidationError(f"{name}: node is not part of this hierarchy")
        return key

    def parent(self, node: Any) -> Any | None:
        """Parent of node, None for the root."""
        parent_key = self._parents[self._key(node, 'node')]
        return None if parent_key is None else self._nodes[parent_key]

    def children(self, node: Any) -> list[Any]:
        """Direct children of node in attach order."""
        return [self._nodes[k] for k in self._children[self._key(node, 'node')]]

    def ancestors(self, node: Any) -> list[Any]:
        """Chain from node's parent up to and including the root."""
        chain = []
        key = self._parents[self._key(node, 'node')]
        while key is not None:
            chain.append(self._nodes[key])
            key = self._parents[key]
        return chain

    def subscribe(self, callback: Listener, node: Any = None) -> int:
        """
        Register callback for attaches anywhere below node (default: root).

        Returns:
            Handle for unsubscribe()
        """
        key = self._key(self._root if node is None else node, 'node')
        handle = next(self._handles)
        self._listeners.setdefault(key, []).append((handle, callback))
        self._handle_owner[handle] = key
        return handle

    def unsubscribe(self, handle: int) -> None:
        """Remove a subscription; unknown handles raise ValidationError."""
        key = self._handle_owner.pop(handle, None)
        if key is None:
            raise ValidationError(f"handle: unknown subscription {handle!r}")
        self._listeners[key] = [
            (h, cb) for h, cb in self._listeners[key] if h != handle
        ]

    def attach(self, child: Any, parent: Any = None) -> None:
        """
        Attach child under parent (default: root) and notify subscribers.

        Callbacks run nearest-first (parent, then ancestors up to the root).
        An exception raised by a callback propagates after the child has
        been attached; remaining callbacks are not invoked.

        Raises:
            ValidationError: If child is already present or parent is unknown
        """
        parent = self._root if parent is None else parent
        parent_key = self._key(parent, 'parent')
        if child in self:
            raise ValidationError("child: node is already part of this hierarchy")

        child_key = id(child)
        self._nodes[child_key] = child
        self._parents[child_key] = parent_key
        self._children[child_key] = []
        self._children[parent_key].append(child_key)
        logger.debug("Attached %s under %s", type(child).__name__, type(parent).__name__)

        # A callback subscribed on several ancestors still runs once
        seen: set[int] = set()
        key: int | None = parent_key
        while key is not None:
            # Copy: a callback may subscribe or unsubscribe while we iterate
            for _, callback in list(self._listeners.get(key, ())):
                if id(callback) in seen:
                    continue
                seen.add(id(callback))
                callback(child, parent)
            key = self._parents[key]


class EvaluationPipeline:
    """
    Run evaluators on a base result and on every result attached later.

    Each evaluator is called as evaluator(base, result), where base is the
    hierarchy root.
    """

    def __init__(self, hierarchy: ResultHierarchy, evaluators: Iterable[Evaluator]):
        self.hierarchy = hierarchy
        self.evaluators = list(evaluators)
        self._handle: int | None = hierarchy.subscribe(self._result_added)

    def run(self) -> None:
        """Evaluate the base result itself."""
        self.update(self.hierarchy.root)

    def update(self, result: Any) -> None:
        for evaluator in self.evaluators:
            evaluator(self.hierarchy.root, result)

    def _result_added(self, child: Any, parent: Any) -> None:
        self.update(child)

    def close(self) -> None:
        """Stop reacting to new results."""
        if self._handle is not None:
            self.hierarchy.unsubscribe(self._handle)
            self._handle = None
