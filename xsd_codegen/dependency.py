"""Order integer-identified items so that dependencies come before dependants."""
from typing import Callable, Iterator, List, MutableMapping, Set, Tuple

import sortedcontainers


class Graph:
    """
    Represent the dependencies between items identified by integers.

    The items are usually indices into an arena of nodes so that the graph
    does not need to hold any references to the nodes themselves.
    """

    def __init__(self) -> None:
        """Initialize as an empty graph."""
        self._edges = (
            dict()
        )  # type: MutableMapping[int, sortedcontainers.SortedSet[int]]

        self._nodes = sortedcontainers.SortedSet()  # type: sortedcontainers.SortedSet[int]

    def add_node(self, node: int) -> None:
        """Record the ``node`` even if it has no dependencies."""
        self._nodes.add(node)

    def add(self, source: int, target: int) -> None:
        """Record that ``source`` depends on ``target``."""
        targets = self._edges.get(source, None)
        if targets is None:
            targets = sortedcontainers.SortedSet()
            self._edges[source] = targets

        targets.add(target)
        self._nodes.add(source)
        self._nodes.add(target)

    def dependencies(self, source: int) -> List[int]:
        """List the direct dependencies of ``source`` in ascending order."""
        return list(self._edges.get(source, []))

    def __contains__(self, node: int) -> bool:
        return node in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def flatten(self, visit: Callable[[int], None]) -> None:
        """
        Call ``visit`` on every node such that its dependencies are visited first.

        Every node is visited exactly once. The edges closing a cycle are
        silently skipped so that the cycles need to be detected by the caller.
        The order is deterministic: the nodes are explored in ascending order.

        >>> graph = Graph()
        >>> graph.add(1, 2)
        >>> graph.add(2, 3)
        >>> graph.add(0, 3)
        >>> order = []
        >>> graph.flatten(order.append)
        >>> order
        [3, 0, 2, 1]
        """
        visited = set()  # type: Set[int]

        for start in self._nodes:
            if start in visited:
                continue

            visited.add(start)

            stack = [
                (start, iter(self._edges.get(start, [])))
            ]  # type: List[Tuple[int, Iterator[int]]]

            while len(stack) > 0:
                node, dependencies = stack[-1]
                dependency = next(dependencies, None)

                if dependency is None:
                    stack.pop()
                    visit(node)

                elif dependency not in visited:
                    visited.add(dependency)
                    stack.append(
                        (dependency, iter(self._edges.get(dependency, [])))
                    )
