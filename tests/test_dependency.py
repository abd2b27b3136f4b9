# pylint: disable=missing-docstring

import unittest
from typing import List

from xsd_codegen import dependency


class Test_graph(unittest.TestCase):
    def test_empty(self) -> None:
        graph = dependency.Graph()

        order = []  # type: List[int]
        graph.flatten(order.append)

        self.assertListEqual([], order)
        self.assertEqual(0, len(graph))

    def test_dependencies_come_first(self) -> None:
        graph = dependency.Graph()
        graph.add(0, 1)
        graph.add(1, 2)
        graph.add(3, 1)

        order = []  # type: List[int]
        graph.flatten(order.append)

        self.assertListEqual([2, 1, 0, 3], order)

    def test_isolated_nodes_are_visited(self) -> None:
        graph = dependency.Graph()
        graph.add_node(5)
        graph.add(1, 0)

        order = []  # type: List[int]
        graph.flatten(order.append)

        self.assertListEqual([0, 1, 5], order)
        self.assertIn(5, graph)

    def test_every_node_visited_once_in_a_cycle(self) -> None:
        graph = dependency.Graph()
        graph.add(0, 1)
        graph.add(1, 2)
        graph.add(2, 0)

        order = []  # type: List[int]
        graph.flatten(order.append)

        self.assertListEqual([2, 1, 0], order)

    def test_dependencies_sorted(self) -> None:
        graph = dependency.Graph()
        graph.add(0, 7)
        graph.add(0, 3)
        graph.add(0, 5)

        self.assertListEqual([3, 5, 7], graph.dependencies(0))
        self.assertListEqual([], graph.dependencies(3))


if __name__ == "__main__":
    unittest.main()
