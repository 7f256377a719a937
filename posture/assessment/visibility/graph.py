"""Static dependency graph over gate references.

Nodes are question ids, fact keys and suites (``suite:<id>``). An edge runs
from every key a gate reads to the question or suite the gate controls, and
from each suite to its member questions. A cycle means some question or
suite can never become visible, which is a content error to report before
any evaluation happens.
"""

from collections import defaultdict
from collections.abc import Iterator

from posture.assessment.models import QuestionBank

SUITE_PREFIX = "suite:"


def suite_node(suite_id: str) -> str:
    return f"{SUITE_PREFIX}{suite_id}"


class DependencyGraph:
    """Adjacency lists keyed by node, with edges in declaration order."""

    def __init__(self) -> None:
        self._edges: dict[str, list[str]] = defaultdict(list)

    def add_edge(self, source: str, target: str) -> None:
        if target not in self._edges[source]:
            self._edges[source].append(target)

    def successors(self, node: str) -> list[str]:
        return list(self._edges.get(node, []))

    @property
    def nodes(self) -> list[str]:
        seen: dict[str, None] = {}
        for source, targets in self._edges.items():
            seen.setdefault(source, None)
            for target in targets:
                seen.setdefault(target, None)
        return list(seen)

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._edges.values())

    @classmethod
    def from_bank(cls, bank: QuestionBank) -> "DependencyGraph":
        graph = cls()
        for question in bank.questions:
            for dependency in question.conditions.references():
                graph.add_edge(dependency, question.id)
        for suite in bank.suites:
            node = suite_node(suite.id)
            for gate in suite.gates:
                for dependency in gate.references():
                    graph.add_edge(dependency, node)
            for member_id in suite.question_ids:
                graph.add_edge(node, member_id)
        return graph

    def find_cycles(self) -> list[list[str]]:
        """Find cycles by depth-first search over an explicit stack.

        Each cycle is returned once as a closed path (first node repeated
        at the end), rotated to start at its smallest node so results are
        stable across declaration orders. Long dependency chains do not
        touch the interpreter recursion limit.
        """
        visited: set[str] = set()
        on_stack: set[str] = set()
        path: list[str] = []
        cycles: list[list[str]] = []
        seen_cycles: set[tuple[str, ...]] = set()

        for root in list(self._edges):
            if root in visited:
                continue

            visited.add(root)
            on_stack.add(root)
            path.append(root)
            stack: list[tuple[str, Iterator[str]]] = [(root, iter(self._edges.get(root, [])))]

            while stack:
                node, successors = stack[-1]
                successor = next(successors, None)
                if successor is None:
                    stack.pop()
                    path.pop()
                    on_stack.discard(node)
                    continue

                if successor in on_stack:
                    loop = path[path.index(successor):]
                    start = loop.index(min(loop))
                    canonical = tuple(loop[start:] + loop[:start])
                    if canonical not in seen_cycles:
                        seen_cycles.add(canonical)
                        cycles.append([*canonical, canonical[0]])
                elif successor not in visited:
                    visited.add(successor)
                    on_stack.add(successor)
                    path.append(successor)
                    stack.append((successor, iter(self._edges.get(successor, []))))

        return cycles


def detect_cycles(bank: QuestionBank) -> list[list[str]]:
    """Cycles in the bank's gate dependencies, empty when acyclic."""
    return DependencyGraph.from_bank(bank).find_cycles()


def format_cycle(cycle: list[str]) -> str:
    return "Cycle detected: " + " → ".join(cycle)
