"""
SHOPSEED — Phase dependency graph.
Execution order is derived from declared prerequisites, never from the
order in which phases happen to be listed.
"""

from collections.abc import Iterable, Sequence
from typing import Protocol

from seeding.errors import DependencyError


class _Node(Protocol):
    entity: str
    requires: tuple[str, ...]


class DependencyGraph:
    """Kahn's algorithm over phases; ties keep declaration order."""

    def __init__(self, phases: Iterable[_Node]):
        self.phases = list(phases)
        self.by_entity: dict[str, _Node] = {}
        for phase in self.phases:
            if phase.entity in self.by_entity:
                raise DependencyError(f"phase '{phase.entity}' declared twice")
            self.by_entity[phase.entity] = phase

        for phase in self.phases:
            for parent in phase.requires:
                if parent not in self.by_entity:
                    raise DependencyError(
                        f"phase '{phase.entity}' requires unknown phase '{parent}'"
                    )
                if parent == phase.entity:
                    raise DependencyError(f"phase '{phase.entity}' requires itself")

    def order(self) -> list:
        """Return phases parent→child. Raises DependencyError on a cycle."""
        position = {p.entity: i for i, p in enumerate(self.phases)}
        deps = {p.entity: set(p.requires) for p in self.phases}
        rev: dict[str, set[str]] = {p.entity: set() for p in self.phases}
        for p in self.phases:
            for parent in p.requires:
                rev[parent].add(p.entity)

        ready = sorted((e for e, d in deps.items() if not d), key=position.get)
        out = []
        while ready:
            entity = ready.pop(0)
            out.append(self.by_entity[entity])
            for child in rev[entity]:
                deps[child].discard(entity)
                if not deps[child]:
                    ready.append(child)
            ready.sort(key=position.get)

        if len(out) != len(self.phases):
            stuck = sorted((e for e, d in deps.items() if d), key=position.get)
            raise DependencyError(f"cycle detected among phases: {', '.join(stuck)}")
        return out

    def ancestors(self, entity: str) -> set[str]:
        """Every phase that must complete before *entity* may start."""
        seen: set[str] = set()
        stack = list(self.by_entity[entity].requires)
        while stack:
            parent = stack.pop()
            if parent not in seen:
                seen.add(parent)
                stack.extend(self.by_entity[parent].requires)
        return seen

    def subset(self, targets: Sequence[str]) -> list:
        """Ordered phases needed to run *targets* (targets included)."""
        wanted: set[str] = set()
        for t in targets:
            if t not in self.by_entity:
                raise DependencyError(f"unknown phase '{t}'")
            wanted.add(t)
            wanted |= self.ancestors(t)
        return [p for p in self.order() if p.entity in wanted]
