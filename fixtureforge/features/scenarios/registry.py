"""Scenario registration and dependency ordering."""

from __future__ import annotations

import inspect
from collections.abc import Iterable, Iterator
from types import ModuleType

from fixtureforge.core.exceptions import ScenarioGraphError
from fixtureforge.features.scenarios.base import KEY_PATTERN, Scenario


class ScenarioRegistry:
    """Ordered set of scenario classes forming a forest by parent links.

    Scenarios whose parent is not registered are allowed: the parent's
    snapshot file must already exist when they are generated.
    """

    def __init__(self, scenarios: Iterable[type[Scenario]] = ()) -> None:
        self._scenarios: list[type[Scenario]] = []
        self._by_key: dict[str, type[Scenario]] = {}
        for scenario in scenarios:
            self.add(scenario)

    def add(self, scenario: type[Scenario]) -> None:
        """Register a scenario class.

        Raises:
            ScenarioGraphError: If the key is missing, invalid or duplicated,
                or the parent chain is cyclic.
        """
        if inspect.isabstract(scenario):
            raise ScenarioGraphError(
                f"Scenario {scenario.__name__} is abstract and cannot be generated",
                details={"scenario": scenario.__name__},
            )
        key = getattr(scenario, "key", None)
        if not isinstance(key, str) or not KEY_PATTERN.match(key):
            raise ScenarioGraphError(
                f"Scenario {scenario.__name__} has an invalid key {key!r}",
                details={"scenario": scenario.__name__, "key": key},
            )
        if key in self._by_key:
            raise ScenarioGraphError(
                f"Scenario key '{key}' is declared by both "
                f"{self._by_key[key].__name__} and {scenario.__name__}",
                details={"key": key},
            )
        scenario.ancestors()

        self._scenarios.append(scenario)
        self._by_key[key] = scenario

    def register(self, scenario: type[Scenario]) -> type[Scenario]:
        """Class decorator form of add()."""
        self.add(scenario)
        return scenario

    def get(self, key: str) -> type[Scenario] | None:
        return self._by_key.get(key)

    @property
    def keys(self) -> list[str]:
        return [s.key for s in self._scenarios]

    def ordered(self) -> list[type[Scenario]]:
        """Scenarios with every parent before its children.

        Declaration order is kept wherever the parent links allow it.
        """
        result: list[type[Scenario]] = []
        emitted: set[str] = set()

        def visit(scenario: type[Scenario]) -> None:
            if scenario.key in emitted:
                return
            parent = scenario.parent
            if parent is not None and parent.key in self._by_key:
                if self._by_key[parent.key] is not parent:
                    raise ScenarioGraphError(
                        f"Scenario '{scenario.key}' names a parent class that differs "
                        f"from the one registered under '{parent.key}'",
                        details={"scenario_key": scenario.key, "parent_key": parent.key},
                    )
                visit(parent)
            emitted.add(scenario.key)
            result.append(scenario)

        for scenario in self._scenarios:
            visit(scenario)
        return result

    def descendants(self, key: str) -> list[type[Scenario]]:
        """Registered scenarios that have key among their ancestors."""
        return [s for s in self._scenarios if key in {a.key for a in s.ancestors()}]

    def subset(self, keys: Iterable[str]) -> ScenarioRegistry:
        """Named scenarios plus all of their descendants.

        Descendants are included because they build on the regenerated
        snapshots.

        Raises:
            ScenarioGraphError: If a key is not registered.
        """
        wanted: set[str] = set()
        for key in keys:
            if key not in self._by_key:
                raise ScenarioGraphError(
                    f"Unknown scenario key '{key}'. Known keys: {self.keys}",
                    details={"key": key},
                )
            wanted.add(key)
            wanted.update(s.key for s in self.descendants(key))
        return ScenarioRegistry(s for s in self._scenarios if s.key in wanted)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __iter__(self) -> Iterator[type[Scenario]]:
        return iter(self._scenarios)

    def __len__(self) -> int:
        return len(self._scenarios)


def discover_scenarios(module: ModuleType) -> ScenarioRegistry:
    """Collect the scenarios a module exposes.

    Uses the module's ``SCENARIOS`` sequence when present, otherwise every
    concrete Scenario subclass defined in the module, in definition order.
    """
    declared = getattr(module, "SCENARIOS", None)
    if declared is not None:
        return declared if isinstance(declared, ScenarioRegistry) else ScenarioRegistry(declared)

    found = [
        obj
        for obj in vars(module).values()
        if inspect.isclass(obj)
        and issubclass(obj, Scenario)
        and not inspect.isabstract(obj)
        and obj.__module__ == module.__name__
    ]
    return ScenarioRegistry(found)
