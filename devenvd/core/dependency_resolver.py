from enum import Enum
from enum import auto

from devenvd.env_description.env_types import EnvironmentConfig
from devenvd.errors.config import CyclicDependencyError


class _Mark(Enum):
    UNVISITED = auto()
    VISITING = auto()
    VISITED = auto()


def services_dependencies(config: EnvironmentConfig) -> dict[str, list[str]]:
    return {service.name: list(service.dependencies) for service in config.services}


def topological_sort(services_dict: dict[str, list[str]]) -> list[str]:
    """
    Depth-first ordering: every service comes after all of its dependencies,
    unrelated services keep declaration order.
    Raises CyclicDependencyError with the service that closes the cycle.
    """
    marks = {service: _Mark.UNVISITED for service in services_dict}
    ordered: list[str] = []
    path: list[str] = []

    def visit(service: str) -> None:
        if marks.get(service) == _Mark.VISITED:
            return
        if marks.get(service) == _Mark.VISITING:
            cycle = path[path.index(service):] + [service]
            raise CyclicDependencyError(service, cycle)

        marks[service] = _Mark.VISITING
        path.append(service)
        for dependency in services_dict.get(service, []):
            visit(dependency)
        path.pop()
        marks[service] = _Mark.VISITED
        ordered.append(service)

    for service in services_dict:
        visit(service)
    return ordered


def group_by_levels(topologically_sorted_services: list[str], services_dict: dict[str, list[str]]) -> list[list[str]]:
    service_levels = []
    service_to_level = {}

    for service in topologically_sorted_services:
        max_dependency_level = -1
        for dependency in services_dict[service]:
            if dependency in service_to_level:
                max_dependency_level = max(max_dependency_level, service_to_level[dependency])
        current_level = max_dependency_level + 1
        if current_level >= len(service_levels):
            service_levels.append([])
        service_levels[current_level].append(service)
        service_to_level[service] = current_level

    return service_levels


class DependencyResolver:
    def __init__(self, config: EnvironmentConfig):
        self._services = services_dependencies(config)
        self._start_order = topological_sort(self._services)

    def start_order(self) -> list[str]:
        return list(self._start_order)

    def stop_order(self) -> list[str]:
        return list(reversed(self._start_order))

    def levels(self) -> list[list[str]]:
        return group_by_levels(self._start_order, self._services)
