import re

from devenvd.core.dependency_resolver import services_dependencies
from devenvd.core.dependency_resolver import topological_sort
from devenvd.env_description.env_types import EnvironmentConfig
from devenvd.errors.config import EnvironmentConfigError

PROJECT_NAME_PATTERN = re.compile(r'^[a-z0-9][a-z0-9_.-]*$')


def validate_environment_config(config: EnvironmentConfig) -> None:
    if not config.project_name:
        raise EnvironmentConfigError('Project name is required')
    if not PROJECT_NAME_PATTERN.match(config.project_name):
        raise EnvironmentConfigError(
            f'Project name {config.project_name!r} must consist of lowercase letters, digits, "_", "." or "-"'
        )
    if not config.services:
        raise EnvironmentConfigError('At least one service is required')

    seen = set()
    for service in config.services:
        if not service.name:
            raise EnvironmentConfigError('Service name is required')
        if service.name in seen:
            raise EnvironmentConfigError(f'Duplicate service name: {service.name}')
        seen.add(service.name)
        if not service.image and service.build is None:
            raise EnvironmentConfigError(f'Service {service.name} has no image or build')

    for service in config.services:
        if len(set(service.dependencies)) != len(service.dependencies):
            raise EnvironmentConfigError(f'Service {service.name} lists a dependency more than once')
        for dependency in service.dependencies:
            if dependency not in seen:
                raise EnvironmentConfigError(
                    f'Service {service.name} depends on unknown service {dependency}'
                )

    network_names = [network.name for network in config.networks]
    if len(set(network_names)) != len(network_names):
        raise EnvironmentConfigError('Duplicate network name')
    volume_names = [volume.name for volume in config.volumes]
    if len(set(volume_names)) != len(volume_names):
        raise EnvironmentConfigError('Duplicate volume name')

    topological_sort(services_dependencies(config))
