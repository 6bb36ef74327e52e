import asyncio
import os
import pprint
import shlex
import sys
from abc import ABC
from abc import abstractmethod
from typing import AsyncIterator
from typing import Mapping

from rich.text import Text

from devenvd.core.config import Config
from devenvd.core.runtime_data_types import ContainerHealth
from devenvd.core.runtime_data_types import ContainerInspection
from devenvd.core.runtime_data_types import ExecResult
from devenvd.core.runtime_data_types import RawContainerStats
from devenvd.core.utils.process_command_output import iterate_output_lines
from devenvd.core.utils.process_command_output import process_output_till_done
from devenvd.env_description.env_types import BuildSpec
from devenvd.env_description.env_types import HealthCheckSpec
from devenvd.env_description.env_types import NetworkSpec
from devenvd.env_description.env_types import PortMapping
from devenvd.env_description.env_types import ResourceLimits
from devenvd.env_description.env_types import RestartPolicy
from devenvd.env_description.env_types import VolumeSpec
from devenvd.helpers.jobs_result import JobResult
from devenvd.helpers.jobs_result import OperationError
from devenvd.helpers.jobs_result import failure_text
from devenvd.output.console import CONSOLE
from devenvd.output.styles import Style

# `docker exec` own failure, command exit codes are passed through
EXEC_RUNTIME_FAILURE = 125


def malformed_output(stdout: bytes, stderr: bytes, args: list[str], returncode: int, error: Exception) -> OperationError:
    return OperationError(
        f'Malformed runtime output ({error!r})\n{failure_text(stdout, stderr)}', shlex.join(args), returncode
    )


class RuntimeInterface(ABC):
    """
    Boundary over container engine.
    Every call is one runtime command, failures come back as OperationError with raw engine output.
    """

    @abstractmethod
    async def runtime_version(self) -> str | OperationError:
        ...

    @abstractmethod
    async def pull_image(self, image: str) -> JobResult | OperationError:
        ...

    @abstractmethod
    async def build_image(self, tag: str, build: BuildSpec) -> JobResult | OperationError:
        ...

    @abstractmethod
    async def create_network(self, network: NetworkSpec) -> JobResult | OperationError:
        ...

    @abstractmethod
    async def create_volume(self, volume: VolumeSpec) -> JobResult | OperationError:
        ...

    @abstractmethod
    async def run_service(self,
                          name: str,
                          image: str,
                          ports: tuple[PortMapping, ...] = (),
                          environment: Mapping[str, str] | None = None,
                          volumes: tuple[str, ...] = (),
                          networks: tuple[str, ...] = (),
                          resources: ResourceLimits | None = None,
                          restart: RestartPolicy | None = None,
                          command: tuple[str, ...] = (),
                          labels: Mapping[str, str] | None = None,
                          health_check: HealthCheckSpec | None = None,
                          detach: bool = True,
                          auto_remove: bool = False,
                          ) -> str | OperationError:
        ...

    @abstractmethod
    async def start_service(self, name: str) -> JobResult | OperationError:
        ...

    @abstractmethod
    async def stop_service(self, name: str) -> JobResult | OperationError:
        ...

    @abstractmethod
    async def remove_service(self, name: str) -> JobResult | OperationError:
        ...

    @abstractmethod
    async def remove_network(self, name: str) -> JobResult | OperationError:
        ...

    @abstractmethod
    async def remove_volume(self, name: str) -> JobResult | OperationError:
        ...

    @abstractmethod
    async def inspect_state(self, name: str) -> ContainerInspection | OperationError:
        ...

    @abstractmethod
    async def inspect_health(self, name: str) -> ContainerHealth | OperationError:
        ...

    @abstractmethod
    async def fetch_stats(self, name: str) -> RawContainerStats | OperationError:
        ...

    @abstractmethod
    async def scale_service(self, name: str, replicas: int) -> JobResult | OperationError:
        ...

    @abstractmethod
    async def exec_in_service(self, name: str, command: list[str], user: str | None = None) -> ExecResult | OperationError:
        ...

    @abstractmethod
    async def service_logs(self, name: str, tail: int | None = None, since: str | None = None) -> str | OperationError:
        ...

    @abstractmethod
    def stream_logs(self, name: str) -> AsyncIterator[str]:
        ...


class RuntimeShellInterface(RuntimeInterface):
    def __init__(self, binary: str = 'docker', config=Config):
        self.config = config()
        self.binary = self.config.runtime_binary or binary
        self.verbose_runtime_commands = self.config.verbose_runtime_commands
        self.debug_runtime_commands = self.config.debug_runtime_commands
        self.execution_envs = None
        if self.config.docker_host:
            self.execution_envs = os.environ | {'DOCKER_HOST': self.config.docker_host}

    def _echo(self, cmd: str) -> None:
        debug = f'; with {pprint.pformat(self.execution_envs)}' if self.debug_runtime_commands else ''
        CONSOLE.print(Text(f'{cmd}', style=Style.context) + ' ' + Text(f'{debug}', style=Style.regular))

    async def _execute(self, args: list[str], verbose: bool | None = None) -> tuple[int, bytes, bytes]:
        sys.stdout.flush()
        process = await asyncio.create_subprocess_shell(
            cmd := shlex.join([self.binary, *args]),
            env=self.execution_envs,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        self._echo(cmd)
        if verbose is None:
            verbose = self.verbose_runtime_commands
        stdout, stderr = await process_output_till_done(process, verbose)
        return process.returncode, stdout, stderr

    async def _run_job(self, args: list[str]) -> JobResult | OperationError:
        returncode, stdout, stderr = await self._execute(args)
        if returncode != 0:
            return OperationError(failure_text(stdout, stderr), shlex.join(args), returncode)
        return JobResult.GOOD

    async def runtime_version(self) -> str | OperationError:
        args = ['version', '--format', '{{.Server.Version}}']
        returncode, stdout, stderr = await self._execute(args, verbose=False)
        if returncode != 0:
            return OperationError(failure_text(stdout, stderr), shlex.join(args), returncode)
        return stdout.decode('utf-8').strip()

    async def pull_image(self, image: str) -> JobResult | OperationError:
        return await self._run_job(['pull', image])

    async def build_image(self, tag: str, build: BuildSpec) -> JobResult | OperationError:
        return await self._run_job(['build', '--tag', tag, '--file', build.dockerfile, build.context])

    async def create_network(self, network: NetworkSpec) -> JobResult | OperationError:
        args = ['network', 'create', '--driver', network.driver]
        if network.subnet:
            args += ['--subnet', network.subnet]
        if network.gateway:
            args += ['--gateway', network.gateway]
        return await self._run_job(args + [network.name])

    async def create_volume(self, volume: VolumeSpec) -> JobResult | OperationError:
        args = ['volume', 'create']
        if volume.driver:
            args += ['--driver', volume.driver]
        return await self._run_job(args + [volume.name])

    async def run_service(self,
                          name: str,
                          image: str,
                          ports: tuple[PortMapping, ...] = (),
                          environment: Mapping[str, str] | None = None,
                          volumes: tuple[str, ...] = (),
                          networks: tuple[str, ...] = (),
                          resources: ResourceLimits | None = None,
                          restart: RestartPolicy | None = None,
                          command: tuple[str, ...] = (),
                          labels: Mapping[str, str] | None = None,
                          health_check: HealthCheckSpec | None = None,
                          detach: bool = True,
                          auto_remove: bool = False,
                          ) -> str | OperationError:
        args = ['run', '--name', name]
        if detach:
            args += ['--detach']
        if auto_remove:
            args += ['--rm']
        for port in ports:
            args += ['--publish', port.as_flag()]
        for key, value in (environment or {}).items():
            args += ['--env', f'{key}={value}']
        for mount in volumes:
            args += ['--volume', mount]
        for network in networks:
            args += ['--network', network]
        if resources is not None and resources.memory:
            args += ['--memory', resources.memory]
        if resources is not None and resources.cpus:
            args += ['--cpus', resources.cpus]
        if restart is not None and not auto_remove:
            args += ['--restart', restart.value]
        for key, value in (labels or {}).items():
            args += ['--label', f'{key}={value}']
        if health_check is not None:
            args += health_check.as_flags()
        args += [image, *command]

        returncode, stdout, stderr = await self._execute(args)
        if returncode != 0:
            return OperationError(failure_text(stdout, stderr), shlex.join(args), returncode)
        return stdout.decode('utf-8').strip()

    async def start_service(self, name: str) -> JobResult | OperationError:
        return await self._run_job(['start', name])

    async def stop_service(self, name: str) -> JobResult | OperationError:
        return await self._run_job(['stop', name])

    async def remove_service(self, name: str) -> JobResult | OperationError:
        return await self._run_job(['rm', '--force', name])

    async def remove_network(self, name: str) -> JobResult | OperationError:
        return await self._run_job(['network', 'rm', name])

    async def remove_volume(self, name: str) -> JobResult | OperationError:
        return await self._run_job(['volume', 'rm', name])

    async def inspect_state(self, name: str) -> ContainerInspection | OperationError:
        args = ['inspect', '--type', 'container', '--format', '{{json .}}', name]
        returncode, stdout, stderr = await self._execute(args, verbose=False)
        if returncode != 0:
            return OperationError(failure_text(stdout, stderr), shlex.join(args), returncode)
        try:
            return ContainerInspection.from_json(name, stdout.decode('utf-8'))
        except (ValueError, IndexError, AttributeError) as error:
            return malformed_output(stdout, stderr, args, returncode, error)

    async def inspect_health(self, name: str) -> ContainerHealth | OperationError:
        inspection = await self.inspect_state(name)
        if inspection == JobResult.BAD:
            return inspection
        return inspection.health

    async def fetch_stats(self, name: str) -> RawContainerStats | OperationError:
        args = ['stats', '--no-stream', '--format', '{{json .}}', name]
        returncode, stdout, stderr = await self._execute(args, verbose=False)
        if returncode != 0 or not stdout.strip():
            return OperationError(failure_text(stdout, stderr), shlex.join(args), returncode)
        try:
            return RawContainerStats.from_json(name, stdout.decode('utf-8'))
        except (ValueError, IndexError, AttributeError) as error:
            return malformed_output(stdout, stderr, args, returncode, error)

    async def scale_service(self, name: str, replicas: int) -> JobResult | OperationError:
        return await self._run_job(['service', 'scale', f'{name}={replicas}'])

    async def exec_in_service(self, name: str, command: list[str], user: str | None = None) -> ExecResult | OperationError:
        CONSOLE.print(Text(f'Executing {shlex.join(command)} in {name} container', style=Style.info))
        args = ['exec']
        if user:
            args += ['--user', user]
        args += [name, *command]
        returncode, stdout, stderr = await self._execute(args)
        if returncode == EXEC_RUNTIME_FAILURE:
            return OperationError(failure_text(stdout, stderr), shlex.join(args), returncode)
        return ExecResult(
            stdout=stdout.decode('utf-8', 'replace'),
            stderr=stderr.decode('utf-8', 'replace'),
            exit_code=returncode,
        )

    async def service_logs(self, name: str, tail: int | None = None, since: str | None = None) -> str | OperationError:
        args = ['logs']
        if tail is not None:
            args += ['--tail', str(tail)]
        if since:
            args += ['--since', since]
        args += [name]
        returncode, stdout, stderr = await self._execute(args, verbose=False)
        if returncode != 0:
            return OperationError(failure_text(stdout, stderr), shlex.join(args), returncode)
        return (stdout + stderr).decode('utf-8', 'replace')

    async def stream_logs(self, name: str) -> AsyncIterator[str]:
        process = await asyncio.create_subprocess_shell(
            cmd := shlex.join([self.binary, 'logs', '--follow', name]),
            env=self.execution_envs,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        self._echo(cmd)
        async for line in iterate_output_lines(process):
            yield line
