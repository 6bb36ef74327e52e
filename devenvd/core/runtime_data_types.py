import json
from dataclasses import dataclass
from enum import Enum


class ContainerState(str, Enum):
    CREATED = 'created'
    STARTING = 'starting'
    RUNNING = 'running'
    PAUSED = 'paused'
    RESTARTING = 'restarting'
    REMOVING = 'removing'
    EXITED = 'exited'
    DEAD = 'dead'

    @classmethod
    def from_runtime(cls, raw: str) -> 'ContainerState':
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.DEAD

    @property
    def is_down(self) -> bool:
        return self in (ContainerState.EXITED, ContainerState.DEAD)


class ContainerHealth(str, Enum):
    HEALTHY = 'healthy'
    UNHEALTHY = 'unhealthy'
    STARTING = 'starting'
    NONE = 'none'

    @classmethod
    def from_runtime(cls, raw: str) -> 'ContainerHealth':
        raw = raw.strip().lower()
        if raw in ('', '<no value>', 'none'):
            return cls.NONE
        try:
            return cls(raw)
        except ValueError:
            return cls.UNHEALTHY


@dataclass
class ContainerInspection:
    name: str
    state: ContainerState
    exit_code: int | None
    restart_count: int
    health: ContainerHealth
    started_at: str | None = None
    error: str | None = None

    @classmethod
    def from_json(cls, name: str, json_inspect: str) -> 'ContainerInspection':
        inspect = json.loads(json_inspect)
        if isinstance(inspect, list):
            inspect = inspect[0]
        state = inspect.get('State', {})
        health = state.get('Health') or {}
        return cls(
            name=name,
            state=ContainerState.from_runtime(state.get('Status', '')),
            exit_code=state.get('ExitCode'),
            restart_count=inspect.get('RestartCount', 0),
            health=ContainerHealth.from_runtime(health.get('Status', '')),
            started_at=state.get('StartedAt'),
            error=state.get('Error') or None,
        )


@dataclass
class RawContainerStats:
    """
    Stats as `docker stats --no-stream --format '{{json .}}'` prints them:
    cpu "0.50%", memory "10MiB / 1GiB", net "1.2kB / 3kB", block "0B / 0B", pids "5".
    """
    name: str
    cpu: str
    memory: str
    network: str
    block: str
    pids: str

    @classmethod
    def from_json(cls, name: str, json_stats: str) -> 'RawContainerStats':
        stats = json.loads(json_stats.strip().splitlines()[0])
        return cls(
            name=name,
            cpu=stats.get('CPUPerc', ''),
            memory=stats.get('MemUsage', ''),
            network=stats.get('NetIO', ''),
            block=stats.get('BlockIO', ''),
            pids=stats.get('PIDs', ''),
        )


@dataclass
class ExecResult:
    stdout: str
    stderr: str
    exit_code: int

    def as_json(self) -> dict:
        return {
            'stdout': self.stdout,
            'stderr': self.stderr,
            'exit_code': self.exit_code,
        }
