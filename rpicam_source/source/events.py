from dataclasses import dataclass
from typing import Union

from rpicam_source.errors import SpawnFailure


@dataclass(frozen=True)
class ProcessSpawned:
    handle_id: int


@dataclass(frozen=True)
class SpawnFailed:
    error: SpawnFailure


@dataclass(frozen=True)
class DataReceived:
    handle_id: int
    data: bytes
    arrival_ns: int


@dataclass(frozen=True)
class ProcessExited:
    handle_id: int
    exit_code: int


Event = Union[ProcessSpawned, SpawnFailed, DataReceived, ProcessExited]
