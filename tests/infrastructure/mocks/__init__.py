from tests.infrastructure.mocks.process_mocks import (
    FakeClock,
    RecordingSink,
    RecordingSleep,
    ScriptedHandle,
    ScriptedSpawner,
)

__all__ = [
    "FakeClock",
    "RecordingSink",
    "RecordingSleep",
    "ScriptedHandle",
    "ScriptedSpawner",
]
