from enum import StrEnum
from pathlib import Path
from dataclasses import dataclass, field

class Status(StrEnum):
    OK     = "OK"
    FAILED = "FAILED"

@dataclass
class EntityResult:
    entity: str
    status: Status      = Status.OK
    error:  str|None    = None
    path:   Path|None   = None

    @property
    def ok(self) -> bool:
        return self.status == Status.OK

@dataclass
class BatchResult:
    """Outcome of one CLI action, one entry per processed entity"""
    action:   str
    server:   str
    entities: list[EntityResult] = field(default_factory=list)
    output:   str|None           = None

    def add(self, result: EntityResult) -> None:
        self.entities.append(result)

    @property
    def failed(self) -> list[EntityResult]:
        return [e for e in self.entities if not e.ok]

    @property
    def succeeded(self) -> list[EntityResult]:
        return [e for e in self.entities if e.ok]

    @property
    def ok(self) -> bool:
        return not self.failed
