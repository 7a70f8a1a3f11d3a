from abc import ABC, abstractmethod
from typing import Self
from pathlib import Path
from dataclasses import dataclass

from .commands import RemoteCommand


@dataclass
class CommandResult:
    stdout:     str
    stderr:     str
    exitStatus: int

    @property
    def ok(self) -> bool:
        return self.exitStatus == 0


class IRemote(ABC):
    @abstractmethod
    def getDescriptor(self) -> str:
        ...

    @abstractmethod
    def run(self, command: RemoteCommand, check: bool = True) -> CommandResult:
        """Run a command on the remote host.

        With check set a non-zero exit status raises RemoteCommandFailed,
        otherwise the result is returned as is.
        """
        ...

    @abstractmethod
    def download(self, remotePath: str, localPath: Path) -> None:
        ...

    @abstractmethod
    def upload(self, localPath: Path, remotePath: str) -> None:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
