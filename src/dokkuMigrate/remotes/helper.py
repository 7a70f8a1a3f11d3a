import logging

from typing import Callable

from dokkuMigrate.definitions.backupConfig import ServerProfile

from .IRemote   import IRemote
from .sshRemote import SshRemote

RemoteFactory = Callable[[ServerProfile], IRemote]

class RemoteHelper:
    """Hands out one remote per server profile and closes them when done"""

    def __init__(self, factory: RemoteFactory = SshRemote):
        self.m_logger  = logging.getLogger(__name__)
        self.m_factory = factory
        self.m_remotes: dict[str, IRemote] = {}

    def getRemote(self, profile: ServerProfile) -> IRemote:
        remote = self.m_remotes.get(profile.name)
        if remote is None:
            remote = self.m_factory(profile)
            self.m_remotes[profile.name] = remote
            self.m_logger.debug(f'Defined remote: {remote}')
        return remote

    def closeAll(self) -> None:
        for remote in self.m_remotes.values():
            remote.close()
        self.m_remotes.clear()
