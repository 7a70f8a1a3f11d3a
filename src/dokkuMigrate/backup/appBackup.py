import time
import logging

from pathlib import Path

from dokkuMigrate.remotes.IRemote import IRemote
from dokkuMigrate.remotes import commands
from dokkuMigrate.definitions.backupMeta import AppMeta

VHOST_FILE    = 'VHOST'
ENV_FILE      = 'ENV'
STORAGE_FILE  = 'storage.tar.gz'
METADATA_FILE = 'metadata.json'

NO_VHOST = '# No VHOST file\n'
NO_ENV   = '# No ENV file\n'

def appDir(serverDir: Path, app: str) -> Path:
    return serverDir.joinpath('apps', commands.checkName(app))


class AppBackupHelper:
    """Captures VHOST, ENV and persistent storage of a single dokku app"""

    def __init__(self, remote: IRemote, serverName: str):
        self.m_logger     = logging.getLogger(__name__)
        self.m_remote     = remote
        self.m_serverName = serverName

    def backup(self, app: str, serverDir: Path) -> Path:
        self.m_logger.info(f"Backing up app {app}...")
        start = time.time()

        localAppDir = appDir(serverDir, app)
        localAppDir.mkdir(parents=True, exist_ok=True)

        # Only a finished backup has a metadata file
        localAppDir.joinpath(METADATA_FILE).unlink(missing_ok=True)

        self.fetchArtifact(app, VHOST_FILE, localAppDir, NO_VHOST)
        self.fetchArtifact(app, ENV_FILE, localAppDir, NO_ENV)
        self.backupStorage(app, localAppDir)

        AppMeta(app=app, server=self.m_serverName).toFile(localAppDir.joinpath(METADATA_FILE))

        self.m_logger.info(f"Backup of app {app} completed: took {time.time() - start:.2f} seconds")
        return localAppDir

    def fetchArtifact(self, app: str, name: str, localAppDir: Path, placeholder: str) -> None:
        remotePath = f'{commands.appHome(app)}/{name}'
        result     = self.m_remote.run(commands.readFile(remotePath), check=False)
        target     = localAppDir.joinpath(name)
        if result.ok:
            target.write_text(result.stdout)
        else:
            self.m_logger.info(f"No {name} file for {app}")
            target.write_text(placeholder)

    def backupStorage(self, app: str, localAppDir: Path) -> None:
        self.m_logger.info(f"Checking persistent storage for {app}...")
        localArchive = localAppDir.joinpath(STORAGE_FILE)
        storageDir   = commands.storageDir(app)

        probe = self.m_remote.run(commands.isDirectory(storageDir), check=False)
        if not probe.ok:
            self.m_logger.info(f"No persistent storage found for {app}.")
            localArchive.unlink(missing_ok=True)
            return

        remoteArchive = commands.storageTmpArchive(app)
        self.m_remote.run(commands.createArchive(storageDir, remoteArchive))
        try:
            partial = localArchive.with_name(STORAGE_FILE + '.part')
            self.m_remote.download(remoteArchive, partial)
            partial.replace(localArchive)
        finally:
            self.m_remote.run(commands.removeFile(remoteArchive), check=False)

        self.m_logger.info(f"Persistent storage for {app} backed up ({localArchive.stat().st_size} bytes).")
