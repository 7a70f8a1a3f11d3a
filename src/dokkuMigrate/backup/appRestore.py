import json
import time
import logging

from pathlib import Path
from dacite  import DaciteError

from dokkuMigrate.remotes.IRemote import IRemote
from dokkuMigrate.remotes import commands
from dokkuMigrate.definitions.backupConfig import DEFAULT_STORAGE_OWNER
from dokkuMigrate.definitions.errors import BackupNotFound
from dokkuMigrate.definitions.backupMeta import AppMeta

from .appBackup import appDir, VHOST_FILE, ENV_FILE, STORAGE_FILE, METADATA_FILE


class AppRestoreHelper:
    """Recreates a dokku app from a local backup record"""

    def __init__(self, remote: IRemote, storageOwner: str = DEFAULT_STORAGE_OWNER):
        self.m_logger       = logging.getLogger(__name__)
        self.m_remote       = remote
        self.m_storageOwner = storageOwner

    def restore(self, app: str, serverDir: Path) -> Path:
        localAppDir = appDir(serverDir, app)
        if not localAppDir.is_dir():
            raise BackupNotFound(localAppDir)

        self.m_logger.info(f"Restoring app {app}...")
        start = time.time()
        self.readMeta(app, localAppDir)

        # Everything below needs the app to exist
        self.m_remote.run(commands.appsCreate(app))

        self.restoreDomains(app, localAppDir)
        self.restoreConfig(app, localAppDir)
        self.restoreStorage(app, localAppDir)

        self.m_logger.info(f"Restore of app {app} completed: took {time.time() - start:.2f} seconds")
        return localAppDir

    def readMeta(self, app: str, localAppDir: Path) -> AppMeta|None:
        metaPath = localAppDir.joinpath(METADATA_FILE)
        if not metaPath.is_file():
            self.m_logger.warning(f"Backup of {app} has no {METADATA_FILE}, it may be incomplete")
            return None
        try:
            meta = AppMeta.fromFile(metaPath)
        except (json.JSONDecodeError, DaciteError) as e:
            self.m_logger.warning(f"Unreadable {metaPath}: {e}")
            return None
        self.m_logger.info(f"Backup of {app} was taken from {meta.server} at {meta.backup_timestamp}")
        return meta

    def restoreDomains(self, app: str, localAppDir: Path) -> None:
        vhostPath = localAppDir.joinpath(VHOST_FILE)
        if not vhostPath.is_file():
            return
        domains = commands.parseVhost(vhostPath.read_text())
        if not domains:
            self.m_logger.debug(f"No domains to restore for {app}")
            return
        self.m_logger.info(f"Adding domains {domains} to {app}")
        self.m_remote.run(commands.domainsAdd(app, domains))

    def restoreConfig(self, app: str, localAppDir: Path) -> None:
        envPath = localAppDir.joinpath(ENV_FILE)
        if not envPath.is_file():
            return
        pairs = commands.parseEnv(envPath.read_text())
        if not pairs:
            self.m_logger.debug(f"No environment to restore for {app}")
            return
        self.m_logger.info(f"Setting {len(pairs)} config vars on {app}")
        self.m_remote.run(commands.configSet(app, pairs))
        self.m_remote.run(commands.configUnset(app, *commands.RESERVED_KEYS))

    def restoreStorage(self, app: str, localAppDir: Path) -> None:
        localArchive = localAppDir.joinpath(STORAGE_FILE)
        if not localArchive.is_file():
            self.m_logger.info(f"No persistent storage backup for {app}.")
            return

        self.m_logger.info(f"Restoring persistent storage for {app}...")
        remoteArchive = commands.storageTmpArchive(app)
        storageDir    = commands.storageDir(app)

        self.m_remote.upload(localArchive, remoteArchive)
        try:
            self.m_remote.run(commands.makeDirs(storageDir))
            self.m_remote.run(commands.extractArchive(remoteArchive, storageDir))
            self.m_remote.run(commands.chownRecursive(self.m_storageOwner, storageDir))
        finally:
            self.m_remote.run(commands.removeFile(remoteArchive), check=False)
