import os
import json
import logging

from pathlib import Path
from dacite  import from_dict, Config, DaciteError

from dokkuMigrate.definitions.backupConfig import MigrateConfig, ServerProfile
from dokkuMigrate.definitions.errors       import ConfigMissing, ConfigInvalid, ServerNotFound

CONFIG_ENV_VAR      = 'DOKKU_MIGRATE_CONFIG'
DEFAULT_CONFIG_PATH = Path('~/.dokku-migrate/config.json')

DEFAULT_CONFIG = {
    "backup_directory": "~/dokku",
    "servers": {
        "server1": {
            "host": "dokku1.example.com",
            "user": "root",
            "ssh_key": "~/.ssh/id_rsa"
        },
        "server2": {
            "host": "dokku2.example.com",
            "user": "ubuntu",
            "ssh_key": "~/.ssh/id_rsa"
        }
    }
}

def getConfigPath(path: str|Path|None = None) -> Path:
    """Explicit path first, then the environment, then the default location"""
    if path is None:
        path = os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    return Path(path).expanduser()

def writeDefaultConfig(path: str|Path|None = None) -> bool:
    """Create the default configuration file. Returns False if it already existed"""
    configPath = getConfigPath(path)
    if configPath.exists():
        return False
    configPath.parent.mkdir(parents=True, exist_ok=True)
    configPath.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + '\n')
    return True


class ConfigHelper():

    def __init__(self, path: str|Path|None = None):
        self.m_logger = logging.getLogger(__name__)
        self.m_path   = getConfigPath(path)
        self.m_config = self.loadConfigFromFile()

        self.m_logger.debug(f'Loaded config from {self.m_path}: {len(self.m_config.servers)} servers')

    def loadConfigFromFile(self) -> MigrateConfig:
        if not self.m_path.is_file():
            raise ConfigMissing(self.m_path)

        try:
            data = json.loads(self.m_path.read_text())
        except json.JSONDecodeError as e:
            raise ConfigInvalid(f"Configuration file {self.m_path} is not valid JSON: {e}") from e

        try:
            return from_dict(data_class=MigrateConfig, data=data, config=Config(cast=[int]))
        except DaciteError as e:
            raise ConfigInvalid(f"Configuration file {self.m_path} is invalid: {e}") from e

    def getPath(self) -> Path:
        return self.m_path

    def resolve(self, serverName: str) -> ServerProfile:
        serverConfig = self.m_config.servers.get(serverName)
        if serverConfig is None:
            raise ServerNotFound(serverName)

        sshKey = Path(serverConfig.ssh_key).expanduser() if serverConfig.ssh_key else None
        return ServerProfile(
            name    = serverName,
            host    = serverConfig.host,
            user    = serverConfig.user,
            ssh_key = sshKey,
            port    = serverConfig.port
        )

    def getBackupRoot(self) -> Path:
        return Path(self.m_config.backup_directory).expanduser()

    def getServerDir(self, serverName: str) -> Path:
        return self.getBackupRoot().joinpath(serverName)

    def getStorageOwner(self) -> str:
        return self.m_config.storage_owner
