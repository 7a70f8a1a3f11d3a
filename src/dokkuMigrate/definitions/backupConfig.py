from pathlib import Path
from dataclasses import dataclass, field

DEFAULT_STORAGE_OWNER = 'nobody:nogroup'

@dataclass(frozen=True)
class ServerProfile:
    name:    str
    host:    str
    user:    str
    ssh_key: Path | None = None
    port:    int         = 22

    def __str__(self):
        return f'{self.name} ({self.user}@{self.host}:{self.port})'

@dataclass
class ServerConfig:
    host:    str
    user:    str     = 'root'
    ssh_key: str|None = None
    port:    int     = 22

@dataclass
class MigrateConfig:
    backup_directory: str
    servers:          dict[str, ServerConfig] = field(default_factory=dict)
    storage_owner:    str                     = DEFAULT_STORAGE_OWNER
