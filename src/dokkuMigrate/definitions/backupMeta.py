import json

from pathlib     import Path
from datetime    import datetime, timezone
from dataclasses import dataclass, field, asdict
from dacite      import from_dict

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%SZ'

def utcTimestamp() -> str:
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)

@dataclass
class AppMeta:
    app:              str
    server:           str
    backup_timestamp: str = field(default_factory=utcTimestamp)

    def toFile(self, path: Path) -> None:
        path.write_text(json.dumps(asdict(self), indent=2) + '\n')

    @staticmethod
    def fromFile(path: Path) -> "AppMeta":
        return from_dict(data_class=AppMeta, data=json.loads(path.read_text()))

