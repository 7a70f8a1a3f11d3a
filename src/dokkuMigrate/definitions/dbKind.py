from enum import StrEnum

from .errors import UnsupportedDatabaseKind


class DatabaseKind(StrEnum):
    POSTGRES = "postgres"
    MONGO    = "mongo"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @property
    def exportProcedure(self) -> str:
        return f'{self.value}:export'

    @property
    def importProcedure(self) -> str:
        return f'{self.value}:import'

    def dumpName(self, dbName: str) -> str:
        return f'{dbName}_backup.{self.extension}'

    @classmethod
    def parse(cls, kind: str) -> "DatabaseKind":
        try:
            return cls(kind)
        except ValueError:
            raise UnsupportedDatabaseKind(kind) from None


_EXTENSIONS = {
    DatabaseKind.POSTGRES: 'sql',
    DatabaseKind.MONGO:    'archive',
}
