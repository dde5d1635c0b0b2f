"""Versioned schema migrations."""

from stockflow.infrastructure.storage.sqlite.migrations.migrator import (
    MigrationInfo,
    MigrationResult,
    MigrationStatus,
    SchemaMigrator,
    discover_migrations,
    get_migration_status,
    initialize_database,
)

__all__ = [
    "MigrationInfo",
    "MigrationResult",
    "MigrationStatus",
    "SchemaMigrator",
    "discover_migrations",
    "get_migration_status",
    "initialize_database",
]
