"""SQLite persistence layer: connection scope, schema and per-entity repositories."""
