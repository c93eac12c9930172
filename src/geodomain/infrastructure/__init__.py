"""Infrastructure adapters: database, Redis, migrations."""
