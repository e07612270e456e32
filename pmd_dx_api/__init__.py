"""Read-only REST API over the Pokemon Mystery Dungeon DX dataset."""
