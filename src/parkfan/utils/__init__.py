# Park Fan Sync - Shared utilities
