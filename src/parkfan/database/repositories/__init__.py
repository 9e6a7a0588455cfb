# Park Fan Sync - Repositories
