# Park Fan Sync - Database access
