# Park Fan Sync - Documentation API
