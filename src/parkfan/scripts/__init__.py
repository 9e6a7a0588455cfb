# Park Fan Sync - Job entry points
