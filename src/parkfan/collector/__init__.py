# Park Fan Sync - Upstream API clients
