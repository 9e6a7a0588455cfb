# Park Fan Sync - Reconciliation and history tracking
