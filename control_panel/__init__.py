"""Status synchronization and result-normalization core for the control panel."""
