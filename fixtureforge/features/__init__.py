"""Feature slices: catalog, snapshots, reset, scenarios, loader."""
