"""View-layer adapters for list controllers."""
