"""Chain model, registry and orchestrator."""
