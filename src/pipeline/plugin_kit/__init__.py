"""Agent and plugin contracts."""
