"""Agent tool interface."""
