"""Run metrics models."""
