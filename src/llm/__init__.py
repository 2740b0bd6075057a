"""LLM backend clients and admission control."""
