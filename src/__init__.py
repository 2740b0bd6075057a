"""agentmux: declarative agent chains over a local LLM."""
