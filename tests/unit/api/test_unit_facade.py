# tests/unit/api/test_unit_facade.py — v2
"""Tests for api/facade.py — registry wiring and one-call runs."""

from __future__ import annotations

import json
import textwrap
from unittest.mock import patch

import pytest

from agentmux.api.facade import build_registry, resolve_chain_path, run_chain_file, run_dynamic
from agentmux.config.settings import Settings
from agentmux.pipeline.agents.planner import PlannerAgent
from agentmux.pipeline.agents.prompt_agent import PromptAgent

AGENTS = {
    "Summarizer": {"system_prompt": "Summarize.", "description": "Summarizes text"},
    "Translator": {"system_prompt": "Translate to French.", "model": "mistral"},
}


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, agents=AGENTS, **kwargs)


class TestBuildRegistry:
    @pytest.mark.asyncio
    async def test_prompt_agents_and_planner(self, mock_llm):
        registry = await build_registry(_settings(), mock_llm)
        assert registry.agent_names == ["Summarizer", "Translator", "PlannerAgent"]
        assert isinstance(registry.get("Summarizer"), PromptAgent)
        assert isinstance(registry.get("PlannerAgent"), PlannerAgent)

    @pytest.mark.asyncio
    async def test_planner_disabled(self, mock_llm):
        registry = await build_registry(_settings(planner_enabled=False), mock_llm)
        assert registry.get("PlannerAgent") is None

    @pytest.mark.asyncio
    async def test_per_agent_client_when_not_injected(self):
        with patch("agentmux.llm.adapters.ollama_adapter.ollama.AsyncClient"):
            registry = await build_registry(_settings())
        summarizer = registry.get("Summarizer")
        translator = registry.get("Translator")
        assert summarizer._llm.model == "llama3"
        assert translator._llm.model == "mistral"

    @pytest.mark.asyncio
    async def test_loads_plugins(self, tmp_path, mock_llm):
        bundle = tmp_path / "agentmux_plugin_echo.py"
        bundle.write_text(
            textwrap.dedent(
                """
                from agentmux.pipeline.plugin_kit.base_agent import BaseAgent
                from agentmux.pipeline.plugin_kit.base_plugin import AgentPlugin
                from agentmux.pipeline.plugin_kit.models import PluginMetadata


                class EchoAgent(BaseAgent):
                    @property
                    def name(self):
                        return "Echo"

                    async def execute(self, context):
                        return context.user_input


                class EchoPlugin(AgentPlugin):
                    @property
                    def metadata(self):
                        return PluginMetadata(name="Echo")

                    def create_agent(self, llm_client=None, config=None):
                        return EchoAgent()
                """
            ),
            encoding="utf-8",
        )
        registry = await build_registry(_settings(plugin_directory=tmp_path), mock_llm)
        assert registry.get("Echo") is not None
        assert len(registry.plugins) == 1


class TestResolveChainPath:
    def test_existing_path(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_text("{}", encoding="utf-8")
        assert resolve_chain_path(path, _settings()) == path

    def test_falls_back_to_chains_directory(self, tmp_path):
        (tmp_path / "c.json").write_text("{}", encoding="utf-8")
        settings = _settings(chains_directory=tmp_path)
        assert resolve_chain_path("c.json", settings) == tmp_path / "c.json"

    def test_unknown_path_returned_unchanged(self, tmp_path):
        settings = _settings(chains_directory=tmp_path)
        assert str(resolve_chain_path("nope.json", settings)) == "nope.json"


class TestRunChainFile:
    @pytest.mark.asyncio
    async def test_runs_chain(self, tmp_path, mock_llm):
        chain_file = tmp_path / "chain.json"
        chain_file.write_text(
            json.dumps(
                {
                    "name": "SummarizeTranslate",
                    "steps": [
                        {"agentName": "Summarizer", "inputFrom": "user", "outputTo": "summary"},
                        {"agentName": "Translator", "inputFrom": "summary"},
                    ],
                }
            ),
            encoding="utf-8",
        )
        mock_llm.complete.side_effect = ["short", "court"]

        result = await run_chain_file(
            chain_file, "long text", settings=_settings(), llm_client=mock_llm,
            generate_summary=False,
        )

        assert result.success
        assert result.output == "court"
        assert mock_llm.complete.await_args_list[0].args == ("long text", "Summarize.")
        assert mock_llm.complete.await_args_list[1].args == ("short", "Translate to French.")

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path, mock_llm):
        result = await run_chain_file(
            tmp_path / "none.json", "x", settings=_settings(), llm_client=mock_llm
        )
        assert result.error_kind == "load"


class TestRunDynamic:
    @pytest.mark.asyncio
    async def test_plans_with_configured_planner(self, mock_llm):
        mock_llm.generate.return_value = '```json\n[{"agent": "Summarizer", "inputFrom": "user"}]\n```'
        mock_llm.complete.return_value = "short"

        result = await run_dynamic(
            "summarize this", settings=_settings(generate_summary=False), llm_client=mock_llm
        )

        assert result.success
        assert result.output == "short"
        prompt = mock_llm.generate.await_args.args[0]
        assert "- Summarizer: Summarizes text" in prompt
        assert "- Translator: No description available" in prompt
        assert "- PlannerAgent" not in prompt
