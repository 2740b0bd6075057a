# tests/unit/pipeline/test_unit_registry.py — v2
"""Tests for pipeline/registry.py — AgentRegistry and plugin lifecycle."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from agentmux.pipeline.composite import CompositeAgent
from agentmux.pipeline.registry import AgentRegistry, RegistryError

BUNDLE_TEMPLATE = textwrap.dedent(
    '''
    from agentmux.pipeline.plugin_kit.base_agent import BaseAgent
    from agentmux.pipeline.plugin_kit.base_plugin import AgentPlugin
    from agentmux.pipeline.plugin_kit.models import PluginMetadata

    EVENTS = []


    class {cls}Agent(BaseAgent):
        def __init__(self, llm_client=None):
            self.llm_client = llm_client

        @property
        def name(self):
            return "{name}"

        @property
        def description(self):
            return "Plugin agent {name}"

        async def execute(self, context):
            return "{name}:" + context.user_input


    class {cls}Plugin(AgentPlugin):
        @property
        def metadata(self):
            return PluginMetadata(name="{name}", version="2.0.0")

        async def initialize(self, config=None):
            EVENTS.append(("init", config))
            return {init_result}

        def create_agent(self, llm_client=None, config=None):
            return {cls}Agent(llm_client)

        async def dispose(self):
            EVENTS.append(("dispose", None))
            {dispose_body}
    '''
)


def write_bundle(
    directory: Path,
    name: str,
    file_name: str | None = None,
    init_result: str = "True",
    dispose_body: str = "pass",
) -> Path:
    path = directory / (file_name or f"agentmux_plugin_{name.lower()}.py")
    path.write_text(
        BUNDLE_TEMPLATE.format(
            cls=name, name=name, init_result=init_result, dispose_body=dispose_body
        ),
        encoding="utf-8",
    )
    return path


class TestRegistration:
    def test_register_and_get(self, make_agent):
        reg = AgentRegistry()
        agent = make_agent("Summarizer")
        reg.register(agent)
        assert reg.get("Summarizer") is agent
        assert "Summarizer" in reg.agent_names
        assert len(reg) == 1

    def test_lookup_is_case_insensitive(self, make_agent):
        reg = AgentRegistry()
        agent = make_agent("Summarizer")
        reg.register(agent)
        assert reg.get("summarizer") is agent
        assert reg.get("SUMMARIZER") is agent
        assert "sUmMaRiZeR" in reg

    def test_get_unknown_returns_none(self):
        reg = AgentRegistry()
        assert reg.get("nope") is None
        assert reg.get("") is None

    def test_get_or_raise(self, make_agent):
        reg = AgentRegistry()
        with pytest.raises(RegistryError, match="not found"):
            reg.get_or_raise("nope")
        agent = make_agent("A")
        reg.register(agent)
        assert reg.get_or_raise("a") is agent

    def test_register_none(self):
        with pytest.raises(ValueError):
            AgentRegistry().register(None)

    def test_duplicate_name_first_wins(self, make_agent):
        reg = AgentRegistry()
        first, second = make_agent("A"), make_agent("a")
        reg.register(first)
        reg.register(second)
        assert len(reg) == 2
        assert reg.get("A") is first

    def test_unregister_removes_all_matches(self, make_agent):
        reg = AgentRegistry()
        reg.register(make_agent("A"))
        reg.register(make_agent("a"))
        reg.register(make_agent("B"))
        assert reg.unregister("A") == 2
        assert reg.agent_names == ["B"]
        assert reg.unregister("A") == 0

    def test_agents_is_read_only_snapshot(self, registry):
        agents = registry.agents
        assert isinstance(agents, tuple)
        assert [a.name for a in agents] == ["Summarizer", "Translator"]


class TestListings:
    def test_formatted_agent_list_skips_planners(self, registry, make_agent):
        registry.register(make_agent("PlannerAgent"))
        registry.register(make_agent("mainPLANNER"))
        assert registry.formatted_agent_list() == "- Summarizer\n- Translator"

    def test_formatted_agent_list_empty(self):
        assert AgentRegistry().formatted_agent_list() == ""

    def test_available_agents(self, registry, make_agent):
        registry.register(make_agent("Silent"))
        registry.register(make_agent("PlannerAgent", description="plans"))
        assert registry.available_agents() == [
            ("Summarizer", "Summarizes text"),
            ("Translator", "Translates text to French"),
            ("Silent", "No description available"),
        ]


class TestCompositeCreation:
    def test_create_chain_registers_composite(self):
        reg = AgentRegistry()
        chain = reg.create_chain("Pipeline")
        assert isinstance(chain, CompositeAgent)
        assert reg.get("pipeline") is chain

    def test_create_chain_from_existing(self, registry):
        chain = registry.create_chain_from_existing("Both", ["Summarizer", "translator"])
        assert chain is not None
        assert [a.name for a in chain.agents] == ["Summarizer", "Translator"]
        assert registry.get("Both") is chain

    def test_create_chain_from_existing_unknown_agent(self, registry):
        assert registry.create_chain_from_existing("Bad", ["Summarizer", "Ghost"]) is None
        assert registry.get("Bad") is None


class TestPluginLifecycle:
    @pytest.mark.asyncio
    async def test_missing_bundle(self, tmp_path):
        reg = AgentRegistry()
        assert await reg.load_plugin(tmp_path / "agentmux_plugin_missing.py") is False
        assert len(reg) == 0
        assert reg.plugins == ()

    @pytest.mark.asyncio
    async def test_load_plugin_registers_agent(self, tmp_path, mock_llm, context):
        bundle = write_bundle(tmp_path, "Echo")
        reg = AgentRegistry()

        assert await reg.load_plugin(bundle, llm_client=mock_llm, config={"k": 1}) is True

        agent = reg.get("Echo")
        assert agent is not None
        assert agent.llm_client is mock_llm
        assert await agent.execute(context) == "Echo:long text"
        assert len(reg.plugins) == 1
        record = reg.plugins[0]
        assert record.agent_name == "Echo"
        assert record.metadata.version == "2.0.0"
        assert record.metadata.bundle_path == str(bundle)

    @pytest.mark.asyncio
    async def test_bundle_without_plugins(self, tmp_path):
        path = tmp_path / "agentmux_plugin_empty.py"
        path.write_text("VALUE = 1\n", encoding="utf-8")
        assert await AgentRegistry().load_plugin(path) is False

    @pytest.mark.asyncio
    async def test_bundle_import_failure(self, tmp_path):
        path = tmp_path / "agentmux_plugin_broken.py"
        path.write_text("raise RuntimeError('bad bundle')\n", encoding="utf-8")
        assert await AgentRegistry().load_plugin(path) is False

    @pytest.mark.asyncio
    async def test_bad_manifest_fails_bundle_not_directory(self, tmp_path):
        bad = tmp_path / "agentmux_plugin_a_bad.py"
        bad.write_text("AGENTMUX_PLUGINS = 5\n", encoding="utf-8")
        write_bundle(tmp_path, "Good")
        reg = AgentRegistry()

        assert await reg.load_plugin(bad) is False
        assert await reg.load_plugins_from_directory(tmp_path) == 1
        assert reg.agent_names == ["Good"]

    @pytest.mark.asyncio
    async def test_failed_initialize_is_partial_success(self, tmp_path):
        bundle = write_bundle(tmp_path, "Lazy", init_result="False")
        reg = AgentRegistry()
        assert await reg.load_plugin(bundle) is True
        assert reg.get("Lazy") is None
        assert reg.plugins == ()

    @pytest.mark.asyncio
    async def test_load_plugins_from_directory(self, tmp_path):
        write_bundle(tmp_path, "One")
        write_bundle(tmp_path, "Two")
        write_bundle(tmp_path, "Ignored", file_name="other_plugin.py")
        nested = tmp_path / "nested"
        nested.mkdir()
        write_bundle(nested, "Deep")

        reg = AgentRegistry()
        assert await reg.load_plugins_from_directory(tmp_path) == 2
        assert sorted(reg.agent_names) == ["One", "Two"]

    @pytest.mark.asyncio
    async def test_load_plugins_custom_pattern(self, tmp_path):
        write_bundle(tmp_path, "Custom", file_name="ext_custom.py")
        reg = AgentRegistry()
        assert await reg.load_plugins_from_directory(tmp_path, pattern="ext_*.py") == 1
        assert reg.get("Custom") is not None

    @pytest.mark.asyncio
    async def test_missing_directory(self, tmp_path):
        assert await AgentRegistry().load_plugins_from_directory(tmp_path / "nope") == 0

    @pytest.mark.asyncio
    async def test_unload_all_plugins(self, tmp_path, make_agent):
        write_bundle(tmp_path, "One")
        write_bundle(tmp_path, "Two", dispose_body="raise RuntimeError('dispose failed')")
        reg = AgentRegistry()
        reg.register(make_agent("Native"))
        await reg.load_plugins_from_directory(tmp_path)
        assert len(reg) == 3

        await reg.unload_all_plugins()

        assert reg.agent_names == ["Native"]
        assert reg.plugins == ()
