# src/pipeline/orchestrator.py — v2
"""Chain orchestrator: validates, sequences and instruments chain runs.

A run moves through:
  Validating -> Resolving(i) -> Invoking(i) -> Recording(i) -> ... -> Summarizing -> Done
and stops at the first failure. Failures are reported as values, never
raised: ``run_chain`` returns a ChainRunResult tagged with an ErrorKind,
and the string-returning ``execute_*`` methods return its output text.
Only argument errors (None chain/context, empty path or planner name)
raise ValueError.

Dynamic planning is two-phase: a planner agent emits a JSON step list,
which is parsed into a ChainDefinition and run through the same path.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from agentmux.logging.context import clear_context, set_agent_context, set_run_context
from agentmux.pipeline.chain_model import ChainDefinition, ChainStep
from agentmux.pipeline.context import (
    AVAILABLE_AGENTS_KEY,
    DYNAMIC_PLAN_KEY,
    RUN_SUMMARY_KEY,
    USER_INPUT_KEY,
    ExecutionContext,
)
from agentmux.pipeline.dynamic_plan import PlanParseError, parse_dynamic_chain
from agentmux.pipeline.registry import AgentRegistry
from agentmux.tracking.models import RunSummary, StepMetrics

logger = logging.getLogger(__name__)

DEFAULT_PLANNER_NAME = "PlannerAgent"

ErrorKind = Literal["validation", "lookup", "step_execution", "parse", "load", "unexpected"]


@dataclass
class ChainRunResult:
    """Outcome of one orchestrated run.

    ``output`` is what the string-returning API hands back: the final
    output (optionally followed by the summary report) on success, or a
    single human-readable error line on failure.
    """

    output: str
    success: bool = True
    error_kind: ErrorKind | None = None
    errors: list[str] = field(default_factory=list)
    failed_step: int | None = None
    failed_agent: str | None = None
    summary: RunSummary | None = None

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        errors: list[str] | None = None,
        failed_step: int | None = None,
        failed_agent: str | None = None,
    ) -> ChainRunResult:
        return cls(
            output=message,
            success=False,
            error_kind=kind,
            errors=errors if errors is not None else [message],
            failed_step=failed_step,
            failed_agent=failed_agent,
        )


class ChainOrchestrator:
    """Executes chains of registered agents against an ExecutionContext.

    Args:
        registry: Registry used to resolve every step's agent.
    """

    def __init__(self, registry: AgentRegistry) -> None:
        if registry is None:
            raise ValueError("registry cannot be None")
        self._registry = registry

    @property
    def registry(self) -> AgentRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Declarative chains
    # ------------------------------------------------------------------

    async def run_chain(
        self,
        chain: ChainDefinition,
        context: ExecutionContext,
        generate_summary: bool = True,
    ) -> ChainRunResult:
        """Validate and execute a chain, returning a tagged result."""
        if chain is None:
            raise ValueError("chain cannot be None")
        if context is None:
            raise ValueError("context cannot be None")

        if context.registry is None:
            context.registry = self._registry
        set_run_context(context.run_id, chain.name)
        try:
            return await self._run(chain, context, generate_summary)
        finally:
            clear_context()

    async def execute_chain(
        self,
        chain: ChainDefinition,
        context: ExecutionContext,
        generate_summary: bool = True,
    ) -> str:
        """Execute a chain and return its output or error text."""
        result = await self.run_chain(chain, context, generate_summary)
        return result.output

    async def _run(
        self,
        chain: ChainDefinition,
        context: ExecutionContext,
        generate_summary: bool,
    ) -> ChainRunResult:
        validation = chain.validate_chain()
        if not validation.valid:
            joined = ", ".join(validation.errors)
            logger.error("Chain validation failed for '%s': %s", chain.name, joined)
            return ChainRunResult.failure(
                "validation", f"Chain validation failed: {joined}", errors=validation.errors
            )

        total = len(chain.steps)
        logger.info("Starting execution of chain: %s with %d steps", chain.name, total)

        start_time = datetime.now(timezone.utc)
        t0 = time.perf_counter()
        all_metrics: list[StepMetrics] = []
        output = ""

        try:
            missing = [s.agent_name for s in chain.steps if self._registry.get(s.agent_name) is None]
            if missing:
                joined = ", ".join(missing)
                logger.error("Missing agents in chain '%s': %s", chain.name, joined)
                return ChainRunResult.failure("lookup", f"Agents not found: {joined}", errors=missing)

            context.variables.setdefault(USER_INPUT_KEY, context.user_input)

            for i, step in enumerate(chain.steps, start=1):
                agent = self._registry.get_or_raise(step.agent_name)
                set_agent_context(agent.name, f"{i}/{total}")
                logger.info("Executing step %d/%d: %s", i, total, step.agent_name)

                self._resolve_input(step, context)

                try:
                    if context.options.collect_metrics:
                        output, metrics = await agent.execute_with_metrics(context)
                        if metrics is not None:
                            all_metrics.append(metrics)
                            logger.debug(
                                "Agent %s completed in %.2fms", step.agent_name, metrics.duration_ms
                            )
                    else:
                        output = await agent.execute(context)
                except Exception as exc:
                    message = f"Error executing agent {step.agent_name} in step {i}: {exc}"
                    logger.exception(
                        "Error executing agent %s in step %d", step.agent_name, i
                    )
                    return ChainRunResult.failure(
                        "step_execution", message, failed_step=i, failed_agent=step.agent_name
                    )

                output_key = step.resolved_output_key
                context.variables[output_key] = output
                logger.debug(
                    "Agent %s completed successfully, output stored as %s",
                    step.agent_name, output_key,
                )

            end_time = datetime.now(timezone.utc)
            total_ms = (time.perf_counter() - t0) * 1000.0
            logger.info("Chain execution completed: %s in %.2fms", chain.name, total_ms)

            summary: RunSummary | None = None
            if context.options.generate_summary and context.options.collect_metrics:
                summary = RunSummary(
                    name=chain.name,
                    start_time=start_time,
                    end_time=end_time,
                    total_duration_ms=total_ms,
                    step_count=total,
                    metrics=all_metrics,
                )
                context.variables[RUN_SUMMARY_KEY] = summary
                if generate_summary:
                    report = summary.create_report(context.options.include_detailed_metrics)
                    return ChainRunResult(output=f"{output}\n\n{report}", summary=summary)

            return ChainRunResult(output=output, summary=summary)

        except Exception as exc:
            logger.exception("Unexpected error during chain execution for '%s'", chain.name)
            return ChainRunResult.failure(
                "unexpected", f"Unexpected error during chain execution: {exc}"
            )

    @staticmethod
    def _resolve_input(step: ChainStep, context: ExecutionContext) -> None:
        """Point context.user_input at the step's declared source."""
        source = step.input_from
        if not source:
            return

        if source == USER_INPUT_KEY:
            original = context.variables.get(USER_INPUT_KEY)
            if original is not None:
                context.user_input = str(original)
            logger.debug("Using user input for agent %s", step.agent_name)
        elif source in context.variables:
            value = context.variables[source]
            context.user_input = "" if value is None else str(value)
            logger.debug("Using input from %s for agent %s", source, step.agent_name)
        else:
            logger.warning(
                "InputFrom '%s' not found in context variables for agent %s",
                source, step.agent_name,
            )

    # ------------------------------------------------------------------
    # Chain files
    # ------------------------------------------------------------------

    async def run_chain_from_file(
        self,
        path: str | Path,
        context: ExecutionContext,
        generate_summary: bool = True,
    ) -> ChainRunResult:
        """Load a chain file and run it."""
        if path is None or not str(path).strip():
            raise ValueError("File path cannot be null or empty")
        if context is None:
            raise ValueError("context cannot be None")

        logger.info("Loading chain from file: %s", path)
        try:
            if not Path(path).is_file():
                message = f"Chain file not found: {path}"
                logger.error(message)
                return ChainRunResult.failure("load", message)

            chain = ChainDefinition.load_from_file(path)
            return await self.run_chain(chain, context, generate_summary)
        except Exception as exc:
            logger.exception("Failed to load or execute chain from file '%s'", path)
            return ChainRunResult.failure(
                "load", f"Failed to load or execute chain from file: {exc}"
            )

    async def execute_chain_from_file(
        self,
        path: str | Path,
        context: ExecutionContext,
        generate_summary: bool = True,
    ) -> str:
        result = await self.run_chain_from_file(path, context, generate_summary)
        return result.output

    # ------------------------------------------------------------------
    # Dynamic planning
    # ------------------------------------------------------------------

    async def run_dynamic_chain(
        self,
        planner_agent_name: str,
        user_input: str,
        context: ExecutionContext | None = None,
    ) -> ChainRunResult:
        """Ask a planner for a chain, then run it."""
        if not planner_agent_name or not planner_agent_name.strip():
            raise ValueError("Planner agent name cannot be null or empty")
        if not user_input or not user_input.strip():
            raise ValueError("User input cannot be null or empty")

        if context is None:
            context = ExecutionContext()
        context.user_input = user_input
        context.variables[USER_INPUT_KEY] = user_input
        if context.registry is None:
            context.registry = self._registry

        logger.info("Generating dynamic chain using planner agent: %s", planner_agent_name)
        try:
            planner = self._registry.get(planner_agent_name)
            if planner is None:
                message = f"Planner agent not found: {planner_agent_name}"
                logger.error(message)
                return ChainRunResult.failure("lookup", message)

            context.variables[AVAILABLE_AGENTS_KEY] = self._registry.formatted_agent_list()

            set_run_context(context.run_id, f"plan:{planner.name}")
            set_agent_context(planner.name)
            try:
                plan = await planner.execute(context)
            finally:
                clear_context()
            logger.debug("Planner generated chain: %s", plan)

            chain_name = f"DynamicChain-{datetime.now(timezone.utc):%Y%m%d%H%M%S}"
            chain = parse_dynamic_chain(plan, chain_name)
            context.variables[DYNAMIC_PLAN_KEY] = plan

            logger.info("Executing dynamic chain with %d steps", len(chain.steps))
            result = await self.run_chain(chain, context)
        except Exception as exc:
            logger.exception(
                "Failed to execute dynamic chain with planner '%s'", planner_agent_name
            )
            kind: ErrorKind = "parse" if isinstance(exc, PlanParseError) else "unexpected"
            return ChainRunResult.failure(kind, f"Failed to execute dynamic chain: {exc}")
        return result

    async def execute_dynamic_chain(
        self,
        planner_agent_name: str,
        user_input: str,
        context: ExecutionContext | None = None,
    ) -> str:
        result = await self.run_dynamic_chain(planner_agent_name, user_input, context)
        return result.output

    async def execute(self, context: ExecutionContext) -> str:
        """Plan and run a chain for context.user_input with the default planner."""
        if context is None:
            raise ValueError("context cannot be None")
        return await self.execute_dynamic_chain(DEFAULT_PLANNER_NAME, context.user_input, context)
