# src/pipeline/plugin_loader.py — v1
"""Import plugin bundle files and discover AgentPlugin classes.

A bundle is a standalone ``.py`` file. It is imported under a private
module name so that two bundles with the same file name in different
directories do not collide in ``sys.modules``.
"""

from __future__ import annotations

import hashlib
import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType

from agentmux.pipeline.plugin_kit.base_plugin import AgentPlugin

logger = logging.getLogger(__name__)

PLUGIN_MANIFEST_ATTR = "AGENTMUX_PLUGINS"
DEFAULT_PLUGIN_PATTERN = "agentmux_plugin_*.py"


class PluginImportError(Exception):
    """Raised when a bundle file cannot be imported."""


def import_bundle(path: str | Path) -> ModuleType:
    """Import a bundle file as a fresh module.

    Raises:
        PluginImportError: If the file cannot be loaded or executing it fails.
    """
    bundle = Path(path).resolve()
    digest = hashlib.sha1(str(bundle).encode("utf-8")).hexdigest()[:10]
    module_name = f"_agentmux_bundle_{bundle.stem}_{digest}"

    spec = importlib.util.spec_from_file_location(module_name, bundle)
    if spec is None or spec.loader is None:
        raise PluginImportError(f"Cannot create import spec for {bundle}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise PluginImportError(f"Cannot import plugin bundle {bundle}: {exc}") from exc
    return module


def find_plugin_classes(module: ModuleType) -> list[type[AgentPlugin]]:
    """Return the concrete AgentPlugin classes a module contributes.

    An explicit ``AGENTMUX_PLUGINS`` list wins; otherwise every concrete
    subclass defined in the module itself (not imported into it) counts.
    """
    manifest = getattr(module, PLUGIN_MANIFEST_ATTR, None)
    if manifest is not None:
        if not isinstance(manifest, (list, tuple)):
            raise PluginImportError(
                f"{PLUGIN_MANIFEST_ATTR} in {module.__name__} must be a list of plugin classes, "
                f"got {type(manifest).__name__}"
            )
        return [cls for cls in manifest if _is_concrete_plugin(cls)]

    return [
        obj
        for _, obj in inspect.getmembers(module, inspect.isclass)
        if obj.__module__ == module.__name__ and _is_concrete_plugin(obj)
    ]


def discover_plugin_classes(path: str | Path) -> list[type[AgentPlugin]]:
    """Import a bundle and return its plugin classes."""
    return find_plugin_classes(import_bundle(path))


def list_bundles(directory: str | Path, pattern: str = DEFAULT_PLUGIN_PATTERN) -> list[Path]:
    """Bundle files directly inside directory, sorted by name."""
    return sorted(p for p in Path(directory).glob(pattern) if p.is_file())


def _is_concrete_plugin(obj: object) -> bool:
    return (
        isinstance(obj, type)
        and issubclass(obj, AgentPlugin)
        and obj is not AgentPlugin
        and not inspect.isabstract(obj)
    )
