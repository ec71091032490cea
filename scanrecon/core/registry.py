#!/usr/bin/env python3
"""
ScanRecon - Plugin registry

Plugins are registered explicitly by the hosting program under a stable
string id; nothing is discovered by import side effects.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional

from scanrecon.core.errors import ConfigurationError

PluginFactory = Callable[..., Any]


class PluginRegistry:
    """Mapping of plugin id -> factory callable."""

    def __init__(self) -> None:
        self._factories: Dict[str, PluginFactory] = {}
        self._lock = threading.Lock()

    def register(self, plugin_id: str, factory: PluginFactory) -> None:
        if not isinstance(plugin_id, str) or not plugin_id.strip():
            raise ConfigurationError("Plugin id must be a non-empty string")
        if not callable(factory):
            raise ConfigurationError(f"Factory for plugin {plugin_id!r} is not callable")
        with self._lock:
            if plugin_id in self._factories:
                raise ConfigurationError(f"Plugin already registered: {plugin_id!r}")
            self._factories[plugin_id] = factory

    def create(self, plugin_id: str, **kwargs: Any) -> Any:
        with self._lock:
            factory = self._factories.get(plugin_id)
        if factory is None:
            raise ConfigurationError(f"Unknown plugin: {plugin_id!r}")
        return factory(**kwargs)

    def ids(self) -> List[str]:
        with self._lock:
            return sorted(self._factories)

    def __contains__(self, plugin_id: object) -> bool:
        with self._lock:
            return plugin_id in self._factories


def register_builtin_plugins(registry: PluginRegistry) -> PluginRegistry:
    """Register the plugins shipped with ScanRecon."""
    from scanrecon.core.port_scanner import NmapPortScanner

    registry.register(NmapPortScanner.plugin_id, NmapPortScanner)
    return registry


_default_registry: Optional[PluginRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> PluginRegistry:
    """Process-wide registry with the built-in plugins registered."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = register_builtin_plugins(PluginRegistry())
        return _default_registry
