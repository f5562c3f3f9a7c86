from .plugin import PLUGIN_NAME, PLUGIN_VERSION, build_plugin

__all__ = ["build_plugin", "PLUGIN_NAME", "PLUGIN_VERSION"]
