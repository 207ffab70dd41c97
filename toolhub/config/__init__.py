from toolhub.config.settings import settings, Settings, ScriptSettings

__all__ = ["settings", "Settings", "ScriptSettings"]
