from .manager import ListSettings, SettingsManager, default_settings_path

__all__ = ["ListSettings", "SettingsManager", "default_settings_path"]
