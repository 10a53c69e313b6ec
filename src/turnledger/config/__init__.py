from .builder import CASSETTE_DIR_ENV, RECORD_ENV, ConfigBuilder, merge_settings, parse_flag
from .loader import PROJECT_CONFIG_NAME, find_project_config, load_project_config
from .models import AgentSettings, ScenarioSettings

__all__ = [
    "AgentSettings",
    "CASSETTE_DIR_ENV",
    "ConfigBuilder",
    "PROJECT_CONFIG_NAME",
    "RECORD_ENV",
    "ScenarioSettings",
    "find_project_config",
    "load_project_config",
    "merge_settings",
    "parse_flag",
]
