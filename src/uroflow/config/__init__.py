# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Configuration of the flow chart."""

from ._config import CONFIG_SECTION, FlowChartConfig, load_config
from ._config_managing import ConfigManagingActor

__all__ = [
    "CONFIG_SECTION",
    "ConfigManagingActor",
    "FlowChartConfig",
    "load_config",
]
