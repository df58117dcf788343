# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Watch TOML configuration files and stream their content."""

import logging
import pathlib
import tomllib
from collections import abc
from collections.abc import Mapping, MutableMapping
from datetime import timedelta
from typing import Any, assert_never

from frequenz.channels import Sender
from frequenz.channels.file_watcher import EventType, FileWatcher

from ..actor import Actor

_logger = logging.getLogger(__name__)


class ConfigManagingActor(Actor):
    """Sends the merged content of TOML configuration files every time they change.

    The files are read in order and later files override earlier ones. Tables are
    merged recursively, any other value is replaced. The content is sent once
    when the actor starts and again whenever one of the files is created or
    modified.

    The [`FlowChartActor`][uroflow.chart.FlowChartActor] accepts these mappings and
    picks up the `[flow_chart]` table.

    Example:
        ```python
        config_channel = Broadcast[Mapping[str, Any]](name="config", resend_latest=True)
        async with ConfigManagingActor(
            ["defaults.toml", "site.toml"], config_channel.new_sender()
        ):
            config = await config_channel.new_receiver().receive()
        ```
    """

    # pylint: disable-next=too-many-arguments
    def __init__(
        self,
        config_paths: abc.Iterable[pathlib.Path | str],
        output: Sender[abc.Mapping[str, Any]],
        *,
        name: str | None = None,
        force_polling: bool = True,
        polling_interval: timedelta = timedelta(seconds=1),
    ) -> None:
        """Initialize this instance.

        Args:
            config_paths: The TOML files to read, later files override earlier
                ones.
            output: Where to send the merged configuration.
            name: The name of the actor, used in logs.
            force_polling: Whether to poll the files instead of relying on file
                system notifications.
            polling_interval: How often to poll, if polling.
        """
        super().__init__(name=name)
        self._config_paths: list[pathlib.Path] = [
            pathlib.Path(config_path) for config_path in config_paths
        ]
        self._output = output
        self._force_polling = force_polling
        self._polling_interval = polling_interval

    def _read_config(self) -> abc.Mapping[str, Any]:
        """Read and merge all the configuration files.

        Unreadable files are logged and skipped.

        Returns:
            The merged configuration.

        Raises:
            ValueError: If none of the files could be read.
        """
        error_count = 0
        config: dict[str, Any] = {}

        for config_path in self._config_paths:
            try:
                with config_path.open("rb") as toml_file:
                    config = _recursive_update(config, tomllib.load(toml_file))
            except (OSError, ValueError) as err:
                _logger.error("%s: Can't read config file %s: %s", self, config_path, err)
                error_count += 1

        if error_count == len(self._config_paths):
            raise ValueError(f"{self}: Can't read any of the config files")

        return config

    async def send_config(self) -> None:
        """Read the configuration files and send their merged content."""
        await self._output.send(self._read_config())

    async def _run(self) -> None:
        """Send the configuration, then send it again every time a file changes."""
        await self.send_config()

        # The parent directories are watched so files can be created after start.
        file_watcher = FileWatcher(
            paths=list({p.parent for p in self._config_paths}),
            event_types={EventType.CREATE, EventType.MODIFY, EventType.DELETE},
            force_polling=self._force_polling,
            polling_interval=self._polling_interval,
        )

        watched = {p.resolve() for p in self._config_paths}
        try:
            async for event in file_watcher:
                if event.path.resolve() not in watched:
                    continue

                match event.type:
                    case EventType.CREATE | EventType.MODIFY:
                        _logger.info(
                            "%s: The configuration file %s changed, sending update...",
                            self,
                            event.path,
                        )
                        await self.send_config()
                    case EventType.DELETE:
                        _logger.info(
                            "%s: The configuration file %s was deleted, ignoring...",
                            self,
                            event.path,
                        )
                    case _:
                        assert_never(event.type)
        finally:
            del file_watcher


def _recursive_update(
    target: dict[str, Any], overrides: Mapping[str, Any]
) -> dict[str, Any]:
    """Merge `overrides` into `target`, recursing into tables present in both.

    Args:
        target: The configuration to update in place.
        overrides: The values that take precedence.

    Returns:
        The updated `target`.
    """
    for key, value in overrides.items():
        if (
            key in target
            and isinstance(target[key], MutableMapping)
            and isinstance(value, MutableMapping)
        ):
            _recursive_update(target[key], value)
        else:
            target[key] = value
    return target
