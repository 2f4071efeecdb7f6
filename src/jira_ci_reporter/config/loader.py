"""Environment-driven configuration loading.

The CI runner hands the plugin its settings as flat environment variables:
``PLUGIN_*`` for the plugin's own settings and ``DRONE_*`` for the event
metadata. Settings can additionally be primed from a ``.env`` file and a
YAML settings file; values already present in the environment always win.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from ..errors import ConfigurationError
from .schema import BuildInfo, CommitInfo, EventContext, select_credentials

logger = logging.getLogger(__name__)

# Plugin settings: EventContext field -> environment variable.
PLUGIN_SETTINGS = {
    "log_level": "PLUGIN_LOG_LEVEL",
    "cloud_id": "PLUGIN_CLOUD_ID",
    "instance": "PLUGIN_INSTANCE",
    "project": "PLUGIN_PROJECT",
    "pipeline": "PLUGIN_PIPELINE",
    "environment_name": "PLUGIN_ENVIRONMENT_NAME",
    "environment_id": "PLUGIN_ENVIRONMENT_ID",
    "environment_type": "PLUGIN_ENVIRONMENT_TYPE",
    "link": "PLUGIN_LINK",
    "state": "PLUGIN_STATE",
    "issue_keys": "PLUGIN_ISSUEKEYS",
    "client_id": "PLUGIN_CLIENT_ID",
    "client_secret": "PLUGIN_CLIENT_SECRET",
    "connect_key": "PLUGIN_CONNECT_KEY",
    "connect_hostname": "PLUGIN_CONNECT_HOSTNAME",
    "timeout": "PLUGIN_TIMEOUT",
}

# Event metadata provided by the CI runner.
COMMIT_VARIABLES = {
    "message": "DRONE_COMMIT_MESSAGE",
    "branch": "DRONE_COMMIT_BRANCH",
    "source": "DRONE_SOURCE_BRANCH",
    "target": "DRONE_TARGET_BRANCH",
    "rev": "DRONE_COMMIT_SHA",
    "link": "DRONE_COMMIT_LINK",
    "author": "DRONE_COMMIT_AUTHOR",
}
BUILD_VARIABLES = {
    "number": "DRONE_BUILD_NUMBER",
    "status": "DRONE_BUILD_STATUS",
    "link": "DRONE_BUILD_LINK",
}
PULL_REQUEST_TITLE = "DRONE_PULL_REQUEST_TITLE"
TAG = "DRONE_TAG"
SEMVER = "DRONE_SEMVER"
DEPLOY_TARGET = "DRONE_DEPLOY_TO"
CARD_PATH = "DRONE_CARD_PATH"


class ConfigLoader:
    """Build an :class:`EventContext` from environment-style settings."""

    @classmethod
    def load(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        config_path: Optional[Path] = None,
        env_file: Optional[Path] = None,
    ) -> EventContext:
        """Load the run configuration.

        Args:
            environ: Mapping of variables to read. Defaults to ``os.environ``
                after the optional ``.env`` file has been applied.
            config_path: Optional YAML file with plugin settings.
            env_file: Optional ``.env`` file loaded into the process environment.

        Returns:
            EventContext for this invocation.

        Raises:
            ConfigurationError: If a file cannot be read or a value is malformed.
        """
        if env_file is not None:
            cls._load_environment(env_file)

        values: dict[str, str] = {}
        if config_path is not None:
            values.update(cls._load_settings_file(config_path))
        source = os.environ if environ is None else environ
        values.update({key: value for key, value in source.items() if value != ""})

        return cls.from_mapping(values)

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> EventContext:
        """Create an EventContext from a flat variable mapping."""

        def get(name: str) -> str:
            return str(values.get(name, "") or "").strip()

        settings = {key: get(name) for key, name in PLUGIN_SETTINGS.items()}
        commit_fields = {key: get(name) for key, name in COMMIT_VARIABLES.items()}
        # Commit messages are kept verbatim, surrounding whitespace included.
        commit_fields["message"] = str(values.get(COMMIT_VARIABLES["message"], "") or "")
        commit = CommitInfo(**commit_fields)
        build = BuildInfo(
            number=cls._parse_int(get(BUILD_VARIABLES["number"]), BUILD_VARIABLES["number"]),
            status=get(BUILD_VARIABLES["status"]),
            link=get(BUILD_VARIABLES["link"]),
        )
        credentials = select_credentials(
            client_id=settings["client_id"],
            client_secret=settings["client_secret"],
            connect_key=settings["connect_key"],
            connect_hostname=settings["connect_hostname"],
        )

        return EventContext(
            project=settings["project"],
            pipeline=settings["pipeline"],
            instance=settings["instance"],
            cloud_id=settings["cloud_id"],
            commit=commit,
            build=build,
            pull_request_title=get(PULL_REQUEST_TITLE),
            tag=get(TAG),
            semver=get(SEMVER),
            deploy_target=get(DEPLOY_TARGET),
            state=settings["state"],
            environment_name=settings["environment_name"],
            environment_id=settings["environment_id"],
            environment_type=settings["environment_type"],
            link=settings["link"],
            issue_keys=cls._parse_list(settings["issue_keys"]),
            credentials=credentials,
            card_path=get(CARD_PATH),
            log_level=settings["log_level"],
            timeout=cls._parse_timeout(settings["timeout"]),
        )

    @classmethod
    def _load_environment(cls, env_file: Path) -> None:
        """Load variables from a ``.env`` file without overriding the environment."""
        if not env_file.exists():
            raise ConfigurationError(f"Environment file not found: {env_file}")
        load_dotenv(env_file, override=False)
        logger.debug(f"Loaded environment variables from {env_file}")

    @classmethod
    def _load_settings_file(cls, config_path: Path) -> dict[str, str]:
        """Read plugin settings from a YAML file.

        Keys are the plugin variable names without the ``PLUGIN_`` prefix,
        lowercased (``project``, ``cloud_id``, ``issuekeys`` ...).

        Returns:
            Mapping of ``PLUGIN_*`` variable names to string values.
        """
        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in settings file {config_path}: {e}") from e
        except FileNotFoundError as e:
            raise ConfigurationError(f"Settings file not found: {config_path}") from e
        except PermissionError as e:
            raise ConfigurationError(f"Permission denied reading settings file: {config_path}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Settings file must contain a YAML object (key-value pairs): {config_path.name}"
            )

        known = set(PLUGIN_SETTINGS.values())
        settings: dict[str, str] = {}
        for key, raw in data.items():
            name = f"PLUGIN_{str(key).upper()}"
            if name not in known:
                logger.warning(f"Ignoring unknown setting '{key}' in {config_path}")
                continue
            value = cls._stringify(raw)
            resolved = cls._resolve_env_var(value)
            if resolved:
                settings[name] = resolved
        logger.debug(f"Loaded {len(settings)} settings from {config_path}")
        return settings

    @staticmethod
    def _stringify(raw: Any) -> str:
        if raw is None:
            return ""
        if isinstance(raw, (list, tuple)):
            return ",".join(str(item) for item in raw)
        if isinstance(raw, bool):
            return "true" if raw else "false"
        return str(raw)

    @staticmethod
    def _resolve_env_var(value: Optional[str]) -> Optional[str]:
        """Resolve ``${VAR}`` references against the process environment.

        Returns:
            Resolved value, the value unchanged, or None if the variable is unset.
        """
        if not value:
            return None

        if value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]
            resolved = os.environ.get(env_var)
            if not resolved:
                return None
            return resolved

        return value

    @staticmethod
    def _parse_list(raw: str) -> tuple[str, ...]:
        return tuple(item.strip() for item in raw.split(",") if item.strip())

    @staticmethod
    def _parse_int(raw: str, name: str) -> int:
        if not raw:
            return 0
        try:
            return int(raw)
        except ValueError as e:
            raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e

    @staticmethod
    def _parse_timeout(raw: str) -> Optional[float]:
        if not raw:
            return None
        try:
            timeout = float(raw)
        except ValueError as e:
            raise ConfigurationError(f"PLUGIN_TIMEOUT must be a number of seconds, got {raw!r}") from e
        if timeout <= 0:
            raise ConfigurationError(f"PLUGIN_TIMEOUT must be positive, got {raw!r}")
        return timeout
