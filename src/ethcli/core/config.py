"""Configuration loading for the command line client"""

import dataclasses
import json
import pathlib
from typing import Optional, Dict, Any

import yaml

DEFAULT_RPC_URL = "http://localhost:8545"


class ConfigError(Exception):
    pass


@dataclasses.dataclass(frozen=True)
class CliConfig:
    rpc_url: str
    priv_key: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class ConfigOverrides:
    priv_key: Optional[str] = None
    rpc_url: Optional[str] = None
    config_file: Optional[str] = None


def _load_config_file(config_file: str) -> Dict[str, Any]:
    path = pathlib.Path(config_file)
    if not path.is_absolute():
        path = pathlib.Path.cwd() / path

    try:
        with open(path, "r") as file:
            if path.suffix in (".yaml", ".yml"):
                values = yaml.safe_load(file)
            elif path.suffix == ".json":
                values = json.load(file)
            else:
                raise ConfigError(
                    f"Unsupported config file format {path.suffix!r}! "
                    f"Must be one of: .json, .yaml, .yml"
                )
    except OSError as e:
        raise ConfigError(f"Unable to read config file {path}: {e}") from e
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Unable to parse config file {path}: {e}") from e

    if values is None:
        return {}
    if not isinstance(values, dict):
        raise ConfigError(f"Config file {path} must contain a mapping of values")
    return values


def get_config(overrides: ConfigOverrides) -> CliConfig:
    """
    Build the configuration from, in increasing order of precedence, the default
    values, the config file and the overrides provided on the command line.

    :param overrides: Values provided on the command line
    :raises ConfigError: The config file could not be read or has invalid values
    """
    values: Dict[str, Any] = {"rpc_url": DEFAULT_RPC_URL, "priv_key": None}

    if overrides.config_file is not None:
        file_values = _load_config_file(overrides.config_file)
        unknown = set(file_values) - set(values)
        if unknown:
            raise ConfigError(f"Unknown config values: {', '.join(sorted(unknown))}")
        values.update(file_values)

    if overrides.priv_key is not None:
        values["priv_key"] = overrides.priv_key

    if overrides.rpc_url is not None:
        values["rpc_url"] = overrides.rpc_url

    if not isinstance(values["rpc_url"], str):
        raise ConfigError("rpc_url must be a string")
    if values["priv_key"] is not None and not isinstance(values["priv_key"], str):
        raise ConfigError("priv_key must be a string")

    return CliConfig(rpc_url=values["rpc_url"], priv_key=values["priv_key"])
