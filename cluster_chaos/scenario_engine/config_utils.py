"""
Config Utilities - Loading, validating and exporting scenario configurations
"""
import json
import yaml
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Union
from ..models import ContainerConfig, ScenarioConfig


class ConfigLoader:
    """Loads a ScenarioConfig from a YAML or JSON file or from a plain dictionary"""

    @staticmethod
    def load_from_file(file_path: Union[str, Path]) -> ScenarioConfig:
        """Load a scenario configuration from a YAML (.yaml, .yml) or JSON (.json) file."""
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Config file not found: {file_path}")

        try:
            with open(file_path, 'r') as f:
                if file_path.suffix in ['.yaml', '.yml']:
                    data = yaml.safe_load(f)
                elif file_path.suffix == '.json':
                    data = json.load(f)
                else:
                    raise ValueError(f"Unsupported config format: {file_path.suffix}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML syntax in {file_path}: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON syntax in {file_path}: {e}")

        return ConfigLoader.load_from_dict(data or {})

    @staticmethod
    def load_from_string(config_text: str) -> ScenarioConfig:
        """Load a scenario configuration from a YAML string."""
        try:
            data = yaml.safe_load(config_text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML syntax: {e}")
        return ConfigLoader.load_from_dict(data or {})

    @staticmethod
    def load_from_dict(config_dict: Dict[str, Any]) -> ScenarioConfig:
        """Build a ScenarioConfig, raising ValueError with every problem found."""
        errors = ConfigValidator.validate_structure(config_dict)
        if errors:
            raise ValueError("Invalid scenario configuration:\n  " + "\n  ".join(errors))

        values = dict(config_dict)
        container = values.pop('container', None) or {}
        return ScenarioConfig(container=ContainerConfig(**container), **values)


class ConfigValidator:
    """Validator for scenario configurations with detailed error reporting"""

    POSITIVE_INT_FIELDS = ['total_rounds', 'server_limit', 'write_quorum']
    NON_NEGATIVE_FIELDS = ['round_settle_delay', 'merge_settle_delay', 'quorum_settle_delay']
    STRING_FIELDS = [
        'cluster_name_prefix', 'initial_node_name', 'schema_name', 'project_name',
        'user_password', 'report_dir'
    ]
    BOOL_FIELDS = ['strict_round_termination', 'cleanup_on_exit']

    @staticmethod
    def validate_structure(config_dict: dict) -> list:
        """
        Validate the structure of a scenario configuration dictionary.
        Returns a list of human-readable errors; empty when the config is valid.
        """
        errors = []

        if not isinstance(config_dict, dict):
            return ["config: Must be a dictionary"]

        known = {f.name for f in fields(ScenarioConfig)}
        for key in config_dict:
            if key not in known:
                errors.append(f"Unknown field: {key}")

        for name in ConfigValidator.POSITIVE_INT_FIELDS:
            if name in config_dict:
                value = config_dict[name]
                if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                    errors.append(f"{name}: Must be a positive integer, got {value}")

        if 'startup_timeout' in config_dict:
            value = config_dict['startup_timeout']
            if not isinstance(value, (int, float)) or value <= 0:
                errors.append(f"startup_timeout: Must be a positive number")

        for name in ConfigValidator.NON_NEGATIVE_FIELDS:
            if name in config_dict:
                value = config_dict[name]
                if not isinstance(value, (int, float)) or value < 0:
                    errors.append(f"{name}: Must be a non-negative number")

        for name in ConfigValidator.STRING_FIELDS:
            if name in config_dict and not isinstance(config_dict[name], str):
                errors.append(f"{name}: Must be a string")

        for name in ConfigValidator.BOOL_FIELDS:
            if name in config_dict and not isinstance(config_dict[name], bool):
                errors.append(f"{name}: Must be a boolean")

        if 'seed' in config_dict:
            seed = config_dict['seed']
            if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
                errors.append(f"seed: Must be an integer or null, got {seed}")

        quorum = config_dict.get('write_quorum')
        limit = config_dict.get('server_limit', ScenarioConfig.server_limit)
        # A single-node limit would let the last running node be stopped or removed
        if isinstance(limit, int) and not isinstance(limit, bool) and limit == 1:
            errors.append("server_limit: Must be at least 2, got 1")
        if isinstance(quorum, int) and isinstance(limit, int) and quorum > limit:
            errors.append(f"write_quorum: Must not exceed server_limit ({quorum} > {limit})")

        if 'container' in config_dict:
            errors.extend(ConfigValidator._validate_container(config_dict['container']))

        return errors

    @staticmethod
    def _validate_container(container_dict: dict) -> list:
        """Validate container configuration"""
        errors = []

        if not isinstance(container_dict, dict):
            errors.append("container: Must be a dictionary")
            return errors

        known = {f.name for f in fields(ContainerConfig)}
        for key in container_dict:
            if key not in known:
                errors.append(f"container: Unknown field '{key}'")

        if 'http_port' in container_dict:
            port = container_dict['http_port']
            if not isinstance(port, int) or not (1 <= port <= 65535):
                errors.append(f"container.http_port: Must be a port number, got {port}")

        if 'cluster_ports' in container_dict:
            ports = container_dict['cluster_ports']
            if not isinstance(ports, list) or not all(isinstance(p, int) for p in ports):
                errors.append("container.cluster_ports: Must be a list of port numbers")

        for name in ['request_timeout', 'ready_poll_interval']:
            if name in container_dict:
                value = container_dict[name]
                if not isinstance(value, (int, float)) or value <= 0:
                    errors.append(f"container.{name}: Must be a positive number")

        if 'extra_env' in container_dict and not isinstance(container_dict['extra_env'], dict):
            errors.append("container.extra_env: Must be a dictionary")

        return errors


def save_config_as_yaml(config: ScenarioConfig, file_path: Union[str, Path]) -> None:
    """Save the effective scenario configuration as YAML for reproducibility."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, 'w') as f:
        yaml.dump(asdict(config), f, default_flow_style=False, sort_keys=False)
