import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class LimitsConfig:
    """Per-deployment bounds on coordinators and poll shapes"""
    max_coordinator_polls: int = 16
    max_vote_options: int = 256
    max_registration_depth: int = 31
    max_interaction_depth: int = 31
    max_process_batch_depth: int = 10
    max_tally_batch_depth: int = 10
    max_vote_option_tree_depth: int = 8

    def __post_init__(self):
        for name, value in vars(self).items():
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")


@dataclass
class HashConfig:
    # circomlib-format Poseidon constants; generated in-process when unset
    constants_file: Optional[Path] = None

    def __post_init__(self):
        if self.constants_file is not None:
            self.constants_file = Path(self.constants_file)


@dataclass
class VerifierConfig:
    snarkjs_path: str = "snarkjs"
    timeout_seconds: int = 60


@dataclass
class SystemConfig:
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    hash_config: HashConfig = field(default_factory=HashConfig)
    verifier_config: VerifierConfig = field(default_factory=VerifierConfig)

    log_dir: Path = field(default_factory=lambda: Path("logs"))
    log_level: str = "INFO"
    enable_performance_monitoring: bool = True

    def __post_init__(self):
        self.log_dir = Path(self.log_dir)


def load_config(config_path: Optional[Path] = None) -> SystemConfig:
    """Load configuration from file or return default"""
    if config_path is None:
        config_path = Path("config.yaml")
    config_path = Path(config_path)

    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}

            limits_data = config_data.get('limits', {})
            defaults = LimitsConfig()
            limits = LimitsConfig(
                max_coordinator_polls=limits_data.get(
                    'max_coordinator_polls', defaults.max_coordinator_polls),
                max_vote_options=limits_data.get(
                    'max_vote_options', defaults.max_vote_options),
                max_registration_depth=limits_data.get(
                    'max_registration_depth', defaults.max_registration_depth),
                max_interaction_depth=limits_data.get(
                    'max_interaction_depth', defaults.max_interaction_depth),
                max_process_batch_depth=limits_data.get(
                    'max_process_batch_depth', defaults.max_process_batch_depth),
                max_tally_batch_depth=limits_data.get(
                    'max_tally_batch_depth', defaults.max_tally_batch_depth),
                max_vote_option_tree_depth=limits_data.get(
                    'max_vote_option_tree_depth', defaults.max_vote_option_tree_depth)
            )

            hash_data = config_data.get('hash', {})
            hash_config = HashConfig(
                constants_file=hash_data.get('constants_file'))

            verifier_data = config_data.get('verifier', {})
            verifier_config = VerifierConfig(
                snarkjs_path=verifier_data.get('snarkjs_path', 'snarkjs'),
                timeout_seconds=verifier_data.get('timeout_seconds', 60)
            )

            return SystemConfig(
                limits=limits,
                hash_config=hash_config,
                verifier_config=verifier_config,
                log_dir=Path(config_data.get('log_dir', 'logs')),
                log_level=config_data.get('log_level', 'INFO'),
                enable_performance_monitoring=config_data.get(
                    'enable_performance_monitoring', True)
            )
        except (OSError, yaml.YAMLError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Could not load config file {config_path}: {e}")
            logger.warning("Using default configuration")

    return SystemConfig()


def save_config(config: SystemConfig, config_path: Optional[Path] = None):
    """Save configuration to YAML file"""
    if config_path is None:
        config_path = Path("config.yaml")
    config_path = Path(config_path)

    limits = config.limits
    config_data = {
        'limits': {
            'max_coordinator_polls': limits.max_coordinator_polls,
            'max_vote_options': limits.max_vote_options,
            'max_registration_depth': limits.max_registration_depth,
            'max_interaction_depth': limits.max_interaction_depth,
            'max_process_batch_depth': limits.max_process_batch_depth,
            'max_tally_batch_depth': limits.max_tally_batch_depth,
            'max_vote_option_tree_depth': limits.max_vote_option_tree_depth
        },
        'hash': {
            'constants_file': str(config.hash_config.constants_file)
            if config.hash_config.constants_file else None
        },
        'verifier': {
            'snarkjs_path': config.verifier_config.snarkjs_path,
            'timeout_seconds': config.verifier_config.timeout_seconds
        },
        'log_dir': str(config.log_dir),
        'log_level': config.log_level,
        'enable_performance_monitoring': config.enable_performance_monitoring
    }

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, 'w') as f:
        yaml.dump(config_data, f, default_flow_style=False)

    logger.info(f"Configuration saved to {config_path}")
