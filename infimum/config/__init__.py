"""Configuration management for the poll engine."""

from .config import (HashConfig, LimitsConfig, SystemConfig, VerifierConfig,
                     load_config, save_config)

__all__ = ['SystemConfig', 'LimitsConfig', 'HashConfig', 'VerifierConfig',
           'load_config', 'save_config']
