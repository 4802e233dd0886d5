"""
civ_anim Decoder Configuration Module

Loads decoder limits from decoder_config.yaml. Configuration is always
passed explicitly to the decoder; there is no global instance.
"""

import os
from dataclasses import dataclass
from typing import Optional

import yaml


@dataclass
class DecoderConfig:
    """Limits and behaviour switches for the animation decoder."""
    max_bone_count: int = 10000
    max_frame_count: int = 100000
    max_bitfield_bytes: int = 10000
    max_v0_bone_count: int = 500
    max_name_length: int = 128
    strict: bool = False


def get_config_path() -> str:
    """Get the path to the packaged config file."""
    return os.path.join(os.path.dirname(__file__), 'decoder_config.yaml')


def load_config(config_path: Optional[str] = None) -> DecoderConfig:
    """
    Load decoder configuration from a YAML file.

    Args:
        config_path: Path to config file (default: decoder_config.yaml in this directory)

    Returns:
        DecoderConfig instance; defaults when the file does not exist
    """
    if config_path is None:
        config_path = get_config_path()

    config = DecoderConfig()

    if os.path.exists(config_path):
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}
        update_config_from_dict(data, config)

    return config


def save_config(config: DecoderConfig, config_path: Optional[str] = None) -> bool:
    """
    Save decoder configuration to a YAML file.

    Args:
        config: DecoderConfig to save
        config_path: Destination (default: the packaged config file)

    Returns:
        True if saved successfully
    """
    if config_path is None:
        config_path = get_config_path()

    try:
        with open(config_path, 'w') as f:
            f.write("# civ_anim Decoder Configuration\n")
            f.write("#\n")
            f.write("# Limits guard against corrupt offsets in animation blobs.\n\n")
            yaml.dump(config_to_dict(config), f, default_flow_style=False, sort_keys=False)
        return True
    except OSError:
        return False


def config_to_dict(config: DecoderConfig) -> dict:
    """Convert DecoderConfig to a nested dictionary."""
    return {
        'limits': {
            'max_bone_count': config.max_bone_count,
            'max_frame_count': config.max_frame_count,
            'max_bitfield_bytes': config.max_bitfield_bytes,
            'max_v0_bone_count': config.max_v0_bone_count,
            'max_name_length': config.max_name_length,
        },
        'decoder': {
            'strict': config.strict,
        },
    }


def update_config_from_dict(data: dict, config: Optional[DecoderConfig] = None) -> DecoderConfig:
    """
    Update a config from a dictionary shaped like config_to_dict() output.

    Args:
        data: Dictionary with config values
        config: Config to update (a fresh DecoderConfig when None)

    Returns:
        Updated DecoderConfig
    """
    if config is None:
        config = DecoderConfig()

    if 'limits' in data:
        limits = data['limits'] or {}
        if 'max_bone_count' in limits:
            config.max_bone_count = int(limits['max_bone_count'])
        if 'max_frame_count' in limits:
            config.max_frame_count = int(limits['max_frame_count'])
        if 'max_bitfield_bytes' in limits:
            config.max_bitfield_bytes = int(limits['max_bitfield_bytes'])
        if 'max_v0_bone_count' in limits:
            config.max_v0_bone_count = int(limits['max_v0_bone_count'])
        if 'max_name_length' in limits:
            config.max_name_length = int(limits['max_name_length'])

    if 'decoder' in data:
        decoder = data['decoder'] or {}
        if 'strict' in decoder:
            config.strict = bool(decoder['strict'])

    return config


__all__ = [
    'DecoderConfig',
    'load_config',
    'get_config_path',
    'save_config',
    'config_to_dict',
    'update_config_from_dict',
]
