"""
Configuration for charme_annotator.

Defaults, then explicit overrides, then ``CHARME_*`` environment variables.
"""

import copy
import os
from typing import Mapping, Optional

from easydict import EasyDict as edict

from .env import load_cfg_from_env

DEFAULT_CONFIG = {
    "node": {
        "url": "http://localhost/",
        "client_id": "",
        "redirect_uri": "http://localhost:8888/",
    },
    "query": {
        "mode": "dataset",
        "limit": 100,
    },
    "token": {
        "path": "~/.config/charme_annotator/token.json",
    },
}


def _merge(target: dict, overrides: Mapping):
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, Mapping) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value


def load_config(
    overrides: Optional[Mapping] = None, env: Optional[Mapping[str, str]] = None
) -> edict:
    """
    Build the configuration tree.

    Args:
        overrides: Nested values replacing the defaults; None values are skipped
        env: Environment to read ``CHARME_*`` overrides from (default: os.environ)

    Returns:
        EasyDict configuration
    """
    data = copy.deepcopy(DEFAULT_CONFIG)
    if overrides:
        _merge(data, overrides)
    cfg = edict(data)
    cfg = load_cfg_from_env(cfg, dict(os.environ if env is None else env))

    if not cfg.node.url.endswith("/"):
        cfg.node.url += "/"
    return cfg
