import logging
from gettext import gettext as _
from typing import Any, Dict

from easydict import EasyDict as edict

logger = logging.getLogger(__name__)

ENV_PREFIX = "CHARME_"

TRUE_VALUES = ("1", "true", "yes", "on")


def _coerce(current: Any, value: Any) -> Any:
    # Environment values are strings; follow the type of the replaced entry
    if not isinstance(value, str):
        return value
    if isinstance(current, bool):
        return value.lower() in TRUE_VALUES
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return value


def load_cfg_from_env(cfg: edict, env: Dict[str, str]):
    """
    Apply ``CHARME_<SECTION>__<KEY>`` variables to a configuration tree.

    A double underscore descends one level, and names are lowercased.

    Raises:
        ValueError: If a value cannot be converted to the type of the
            entry it replaces
    """
    for k, v in env.items():
        if not k.startswith(ENV_PREFIX):
            continue
        cfgkey = k[len(ENV_PREFIX):].lower().replace("__", ".")
        logger.warning(
            _("Changing configuration entry from environment variable: {k}={v}").format(
                k=cfgkey, v=v
            )
        )
        *parts, last = cfgkey.split(".")
        this_cfg = cfg
        for part in parts:
            if this_cfg.get(part) is None:
                this_cfg[part] = edict()
            this_cfg = this_cfg[part]
        this_cfg[last] = _coerce(this_cfg.get(last), v)
    return cfg
