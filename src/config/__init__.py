from pathlib import Path
from typing import List, Optional

from hydra import compose, initialize_config_dir
from omegaconf import DictConfig, OmegaConf

from utils.logging import log_call
from utils.validation import validate_config

from .schemas import ScenarioConfig

CONFIG_DIR = Path(__file__).resolve().parents[2] / "configs"


@log_call
def load_config(overrides: Optional[List[str]] = None) -> DictConfig:
    """Load, type-check and validate a scenario configuration using Hydra."""

    overrides = overrides or []
    with initialize_config_dir(
        CONFIG_DIR.resolve().as_posix(), version_base=None
    ):
        cfg = compose(config_name="config", overrides=overrides)
    cfg = OmegaConf.merge(OmegaConf.structured(ScenarioConfig), cfg)
    validate_config(cfg)
    return cfg
