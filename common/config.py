from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.logger import get_logger

log = get_logger(__name__)

_REPO_ROOT = Path(__file__).resolve().parent.parent


class AppConfig(BaseModel):
    data_dir: Path = Path("data")
    store_dir: Path = Path("data/store")


class CoreCorpusConfig(BaseModel):
    enabled: bool = True
    name: str = "Lei 14.133/21 (Base de Conhecimento)"
    path: Path = Path("data/lei14133.json")


class SegmentationConfig(BaseModel):
    min_unit_chars: int = Field(default=10, ge=0)
    article_fragment_threshold: int = Field(default=2, ge=0)


class ContextConfig(BaseModel):
    warn_chars: int = Field(default=200_000, gt=0)


class DiffConfig(BaseModel):
    max_table_cells: int = Field(default=16_000_000, gt=0)


class StorageConfig(BaseModel):
    registry_key: str = "corpus_registry"
    history_key: str = "document_history"


class GlobalYAMLConfig(BaseModel):
    app: AppConfig = AppConfig()
    core_corpus: CoreCorpusConfig = CoreCorpusConfig()
    segmentation: SegmentationConfig = SegmentationConfig()
    context: ContextConfig = ContextConfig()
    diff: DiffConfig = DiffConfig()
    storage: StorageConfig = StorageConfig()


class Settings(BaseSettings):
    config_path: Path = _REPO_ROOT / "config" / "config.yaml"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="ETP_")


def load_yaml_config(path: Path | None = None) -> GlobalYAMLConfig:
    """
    Load the YAML config; a missing file means built-in defaults.
    """
    path = Path(path or settings.config_path)
    if not path.exists():
        log.warning("Config file %s not found, using defaults", path)
        return GlobalYAMLConfig()
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return GlobalYAMLConfig(**raw)


settings = Settings()
yaml_config = load_yaml_config()
