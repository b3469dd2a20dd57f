"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

PIPELINE_VARIANTS = ("five_step", "four_step")


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-sonnet-4-6"
    fast_model: str = "claude-haiku-4-5-20251001"
    thinking_budget: int = 16000
    max_tokens: int = 8192
    timeout: int = 120

    def __post_init__(self) -> None:
        if not 1 <= self.timeout <= 600:
            raise ValueError(f"llm.timeout must be between 1 and 600, got {self.timeout}")
        if self.thinking_budget < 1024:
            raise ValueError(
                f"llm.thinking_budget must be at least 1024, got {self.thinking_budget}"
            )
        if self.max_tokens < 1:
            raise ValueError(f"llm.max_tokens must be positive, got {self.max_tokens}")


@dataclass(frozen=True)
class PipelineConfig:
    variant: str = "five_step"
    revision_consumes_credit: bool = False

    def __post_init__(self) -> None:
        if self.variant not in PIPELINE_VARIANTS:
            raise ValueError(
                f"pipeline.variant must be one of {PIPELINE_VARIANTS}, got {self.variant!r}"
            )


@dataclass(frozen=True)
class CreditConfig:
    free_monthly_limit: int = 1

    def __post_init__(self) -> None:
        if not 0 <= self.free_monthly_limit <= 100:
            raise ValueError(
                f"credit.free_monthly_limit must be between 0 and 100, got {self.free_monthly_limit}"
            )


@dataclass(frozen=True)
class StorageConfig:
    db_path: str = "~/.jasaoseo/jasaoseo.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    credit: CreditConfig = field(default_factory=CreditConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        pipeline=PipelineConfig(**raw.get("pipeline", {})),
        credit=CreditConfig(**raw.get("credit", {})),
        storage=StorageConfig(**raw.get("storage", {})),
    )
