"""
scapds Configuration
Environment-driven settings for data-stream decomposition and composition
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings shared by the decomposer, composer and CLI"""

    # Output paths
    max_path_length: int = Field(default=1024, description="Longest directory path ensure_directory_path accepts")
    directory_mode: int = Field(default=0o700, description="Permission bits for created directories")
    output_encoding: str = "utf-8"
    pretty_print: bool = False

    # Input limits
    max_input_bytes: int = 100 * 1024 * 1024  # 100MB
    huge_tree: bool = False  # lxml guard against oversized trees

    # Composition
    ref_id_prefix: str = "scap_org.open-scap_cref_"

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SCAPDS_",
        extra="ignore",
    )

    @field_validator("max_path_length", "max_input_bytes")
    @classmethod
    def must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("Limits must be positive")
        return v

    @field_validator("directory_mode")
    @classmethod
    def validate_directory_mode(cls, v):
        if not 0 <= v <= 0o7777:
            raise ValueError("Directory mode must be a permission mask between 0 and 0o7777")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings"""
    return Settings()
