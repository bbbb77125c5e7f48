from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env into os.environ
load_dotenv()


class Settings(BaseSettings):
    """Decoder configuration settings backed by environment variables."""

    max_nesting_depth: int = Field(
        default=64,
        ge=1,
        validation_alias="GATEWAY_RESULTS_MAX_NESTING_DEPTH",
        description="Maximum depth of ROW values nested inside a top-level row."
    )
    change_flags_policy: Literal["reject", "ignore"] = Field(
        default="reject",
        validation_alias="GATEWAY_RESULTS_CHANGE_FLAGS_POLICY",
        description="Action when the change flag count differs from the row count: reject or ignore."
    )
    log_level: str = Field(
        default="INFO",
        validation_alias="GATEWAY_RESULTS_LOG_LEVEL",
        description="Root log level used by the command line interface."
    )
    log_json: bool = Field(
        default=False,
        validation_alias="GATEWAY_RESULTS_LOG_JSON",
        description="Emit JSON log records instead of plain text."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
