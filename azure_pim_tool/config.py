"""
Runtime settings read from the environment (and a local .env file).
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_TIMEOUT = 30.0

ENV_USERID = "AZURE_PIM_USERID"
ENV_TIMEOUT = "AZURE_PIM_TIMEOUT"
ENV_DEFAULT_DURATION = "AZURE_PIM_DEFAULT_DURATION"


class Settings(BaseModel):
    """Settings shared by every command."""

    principal_id: Optional[str] = None
    timeout: float = Field(default=DEFAULT_TIMEOUT)
    default_duration: str = "60m"

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables, reading .env first."""
        load_dotenv()
        values = {}
        if os.getenv(ENV_USERID):
            values["principal_id"] = os.getenv(ENV_USERID)
        if os.getenv(ENV_TIMEOUT):
            values["timeout"] = os.getenv(ENV_TIMEOUT)
        if os.getenv(ENV_DEFAULT_DURATION):
            values["default_duration"] = os.getenv(ENV_DEFAULT_DURATION)
        return cls(**values)
