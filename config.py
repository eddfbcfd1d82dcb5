import os
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")


class Settings(BaseModel):
    data_dir: str = Field(DEFAULT_DATA_DIR, description="Directory holding the collection files")
    admin_password: Optional[str] = Field(None, description="Secret required to replace the menu")
    port: int = Field(8000, ge=1, le=65535)
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment. Called once at process start."""
    return Settings(
        data_dir=os.getenv("DATA_DIR") or DEFAULT_DATA_DIR,
        admin_password=os.getenv("ADMIN_PASSWORD") or None,
        port=int(os.getenv("PORT", 8000)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
