from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

class AppConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    storage_path: str = Field(default="./data", description="Directory holding the journal document")
    journal_file: str = Field(default="journal-entries.json", description="File name of the journal document")
    host: str = Field(default="0.0.0.0", description="Interface the HTTP server binds to")
    port: int = Field(default=5000, ge=1, le=65535, description="Port the HTTP server listens on")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed cross-origin callers")
    log_level: LogLevel = Field(default="INFO", description="Logging level name")
    log_dir: Optional[str] = Field(default=None, description="Directory for rotating log files, console only if unset")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value
