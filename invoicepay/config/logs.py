from pydantic import BaseModel, field_validator

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class LogSettings(BaseModel):
    level: str = "info"
    json_output: bool = False  # JSON lines instead of console rendering

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip().lower()
        if v not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}")
        return v
