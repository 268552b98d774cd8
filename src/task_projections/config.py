"""Configuration for TaskProjections."""

from pydantic import Field
from pydantic_settings import BaseSettings

SUNDAY = 6
MONDAY = 0


class Config(BaseSettings):
    """Application configuration."""

    data_dir: str = Field(default="data")
    tasks_folder: str = Field(default="tasks")
    categories_file: str = Field(default="categories.yaml")
    timezone: str = Field(default="local")  # "local", "UTC", IANA name or "+02:00"
    week_start: int = Field(default=SUNDAY, ge=0, le=6)  # datetime.weekday() numbering
    streak_window: int = Field(default=30, gt=0)
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)
