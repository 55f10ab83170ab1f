"""
Configuration management using pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import UserRole
from .domain.slot_generator import DEFAULT_SLOT_WIDTH_MINUTES


class DefaultsConfig(BaseModel):
    """Default settings for slot generation."""
    slot_width_minutes: int = DEFAULT_SLOT_WIDTH_MINUTES

    @field_validator("slot_width_minutes")
    @classmethod
    def validate_width(cls, value: int) -> int:
        """Ensure the slot width is positive and fits in a day."""
        if not 0 < value <= 24 * 60:
            raise ValueError(f"slot_width_minutes must be between 1 and 1440, got {value}")
        return value


class UserEntry(BaseModel):
    """A mentor or mentee known to the user directory."""
    id: str
    name: str
    role: UserRole
    email: str = ""


class AppConfig(BaseModel):
    """Application configuration."""
    database_url: str = "sqlite:///mentorbook.db"
    timezone: str = "UTC"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    strict_status_transitions: bool = False
    users: List[UserEntry] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("users")
    @classmethod
    def validate_users(cls, value: List[UserEntry]) -> List[UserEntry]:
        """Ensure user ids are unique."""
        seen_ids: set[str] = set()
        for user in value:
            if user.id in seen_ids:
                raise ValueError(f"Duplicate user id detected: {user.id}")
            seen_ids.add(user.id)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.
        
        Args:
            config_path: Path to the YAML config file
            
        Returns:
            AppConfig instance
            
        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def find_user(self, user_id: str) -> UserEntry | None:
        """Find a user by id."""
        for user in self.users:
            if user.id == user_id:
                return user
        return None

    def mentors(self) -> List[UserEntry]:
        return [user for user in self.users if user.role is UserRole.MENTOR]


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"
    
    if not config_path.exists():
        # Try in the project root (parent of mentorbook/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"
    
    return config_path
