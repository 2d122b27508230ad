from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FORMS_", env_file=".env", extra="ignore")

    filename: str = Field(default="forms.json", description="JSON file holding templates and instances")
    seed_filename: Optional[str] = Field(default=None, description="Fixture copied on first run (default: sibling initial-forms.json)")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=56018, validation_alias=AliasChoices("FORMPORT", "FORMS_PORT"))
    cors_origins: List[str] = Field(default=["*"])
    log_level: str = Field(default="INFO")
    assertions: bool = Field(default=False, description="Check store invariants on every call")

settings = Settings()
