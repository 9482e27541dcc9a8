from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file='.env', extra='allow', case_sensitive=False, populate_by_name=True)

    log_level: str = 'INFO'

    logfire_token: Optional[str] = None

    # Sentry
    sentry_dsn: Optional[str] = None

    # Pipedrive
    pd_api_key: Optional[str] = Field(None, validation_alias='PIPEDRIVE_API_KEY')
    pd_company_domain: Optional[str] = Field(None, validation_alias='PIPEDRIVE_COMPANY_DOMAIN')
    # Only needed to point at a sandbox or a test server, otherwise derived from the company domain
    pd_base_url: Optional[str] = Field(None, validation_alias='PIPEDRIVE_BASE_URL')
    pd_request_timeout: float = 30.0

    # Sync source files
    mappings_path: Path = Path('mappings/mappings.json')
    input_data_path: Path = Path('mappings/input_data.json')

    @field_validator('pd_api_key', 'pd_company_domain', 'pd_base_url', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def has_pd_credentials(self) -> bool:
        return bool(self.pd_api_key and self.pd_company_domain)

    @property
    def pd_api_url(self) -> str:
        if self.pd_base_url:
            return f'{self.pd_base_url.rstrip("/")}/api/v1'
        return f'https://{self.pd_company_domain}.pipedrive.com/api/v1'


settings = Settings()
