# portfolio/core/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Literal, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    api_title: str = Field(default="Portfolio Contact API", alias="API_TITLE")
    cors_origins: str = Field(default="http://localhost:5173", alias="CORS_ORIGINS")

    # SMTP session; credentials never live in code
    smtp_host: Optional[str] = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: Optional[str] = Field(default=None, alias="SMTP_USERNAME")
    smtp_password: Optional[str] = Field(default=None, alias="SMTP_PASSWORD")
    # "starttls" (587), "ssl" (465) or "none" (local relays only)
    smtp_security: Literal["starttls", "ssl", "none"] = Field(default="starttls", alias="SMTP_SECURITY")
    smtp_timeout: float = Field(default=30.0, alias="SMTP_TIMEOUT")
    smtp_verify_tls: bool = Field(default=True, alias="SMTP_VERIFY_TLS")

    # Fixed identities: the site sends, the owner receives
    mail_from_address: Optional[str] = Field(default=None, alias="MAIL_FROM_ADDRESS")
    mail_from_name: str = Field(default="Portfolio Contact Form", alias="MAIL_FROM_NAME")
    mail_to_address: Optional[str] = Field(default=None, alias="MAIL_TO_ADDRESS")
    mail_to_name: Optional[str] = Field(default=None, alias="MAIL_TO_NAME")

    # Append-only troubleshooting log for the contact endpoint
    contact_debug_log: str = Field(default="contact_debug.log", alias="CONTACT_DEBUG_LOG")

    # Where the submission client posts to
    contact_endpoint: str = Field(default="http://localhost:8000/api/contact", alias="CONTACT_ENDPOINT")

    @property
    def mail_configured(self) -> bool:
        return bool(self.smtp_host and self.mail_from_address and self.mail_to_address)

settings = Settings()
