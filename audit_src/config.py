"""Configuration management for Clinical Chart Audit."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)
else:
    # Fall back to template for defaults
    template_path = Path(__file__).parent.parent / ".env.template"
    if template_path.exists():
        load_dotenv(template_path)


def _parse_sector_phones(raw: str) -> dict[str, str]:
    """Parse "Sector=phone,Sector=phone" into a routing table."""
    phones: dict[str, str] = {}
    for entry in raw.split(","):
        if "=" in entry:
            sector, phone = entry.strip().split("=", 1)
            if sector.strip() and phone.strip():
                phones[sector.strip()] = phone.strip()
    return phones


class Config:
    """Application configuration."""

    # Local time zone used for admission/discharge timestamps and "today"
    AUDIT_TIMEZONE: str = os.getenv("AUDIT_TIMEZONE", "America/Argentina/Buenos_Aires")

    # Insurer named in message templates
    PAYER_NAME: str = os.getenv("PAYER_NAME", "OSDE")

    # Extraction windows
    DEMOGRAPHICS_WINDOW_LINES: int = int(os.getenv("DEMOGRAPHICS_WINDOW_LINES", "120"))
    PROGRESS_NOTE_WINDOW_CHARS: int = int(os.getenv("PROGRESS_NOTE_WINDOW_CHARS", "2000"))
    DISCHARGE_TAIL_LINES: int = int(os.getenv("DISCHARGE_TAIL_LINES", "500"))
    SUMMARY_TAIL_LINES: int = int(os.getenv("SUMMARY_TAIL_LINES", "400"))
    SURGICAL_WINDOW_CHARS: int = int(os.getenv("SURGICAL_WINDOW_CHARS", "3000"))

    # Audit store
    AUDIT_DB_PATH: str = os.getenv("AUDIT_DB_PATH", "~/.chart-audit/audits.db")

    # WhatsApp messaging API
    WHATSAPP_API_URL: str | None = os.getenv("WHATSAPP_API_URL")
    WHATSAPP_API_TOKEN: str | None = os.getenv("WHATSAPP_API_TOKEN")
    WHATSAPP_TIMEOUT: int = int(os.getenv("WHATSAPP_TIMEOUT", "30"))

    # Recipient routing
    # Format: "Sector=phone,Sector=phone" e.g. "Admisión=5491155551234,Cirugía=5491155559876"
    SECTOR_PHONE_NUMBERS: dict[str, str] = _parse_sector_phones(
        os.getenv("SECTOR_PHONE_NUMBERS", "")
    )
    DEFAULT_PHONE_NUMBER: str | None = os.getenv("DEFAULT_PHONE_NUMBER")

    # Message footer
    INSTITUTION_NAME: str = os.getenv("INSTITUTION_NAME", "Sanatorio Argentino")
    MESSAGE_SIGNATURE: str = os.getenv("MESSAGE_SIGNATURE", "Sistema Salus")

    @classmethod
    def phone_for_sector(cls, sector: str) -> str | None:
        """Get the recipient phone for a sector, falling back to the default."""
        return cls.SECTOR_PHONE_NUMBERS.get(sector) or cls.DEFAULT_PHONE_NUMBER


config = Config()
