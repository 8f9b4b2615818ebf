from datetime import date

from pydantic_settings import BaseSettings, SettingsConfigDict

from shiftlock.core.rules import LaborRules


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    DATABASE_URL: str = "sqlite+aiosqlite:///./shiftlock.db"

    # Profil par défaut : lundi racine de la première quatorzaine, niveau grille
    DEFAULT_ROOT_DATE: date = date(2026, 1, 19)
    DEFAULT_ROLE: str = "N3"

    # Seuil thefuzz pour reconnaître les en-têtes de colonnes des décomptes employeur
    FUZZY_MATCH_THRESHOLD: int = 85

    # Jours fériés France métropole : calendrier.api.gouv.fr
    PUBLIC_HOLIDAYS_API_ENABLED: bool = True
    PUBLIC_HOLIDAYS_API_URL: str = "https://calendrier.api.gouv.fr/jours-feries/metropole"
    PUBLIC_HOLIDAYS_API_TIMEOUT_SEC: float = 10.0

    RULES: LaborRules = LaborRules()


settings = Settings()
