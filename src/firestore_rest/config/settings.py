"""Client configuration and environment loading using Pydantic Settings."""

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_ID = "(default)"


def format_private_key(private_key: str) -> str:
    """Turn escaped ``\\n`` sequences into real newlines.

    Private keys copied into environment variables usually arrive with their
    newlines escaped, which the PEM parser rejects.

    Args:
        private_key: PEM private key, possibly with escaped newlines.

    Returns:
        The key with real newlines.
    """
    if "\\n" in private_key:
        return private_key.replace("\\n", "\n")
    return private_key


class FirestoreConfig(BaseModel):
    """Connection settings for a FirestoreClient.

    Required values are checked by the client on first use, not here, so a
    config can be built before its environment is fully available.
    """

    project_id: str = ""
    client_email: str = ""
    private_key: str = ""
    database_id: str = DEFAULT_DATABASE_ID

    # Firestore Emulator (local development)
    use_emulator: bool = False
    emulator_host: str = "localhost"
    emulator_port: int = 8080

    debug: bool = False

    model_config = {"frozen": True}

    @field_validator("private_key")
    @classmethod
    def _unescape_private_key(cls, value: str) -> str:
        return format_private_key(value)

    @field_validator("database_id")
    @classmethod
    def _default_database(cls, value: str) -> str:
        return value or DEFAULT_DATABASE_ID


class Settings(BaseSettings):
    """Client configuration from environment variables.

    Nothing is required at load time; missing values surface as a
    ConfigurationError on the first client operation.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Firebase service account
    # -------------------------------------------------------------------------
    FIREBASE_PROJECT_ID: str = ""
    FIREBASE_CLIENT_EMAIL: str = ""
    FIREBASE_PRIVATE_KEY: str = ""

    FIRESTORE_DATABASE_ID: str = DEFAULT_DATABASE_ID

    # -------------------------------------------------------------------------
    # Firestore Emulator (local development)
    # -------------------------------------------------------------------------
    FIRESTORE_EMULATOR: bool = False
    FIRESTORE_EMULATOR_HOST: str = "localhost"
    FIRESTORE_EMULATOR_PORT: int = 8080

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    FIRESTORE_DEBUG: bool = False
    LOG_JSON: bool = True

    @property
    def is_local(self) -> bool:
        """Check if running against the emulator."""
        return self.FIRESTORE_EMULATOR

    @property
    def emulator_address(self) -> tuple[str, int]:
        """Emulator host and port.

        FIRESTORE_EMULATOR_HOST is usually set as ``host:port`` (the form
        gcloud prints); a port given there wins over FIRESTORE_EMULATOR_PORT.
        """
        host, sep, port = self.FIRESTORE_EMULATOR_HOST.rpartition(":")
        if sep and host and port.isdigit():
            return host, int(port)
        return self.FIRESTORE_EMULATOR_HOST, self.FIRESTORE_EMULATOR_PORT

    def to_config(self) -> FirestoreConfig:
        """Build the client configuration from the loaded values."""
        emulator_host, emulator_port = self.emulator_address
        return FirestoreConfig(
            project_id=self.FIREBASE_PROJECT_ID,
            client_email=self.FIREBASE_CLIENT_EMAIL,
            private_key=self.FIREBASE_PRIVATE_KEY,
            database_id=self.FIRESTORE_DATABASE_ID,
            use_emulator=self.FIRESTORE_EMULATOR,
            emulator_host=emulator_host,
            emulator_port=emulator_port,
            debug=self.FIRESTORE_DEBUG,
        )


# Singleton instance (lazy initialization)
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the loaded settings (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
