from dataclasses import dataclass
from pathlib import Path
from pydantic_settings import BaseSettings


class ConfigurationError(RuntimeError):
    pass


@dataclass(frozen=True)
class MediaStoreConfig:
    cloud_name: str
    api_key: str
    api_secret: str
    folder: str


class Settings(BaseSettings):
    data_dir: Path = Path.home() / "LeaveManagement"
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Cloudinary account; all three credentials are required at startup.
    cloudinary_cloud_name: str | None = None
    cloudinary_api_key: str | None = None
    cloudinary_api_secret: str | None = None
    cloudinary_folder: str = "leave-management-system"

    @property
    def db_path(self) -> Path:
        return self.data_dir / "db.sqlite"

    def media_store_config(self) -> MediaStoreConfig:
        missing = [
            name for name in ("cloudinary_cloud_name", "cloudinary_api_key", "cloudinary_api_secret")
            if not getattr(self, name)
        ]
        if missing:
            names = ", ".join(f"LEAVE_{name.upper()}" for name in missing)
            raise ConfigurationError(f"Media store is not configured, missing: {names}")
        return MediaStoreConfig(
            cloud_name=self.cloudinary_cloud_name,
            api_key=self.cloudinary_api_key,
            api_secret=self.cloudinary_api_secret,
            folder=self.cloudinary_folder,
        )

    model_config = {"env_prefix": "LEAVE_"}


settings = Settings()
