from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # static verification value; OTP delivery is not wired up
    demo_otp: str = "123456"

    store_backend: Literal["memory", "file", "mongo"] = "memory"
    data_path: str = "scrapgo-data.json"
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "scrapgo"

    jwt_secret: str = "dev"
    jwt_alg: str = "HS256"
    access_ttl_min: int = 720

    recent_limit: int = 3
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="SCRAPGO_", env_file=".env", extra="ignore")

settings = Settings()
