from os import getenv
from dotenv import load_dotenv

load_dotenv()

class Config:

    ALLOWED_ORIGINS: list = getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")


    POSTGRES_USER: str = getenv("POSTGRES_USER")
    POSTGRES_PASSWORD: str = getenv("POSTGRES_PASSWORD")
    POSTGRES_DB: str = getenv("POSTGRES_DB")
    POSTGRES_HOST: str = getenv("POSTGRES_HOST", "db")
    POSTGRES_PORT: str = getenv("POSTGRES_PORT", "5432")

    @property
    def DATABASE_URL(self) -> str:
        return getenv(
            "DATABASE_URL",
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # Auth
    JWT_SECRET: str = getenv("JWT_SECRET")
    JWT_ALGORITHM: str = getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_MINUTES: int = int(getenv("JWT_EXPIRES_MINUTES", "720"))

    # AI provider
    AI_API_BASE_URL: str = getenv("AI_API_BASE_URL")
    AI_API_TOKEN: str = getenv("AI_API_TOKEN")
    AI_POLL_TIMEOUT: int = int(getenv("AI_POLL_TIMEOUT", "600"))
    AI_POLL_INTERVAL: int = int(getenv("AI_POLL_INTERVAL", "10"))

    # Document storage: "local" or "s3"
    STORAGE_BACKEND: str = getenv("STORAGE_BACKEND", "local")
    STORAGE_PATH: str = getenv("STORAGE_PATH", "./uploads")
    MAX_UPLOAD_MB: int = int(getenv("MAX_UPLOAD_MB", "50"))

    S3_ENDPOINT_URL: str = getenv("S3_ENDPOINT_URL")
    S3_BUCKET_NAME: str = getenv("S3_BUCKET_NAME")
    S3_REGION: str = getenv("S3_REGION")
    S3_ACCESS_KEY: str = getenv("S3_ACCESS_KEY")
    S3_SECRET_KEY: str = getenv("S3_SECRET_KEY")

    # Telegram notifications
    TELEGRAM_BOT_TOKEN: str = getenv("TELEGRAM_BOT_TOKEN")
    TELEGRAM_CHAT_ID: str = getenv("TELEGRAM_CHAT_ID")

    APP_PORT: int = int(getenv("APP_PORT", "8000"))

    def validate(self) -> None:
        """Checks that required environment variables are present."""
        required_vars = {
            "JWT_SECRET": self.JWT_SECRET,
        }
        if self.STORAGE_BACKEND == "s3":
            required_vars.update({
                "S3_BUCKET_NAME": self.S3_BUCKET_NAME,
                "S3_ACCESS_KEY": self.S3_ACCESS_KEY,
                "S3_SECRET_KEY": self.S3_SECRET_KEY,
            })
        missing_vars = [key for key, value in required_vars.items() if not value]
        if missing_vars:
            raise ValueError(f"Missing required environment variables: {', '.join(missing_vars)}")

settings = Config()
settings.validate()
