import urllib.parse
from dataclasses import dataclass


@dataclass
class PostgresConfig:
    host: str
    port: int
    username: str
    password: str
    database: str = "multi_ai_chat"
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 10  # seconds
    pool_recycle: int = 3600
    connect_timeout: int = 15  # seconds, also used as asyncpg command_timeout
    application_name: str = "multi-ai-chat"
    echo: bool = False

    @property
    def async_url(self) -> str:
        """asyncpg URL; the password is URL-encoded."""
        if not self.host:
            raise ValueError("Database host configuration is missing.")
        password = urllib.parse.quote_plus(self.password) if self.password else ""
        return f"postgresql+asyncpg://{self.username}:{password}@{self.host}:{self.port}/{self.database}"

    def connect_args(self) -> dict:
        return {
            "timeout": self.connect_timeout,
            "command_timeout": self.connect_timeout,
            "server_settings": {"application_name": self.application_name},
        }
