from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientConfig(BaseSettings):
    default_host: str = "irc.freenode.net"
    port: int = 6667
    encoding: str = "utf-8"
    max_line_bytes: int = 512
    echo_outbound: bool = True
    log_level: str = "INFO"
    console_log_level: str = "ERROR"
    logger_name: str = "irc_client"
    log_dir: str = "logs"

    model_config = SettingsConfigDict(
        env_prefix="IRC_CLIENT_", env_file=".env", extra="ignore"
    )


# Global instance (singleton pattern)
client_config = ClientConfig()

DEFAULT_HOST = client_config.default_host
IRC_PORT = client_config.port
LOGGER_NAME = client_config.logger_name
