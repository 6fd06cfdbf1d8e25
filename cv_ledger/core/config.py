from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Владелец реестра, фиксируется при первом создании состояния
    owner_address: str
    owner_password: str

    bcrypt_rounds: int = 12
    log_level: str = "INFO"
    sql_echo: bool = False

    # Уведомления LikeSet
    event_handler_timeout: float = 1.0
    ws_queue_size: int = 100

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
