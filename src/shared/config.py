from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    TKY2JGD_BASE_URL: str = "https://vldb.gsi.go.jp/sokuchi/surveycalc/tky2jgd"
    TKY2JGD_TIMEOUT_S: float = 30.0          # 각 요청(step)별 제한 시간
    TKY2JGD_RESULT_ENCODING: str = "shift_jis"
    DEFAULT_CONVERTER: str = "local"          # "local" (pyproj) | "tky2jgd" (Web版)
    GPX_CREATOR: str = "gpx-datum-tools"
    LOG_LEVEL: str = "WARNING"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
