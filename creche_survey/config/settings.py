from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict


class Settings(BaseSettings):
    max_rows: int = Field(50000, description="Maximum allowed rows per dataset")
    max_columns: int = Field(500, description="Maximum allowed columns per dataset")
    log_level: str = Field("INFO", description="Logging level")
    reserved_column_start: int = Field(
        1, description="First column position excluded from generic question statistics"
    )
    reserved_column_end: int = Field(
        8, description="Last column position excluded from generic question statistics"
    )
    export_indent: int = Field(2, description="Indentation of JSON exports")
    ranking_size: int = Field(5, description="Facilities kept in top/low rankings")

    model_config = ConfigDict(env_prefix="CRECHE_SURVEY_", case_sensitive=False)


settings = Settings()
