from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class CookieConfig(BaseModel):
    """Cookie material handed to yt-dlp. At most one source is consulted."""
    path: Optional[str] = Field(default=None, description="Path to an existing Netscape cookie file")
    data: Optional[str] = Field(default=None, description="Raw cookie file contents")
    data_b64: Optional[str] = Field(default=None, description="Base64 encoded cookie file contents")

class YtDlpConfig(BaseModel):
    binary: str = Field(default="yt-dlp", description="yt-dlp executable")
    js_runtime: Optional[str] = Field(default=None, description="JS runtime (e.g., deno:/usr/local/bin/deno)")
    socket_timeout: int = Field(default=10, ge=1, description="Socket timeout for yt-dlp")
    format: str = Field(default="bv*+ba/b", description="Format selector for streams and downloads")
    merge_output_format: str = Field(default="mp4", description="Container for merged downloads")

class LimitsConfig(BaseModel):
    metadata_timeout: float = Field(default=45.0, gt=0, description="Timeout for -J metadata extraction (s)")
    direct_url_timeout: float = Field(default=30.0, gt=0, description="Timeout for direct URL resolution (s)")
    download_timeout: float = Field(default=120.0, gt=0, description="Timeout for full file downloads (s)")
    image_fetch_timeout: float = Field(default=30.0, gt=0, description="Timeout for remote image fetches (s)")
    max_output_bytes: int = Field(default=10 * 1024 * 1024, ge=1024, description="Max yt-dlp output size")
    max_listed_videos: int = Field(default=25, ge=1, description="Videos listed by /media")
    max_zip_images: int = Field(default=20, ge=1, description="Images fetched into /x-images archives")
    max_body_bytes: int = Field(default=256 * 1024, ge=1024, description="Max JSON request body size")

class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

class ApiConfig(BaseModel):
    title: str = Field(default="media-relay", description="API title")
    description: str = Field(default="yt-dlp mediation API", description="API description")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    debug: bool = Field(default=False, description="Enable debug mode")

class Config(BaseSettings):
    """Environment driven configuration. Sections use SECTION__FIELD variables."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    host: str = Field(default="0.0.0.0", description="Listen address")
    port: int = Field(default=3000, ge=1, le=65535, description="Listen port")

    cookies_path: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("YTDLP_COOKIES_PATH", "cookies_path")
    )
    cookies_data: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("YTDLP_COOKIES", "cookies_data")
    )
    cookies_b64: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("COOKIES_B64", "cookies_b64")
    )

    ytdlp: YtDlpConfig = Field(default_factory=YtDlpConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @property
    def cookies(self) -> CookieConfig:
        return CookieConfig(
            path=self.cookies_path,
            data=self.cookies_data,
            data_b64=self.cookies_b64,
        )

config = Config()
