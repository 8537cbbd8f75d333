"""Application configuration."""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )

    # App settings
    app_name: str = "ReelGen"
    debug: bool = False

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/reelgen.db"

    # Data directories
    data_dir: Path = Path("./data")
    temp_dir: Path = Path("./data/temp")
    output_dir: Path = Path("./data/output")

    # FFmpeg settings
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    ffmpeg_timeout_seconds: Optional[float] = None  # None = wait forever

    # Encode profile shared by every clip and bumper so concat can stream-copy
    video_codec: str = "libx264"
    video_preset: str = "fast"
    video_crf: int = 23
    pixel_format: str = "yuv420p"
    audio_codec: str = "aac"
    audio_bitrate: str = "192k"
    audio_sample_rate: int = 48000
    frame_rate: int = 30
    frame_width: int = 1280
    frame_height: int = 720

    # Overlay text
    font_file: Optional[str] = None
    overlay_font_size: int = 20

    # Bumpers
    transition_seconds: float = 2.0
    intro_seconds: float = 5.0
    outro_seconds: float = 3.0
    transition_color: str = "#2c3e50"
    intro_color: str = "#34495e"
    outro_color: str = "#2c3e50"
    audio_only_color: str = "#2c3e50"
    transition_tone_hz: int = 800
    intro_tone_hz: int = 1000
    outro_tone_hz: int = 1200

    # Fallback
    fallback_seconds_per_highlight: int = 15
    fallback_color: str = "#1a1a1a"
    fallback_plain_color: str = "blue"
    fallback_tone_hz: int = 1000


settings = Settings()

# Ensure directories exist
settings.data_dir.mkdir(parents=True, exist_ok=True)
settings.temp_dir.mkdir(parents=True, exist_ok=True)
settings.output_dir.mkdir(parents=True, exist_ok=True)
