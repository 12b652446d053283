from pathlib import Path
from typing import Literal, Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from scrollsplit.splitting import SplitConfig


class SplittingConfig(BaseModel):
    """Configuration for blank-line splitting."""

    desired_height: int = Field(default=2000, gt=0, description="Preferred maximum segment height in pixels")
    tolerance: int = Field(default=80, ge=0, le=255, description="Rows brighter than this mean luminance are blank")
    blank_run_length: int = Field(default=1, ge=1, description="Consecutive blank rows required at a cut")

    def to_split_config(self) -> SplitConfig:
        """Convert to the splitter's configuration."""
        return SplitConfig(
            desired_height=self.desired_height,
            tolerance=self.tolerance,
            blank_run_length=self.blank_run_length,
        )


class OutputConfig(BaseModel):
    """Configuration for writing segments."""

    output_dir: Path = Field(default=Path("output"), description="Directory segment files are written to")
    image_format: Literal["png", "jpeg", "webp"] = Field(default="png", description="Encoding of segment files")
    open_after_split: bool = Field(default=False, description="Open written segments in the image viewer")
    max_input_size_mb: int = Field(default=200, gt=0, description="Largest accepted input file")
    max_image_pixels: Optional[int] = Field(
        default=500_000_000, gt=0, description="Pillow decompression bomb limit (None disables it)"
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    splitting: SplittingConfig = SplittingConfig()
    output: OutputConfig = OutputConfig()

    class Config:
        env_prefix = "SCROLLSPLIT_"
        env_nested_delimiter = "__"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
