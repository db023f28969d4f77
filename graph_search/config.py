"""
Microsoft Search Connector - Configuration

Pydantic Settings for all process-level configuration via environment variables.
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional, Literal

from graph_search import __version__


DEFAULT_TRUSTED_DOMAINS = [
    "sharepoint.com",
    "sharepoint-df.com",
    "sharepoint.us",
    "svc.ms",
    "graph.microsoft.com",
    "office.com",
    "office.net",
]

# File extensions the thumbnail service can render (upper case)
DEFAULT_PREVIEW_EXTENSIONS = [
    "3G2", "3GP", "AI", "ARW", "ASF", "BMP", "CR2", "CRW", "CSV", "CUR",
    "DCM", "DNG", "DOC", "DOCM", "DOCX", "DOTM", "DOTX", "DWG", "EML",
    "EPUB", "ERF", "FBX", "GIF", "HEIC", "HEIF", "HEVC", "HTM", "HTML",
    "ICO", "JPE", "JPEG", "JPG", "KEY", "M2TS", "M4V", "MD", "MOV", "MOVIE",
    "MP3", "MP4", "MP4V", "MSG", "MTS", "NEF", "ODP", "ODS", "ODT", "ORF",
    "PAGES", "PDF", "PEF", "PNG", "POT", "POTM", "POTX", "PPS", "PPSM",
    "PPSX", "PPT", "PPTM", "PPTX", "PSB", "PSD", "RTF", "SKETCH", "SVG",
    "TIF", "TIFF", "TXT", "VSD", "VSDX", "WMV", "XD", "XLS", "XLSB", "XLSM",
    "XLSX", "XML", "ZIP",
]


class GraphSettings(BaseSettings):
    """Microsoft Graph API configuration."""
    endpoint_url: str = Field("https://graph.microsoft.com", alias="GRAPH_ENDPOINT_URL")
    access_token: Optional[str] = Field(None, alias="GRAPH_ACCESS_TOKEN")
    sdk_version: str = Field(__version__, alias="GRAPH_SDK_VERSION")
    timeout_ms: int = Field(30000, alias="GRAPH_TIMEOUT_MS")
    locale: str = Field("en-US", alias="GRAPH_LOCALE")

    model_config = {"env_prefix": "", "extra": "ignore"}


class PreviewSettings(BaseSettings):
    """Preview and thumbnail resolution configuration."""
    trusted_domains: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TRUSTED_DOMAINS),
        alias="PREVIEW_TRUSTED_DOMAINS",
    )
    valid_extensions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PREVIEW_EXTENSIONS),
        alias="PREVIEW_VALID_EXTENSIONS",
    )
    thumbnail_size: str = Field("c400x999", alias="PREVIEW_THUMBNAIL_SIZE")

    model_config = {"env_prefix": "", "extra": "ignore"}


class MCPSettings(BaseSettings):
    """MCP server configuration."""
    transport: Literal["sse", "stdio"] = Field("stdio", alias="MCP_TRANSPORT")
    port: int = Field(8080, alias="MCP_PORT")
    host: str = Field("0.0.0.0", alias="MCP_HOST")

    model_config = {"env_prefix": "", "extra": "ignore"}


class LogSettings(BaseSettings):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", alias="LOG_LEVEL"
    )

    model_config = {"env_prefix": "", "extra": "ignore"}


class Settings(BaseSettings):
    """Main settings aggregating all configuration."""
    graph: GraphSettings = Field(default_factory=GraphSettings)
    preview: PreviewSettings = Field(default_factory=PreviewSettings)
    mcp: MCPSettings = Field(default_factory=MCPSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = {"env_prefix": "", "extra": "ignore"}


def get_settings() -> Settings:
    """Load settings from environment variables."""
    from dotenv import load_dotenv
    load_dotenv()
    return Settings()
