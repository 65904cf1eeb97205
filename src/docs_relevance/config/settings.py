"""Application configuration settings."""

from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class LoggingConfig(BaseSettings):
    """Logging configuration settings."""

    level: str = Field(default="INFO", description="Log level")
    file_path: Optional[str] = Field(default=None, description="Log file path")
    json_format: bool = Field(default=True, description="Use JSON log format")

    class Config:
        env_prefix = "LOG_"


class CorpusConfig(BaseSettings):
    """Where the documentation export lives and how long it stays fresh."""

    base_url: str = Field(
        default="http://localhost:3000",
        description="Site that serves the flat documentation export",
    )
    export_path: str = Field(
        default="/llms.txt", description="Path of the export on the site"
    )
    fetch_timeout: float = Field(
        default=10.0, gt=0, description="Export fetch timeout in seconds"
    )
    cache_ttl: float = Field(
        default=3600.0, gt=0, description="Corpus/index epoch TTL in seconds"
    )

    class Config:
        env_prefix = "DOCS_CORPUS_"

    def get_export_url(self) -> str:
        """Join base url and export path without doubling slashes."""
        return self.base_url.rstrip("/") + "/" + self.export_path.lstrip("/")


class IndexFieldWeights(BaseModel):
    """Index-time field boosts; title and heading matches dominate."""

    title: float = Field(default=15.0, gt=0, description="Title boost")
    headings: float = Field(default=10.0, gt=0, description="Headings boost")
    content: float = Field(default=5.0, gt=0, description="Content boost")
    url: float = Field(default=2.0, gt=0, description="URL boost")


class ScoringWeights(BaseModel):
    """Heuristic boosts layered on top of index relevance."""

    index_multiplier: float = Field(default=20.0, description="Index score multiplier")
    heading_term: float = Field(default=20.0, description="Per query term in headings")
    url_term: float = Field(default=25.0, description="Per query term in url")
    exact_title: float = Field(default=300.0, description="Title equals query")
    partial_title: float = Field(default=150.0, description="Title contains query")
    definition: float = Field(default=30.0, description="'what is' content for definitions")
    code_block: float = Field(default=15.0, description="Per fenced code block")
    code_block_cap: float = Field(default=60.0, description="Code block bonus cap")
    recency: float = Field(default=20.0, description="Recency markers in content")
    section_match: float = Field(default=100.0, description="Query names the url section")
    short_content_chars: int = Field(default=500, ge=0)
    short_content_factor: float = Field(default=0.5, gt=0)
    long_content_chars: int = Field(default=3000, ge=0)
    long_content_factor: float = Field(default=1.3, gt=0)


class CurationConfig(BaseModel):
    """Thresholding and diversity limits for the final result list."""

    threshold_ratio: float = Field(
        default=0.15, ge=0, le=1, description="Share of the top score to keep"
    )
    min_threshold: float = Field(default=30.0, ge=0, description="Score floor")
    guaranteed_slots: int = Field(
        default=5, ge=0, description="Top results admitted regardless of section"
    )
    max_results: int = Field(default=25, gt=0, description="Hard result cap")
    max_per_section: int = Field(
        default=5, gt=0, description="Per url-section cap beyond guaranteed slots"
    )


class ContextConfig(BaseModel):
    """How ranked results are packed into the assistant prompt."""

    primary_results: int = Field(
        default=12, gt=0, description="Results inlined as full sections"
    )
    site_url: Optional[str] = Field(
        default=None, description="Absolute site prefix for supplementary links"
    )


class SearchConfig(BaseModel):
    """Search configuration settings."""

    field_weights: IndexFieldWeights = Field(default_factory=IndexFieldWeights)
    scoring: ScoringWeights = Field(default_factory=ScoringWeights)
    curation: CurationConfig = Field(default_factory=CurationConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)


class Settings(BaseSettings):
    """Main application settings."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    corpus: CorpusConfig = Field(default_factory=CorpusConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)

    debug: bool = Field(default=False, description="Enable debug mode")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
