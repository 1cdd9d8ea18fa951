from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from inkwell.core.exceptions import InvalidConfigurationValue, InvalidPageSize


class SiteSettings(BaseModel):
    """Site-wide metadata used by the feed and page URLs."""

    title: str = Field(default="Inkwell", description="Site title, used as the feed title")
    url: str = Field(default="", description="Absolute site URL, e.g. https://example.com")
    base_path: str = Field(default="/", description="Path prefix the site is served under (Jekyll baseurl)")
    author: str | None = Field(default=None, description="Default feed author")


class BuildSettings(BaseModel):
    """Knobs for the build stages."""

    paginate: int = Field(default=10, description="Documents per listing page")
    paginate_path: str = Field(default="/page:num/", description="URL template for pages after the first")
    permalink: str = Field(default="date", description="Permalink style name or template")
    feed_limit: int = Field(default=10, description="Number of entries in the feed")
    excerpt_length: int = Field(default=280, description="Characters of body kept in feed summaries")
    max_workers: int | None = Field(default=None, description="Worker threads for parallel stages")


class PathsSettings(BaseModel):
    """Where posts, drafts and build output live.

    Relative directories hang off ``site_root``; use the ``abs_*`` properties.
    """

    site_root: Path = Field(
        default_factory=Path.cwd,
        description="Site directory holding _config.yml",
    )

    posts_dir: Path = Field(default=Path("_posts"), description="Published posts directory")
    drafts_dir: Path = Field(default=Path("_drafts"), description="Drafts directory")
    output_dir: Path = Field(default=Path("_site"), description="Build output directory")

    @property
    def abs_posts_dir(self) -> Path:
        return self._resolve(self.posts_dir)

    @property
    def abs_drafts_dir(self) -> Path:
        return self._resolve(self.drafts_dir)

    @property
    def abs_output_dir(self) -> Path:
        return self._resolve(self.output_dir)

    def _resolve(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return self.site_root / path


class InkwellConfig(BaseSettings):
    """All Inkwell settings.

    Any field can be set from the environment as ``INKWELL_<SECTION>__<FIELD>``,
    for example ``INKWELL_BUILD__PAGINATE=5``.
    """

    site: SiteSettings = Field(default_factory=SiteSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)
    paths: PathsSettings = Field(default_factory=PathsSettings)

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="INKWELL_",
        env_nested_delimiter="__",
    )

    @classmethod
    def load(cls, site_root: Path | None = None) -> "InkwellConfig":
        """Load configuration from ``_config.yml`` and environment variables."""
        from inkwell.core.config_loader import ConfigLoader

        return ConfigLoader(site_root).load()

    def validate_for_build(self) -> None:
        """Reject settings that would make a build meaningless.

        Raises:
            InvalidPageSize: If ``build.paginate`` is below one.
            InvalidConfigurationValue: If a feed or worker setting is out of range.

        """
        if self.build.paginate < 1:
            raise InvalidPageSize(self.build.paginate)
        if self.build.feed_limit < 0:
            raise InvalidConfigurationValue("build.feed_limit", self.build.feed_limit, "must not be negative")
        if self.build.excerpt_length < 0:
            raise InvalidConfigurationValue(
                "build.excerpt_length", self.build.excerpt_length, "must not be negative"
            )
        if self.build.max_workers is not None and self.build.max_workers < 1:
            raise InvalidConfigurationValue("build.max_workers", self.build.max_workers, "must be at least 1")
        if ":num" not in self.build.paginate_path:
            raise InvalidConfigurationValue(
                "build.paginate_path", self.build.paginate_path, "must contain the ':num' placeholder"
            )
