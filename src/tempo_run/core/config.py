"""
Configuration management for Tempo Run
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class SpotifyConfig:
    """Configuration for the Spotify Web API (playback state and queue)."""

    access_token: str = ""
    api_base: str = "https://api.spotify.com/v1"
    request_timeout: float = 10.0


@dataclass
class EnrichmentConfig:
    """Configuration for BPM lookup and fallback retries."""

    lookup_base_url: str = "https://songbpm.com"
    max_attempts: int = 3
    request_timeout: float = 10.0
    max_workers: int = 8
    user_agent: str = "tempo-run/0.1"

    def validate(self) -> None:
        """Validate enrichment configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")


@dataclass
class AIConfig:
    """Configuration for the generative BPM fallback (OpenAI-compatible API)."""

    api_key: Optional[str] = None
    base_url: str = "https://api.groq.com/openai/v1"
    model: str = "llama3-8b-8192"
    enabled: bool = True
    request_timeout: float = 20.0


@dataclass
class RunConfig:
    """Configuration for run sessions."""

    poll_interval_seconds: float = 2.0
    tick_interval_seconds: float = 1.0
    default_target_pace: float = 5.0  # min/km
    min_target_pace: float = 3.0
    max_target_pace: float = 8.0

    def validate(self) -> None:
        """Validate run configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.poll_interval_seconds <= 0 or self.tick_interval_seconds <= 0:
            raise ValueError("Poll and tick intervals must be positive")
        if self.min_target_pace <= 0 or self.min_target_pace > self.max_target_pace:
            raise ValueError(
                f"Invalid target pace range: "
                f"[{self.min_target_pace}, {self.max_target_pace}]"
            )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/tempo-run/tempo-run.log)
    )
    console_output: bool = False  # Also output to stderr (for debugging)


@dataclass
class Config:
    """Main configuration object."""

    spotify: SpotifyConfig = field(default_factory=SpotifyConfig)
    enrichment: EnrichmentConfig = field(default_factory=EnrichmentConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    run: RunConfig = field(default_factory=RunConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "tempo-run"
    return Path.home() / ".config" / "tempo-run"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            if config_path.exists():
                return config_path
            # Found project root but no config.toml there
            return None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/tempo-run (or ~/.config/tempo-run)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "tempo-run"
    return Path.home() / ".local" / "share" / "tempo-run"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Tempo Run Configuration

[spotify]
# OAuth access token with user-read-playback-state and user-modify-playback-state
# scopes (or set SPOTIFY_ACCESS_TOKEN)
# access_token = "..."
api_base = "https://api.spotify.com/v1"
request_timeout = 10.0

[enrichment]
# Public tempo lookup site, queried as {lookup_base_url}/@{artist}/{title}
lookup_base_url = "https://songbpm.com"

# Attempts per lookup path before a track is marked unavailable
max_attempts = 3
request_timeout = 10.0

# Concurrent lookups when a playlist is loaded
max_workers = 8

[ai]
# OpenAI-compatible chat endpoint used when the lookup site has no BPM
# (or set GROQ_API_KEY / OPENAI_API_KEY)
# api_key = "..."
base_url = "https://api.groq.com/openai/v1"
model = "llama3-8b-8192"
enabled = true

[run]
# Seconds between now-playing polls
poll_interval_seconds = 2.0

# Seconds between elapsed-time updates
tick_interval_seconds = 1.0

# Target pace bounds in min/km
default_target_pace = 5.0
min_target_pace = 3.0
max_target_pace = 8.0

[logging]
level = "INFO"
# log_file = "~/.local/share/tempo-run/tempo-run.log"
console_output = false
"""


def _parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, keeping defaults for missing keys."""
    config = Config()

    if "spotify" in toml_data:
        spotify_data = toml_data["spotify"]
        config.spotify = SpotifyConfig(
            access_token=spotify_data.get("access_token", config.spotify.access_token),
            api_base=spotify_data.get("api_base", config.spotify.api_base).rstrip("/"),
            request_timeout=float(
                spotify_data.get("request_timeout", config.spotify.request_timeout)
            ),
        )

    if "enrichment" in toml_data:
        enrichment_data = toml_data["enrichment"]
        config.enrichment = EnrichmentConfig(
            lookup_base_url=enrichment_data.get(
                "lookup_base_url", config.enrichment.lookup_base_url
            ).rstrip("/"),
            max_attempts=int(
                enrichment_data.get("max_attempts", config.enrichment.max_attempts)
            ),
            request_timeout=float(
                enrichment_data.get(
                    "request_timeout", config.enrichment.request_timeout
                )
            ),
            max_workers=int(
                enrichment_data.get("max_workers", config.enrichment.max_workers)
            ),
            user_agent=enrichment_data.get("user_agent", config.enrichment.user_agent),
        )
        try:
            config.enrichment.validate()
        except ValueError as e:
            print(f"Warning: Invalid enrichment configuration: {e}")
            print("Using default enrichment configuration.")
            config.enrichment = EnrichmentConfig()

    if "ai" in toml_data:
        ai_data = toml_data["ai"]
        config.ai = AIConfig(
            api_key=ai_data.get("api_key"),
            base_url=ai_data.get("base_url", config.ai.base_url),
            model=ai_data.get("model", config.ai.model),
            enabled=ai_data.get("enabled", config.ai.enabled),
            request_timeout=float(
                ai_data.get("request_timeout", config.ai.request_timeout)
            ),
        )

    if "run" in toml_data:
        run_data = toml_data["run"]
        config.run = RunConfig(
            poll_interval_seconds=float(
                run_data.get("poll_interval_seconds", config.run.poll_interval_seconds)
            ),
            tick_interval_seconds=float(
                run_data.get("tick_interval_seconds", config.run.tick_interval_seconds)
            ),
            default_target_pace=float(
                run_data.get("default_target_pace", config.run.default_target_pace)
            ),
            min_target_pace=float(
                run_data.get("min_target_pace", config.run.min_target_pace)
            ),
            max_target_pace=float(
                run_data.get("max_target_pace", config.run.max_target_pace)
            ),
        )
        try:
            config.run.validate()
        except ValueError as e:
            print(f"Warning: Invalid run configuration: {e}")
            print("Using default run configuration.")
            config.run = RunConfig()

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def _apply_env_overrides(config: Config) -> Config:
    """Override credentials with environment variables if present."""
    spotify_token = os.environ.get("SPOTIFY_ACCESS_TOKEN")
    if spotify_token:
        config.spotify.access_token = spotify_token

    ai_key = os.environ.get("GROQ_API_KEY") or os.environ.get("OPENAI_API_KEY")
    if ai_key:
        config.ai.api_key = ai_key

    return config


def load_config() -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - SPOTIFY_ACCESS_TOKEN
    - GROQ_API_KEY (or OPENAI_API_KEY)
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        print(f"Created default configuration at: {config_path}")
        return _apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"Error loading configuration from {config_path}: {e}")
        print("Using default configuration.")
        return _apply_env_overrides(Config())

    return _apply_env_overrides(_parse_config(toml_data))


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
