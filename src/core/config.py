"""
c0rd - Configuration Module
===========================

Centralized configuration loaded from environment variables.

DESIGN:
    One source of truth for every setting, read once at startup. Required
    values fail fast with every missing name listed; tunables are clamped
    to sane ranges with a warning instead of aborting startup.

    Key patterns:
    - Singleton accessor via get_config()
    - Validation happens once at load time, not on every access
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Set


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Bot configuration loaded from environment variables.

    Attributes:
        discord_token: Discord bot authentication token.
        logging_guild_id: Server that receives the audit trail channels.
        target_guild_id: Server whose activity is mirrored.
        moderator_role_id: Role pinged for moderation-grade events.
        log_category_name: Exact name of the logging category.
        database_path: SQLite file holding the persisted topology.
    """

    # -------------------------------------------------------------------------
    # Required
    # -------------------------------------------------------------------------

    discord_token: str
    logging_guild_id: int
    target_guild_id: int

    # -------------------------------------------------------------------------
    # Optional: Discord
    # -------------------------------------------------------------------------

    moderator_role_id: Optional[int] = None
    log_category_name: str = "c0rd"
    ignored_bot_ids: Set[int] = field(default_factory=set)

    # -------------------------------------------------------------------------
    # Optional: Storage
    # -------------------------------------------------------------------------

    database_path: Path = Path("data") / "c0rd.db"

    # -------------------------------------------------------------------------
    # Optional: Attribution Timing
    # -------------------------------------------------------------------------

    audit_log_delay_ms: int = 500           # Wait before audit lookups (mute, kick, thread)
    move_audit_delay_ms: int = 800          # Wait before member move lookups
    message_delete_delay_ms: int = 1000     # Wait before message delete lookups
    audit_match_window_seconds: int = 5     # Max age of an audit entry to count as a match
    audit_page_size: int = 5                # Entries fetched per audit lookup

    # -------------------------------------------------------------------------
    # Optional: Correlation Caches
    # -------------------------------------------------------------------------

    move_cache_ttl_seconds: int = 10        # Sweep age for bulk move entries
    reaction_dedup_seconds: int = 5         # Window for suppressing redelivered reactions
    move_count_grace: int = 0               # Extra claims allowed past a bulk move count

    # -------------------------------------------------------------------------
    # Optional: Webhooks
    # -------------------------------------------------------------------------

    error_webhook_url: Optional[str] = None


# =============================================================================
# Embed Colors
# =============================================================================

class EmbedColors:
    """Color palette for log embeds."""

    GREEN = 0x1F5E2E    # Joins, creations, positive changes
    GOLD = 0xE6B84A     # Edits, nickname and profile changes
    RED = 0xDC3545      # Deletes, leaves, bans, kicks
    BLUE = 0x3498DB     # Informational logs
    PURPLE = 0x9B59B6   # Streams, video
    ORANGE = 0xFF9800   # Moderator actions, account age warnings
    BLURPLE = 0x5865F2  # Threads
    GREY = 0x95A5A6     # Stopped streams, neutral

    SUCCESS = GREEN
    WARNING = ORANGE
    NEGATIVE = RED
    INFO = BLUE


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def _parse_int(value: Optional[str], name: str) -> int:
    """
    Parse string to integer with descriptive error handling.

    Raises:
        ConfigValidationError: If value is missing or not a valid integer.
    """
    if not value:
        raise ConfigValidationError(f"Missing required: {name}")
    try:
        return int(value)
    except ValueError:
        raise ConfigValidationError(f"Invalid integer for {name}: {value}")


def _parse_int_optional(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_int_set(value: Optional[str]) -> Set[int]:
    """Parse comma-separated string to set of integers, skipping bad parts."""
    if not value:
        return set()
    result = set()
    for part in value.split(","):
        part = part.strip()
        if part:
            try:
                result.add(int(part))
            except ValueError:
                pass
    return result


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range clamping.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    from src.core.logger import logger
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from src.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If any required variable is missing or invalid.
    """
    missing = []

    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        missing.append("DISCORD_TOKEN")

    logging_guild_id_str = os.getenv("LOGGING_GUILD_ID")
    if not logging_guild_id_str:
        missing.append("LOGGING_GUILD_ID")

    target_guild_id_str = os.getenv("TARGET_GUILD_ID")
    if not target_guild_id_str:
        missing.append("TARGET_GUILD_ID")

    if missing:
        raise ConfigValidationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    data_dir = Path(os.getenv("DATA_DIR", "data"))

    return Config(
        discord_token=discord_token,
        logging_guild_id=_parse_int(logging_guild_id_str, "LOGGING_GUILD_ID"),
        target_guild_id=_parse_int(target_guild_id_str, "TARGET_GUILD_ID"),
        moderator_role_id=_parse_int_optional(os.getenv("MODERATOR_ROLE_ID")),
        log_category_name=os.getenv("LOG_CATEGORY_NAME", "").strip() or "c0rd",
        ignored_bot_ids=_parse_int_set(os.getenv("IGNORED_BOT_IDS")),
        database_path=Path(os.getenv("DATABASE_PATH", str(data_dir / "c0rd.db"))),
        audit_log_delay_ms=_parse_int_with_default(
            os.getenv("AUDIT_LOG_DELAY_MS"), 500, "AUDIT_LOG_DELAY_MS", min_val=0, max_val=5000
        ),
        move_audit_delay_ms=_parse_int_with_default(
            os.getenv("MOVE_AUDIT_DELAY_MS"), 800, "MOVE_AUDIT_DELAY_MS", min_val=0, max_val=5000
        ),
        message_delete_delay_ms=_parse_int_with_default(
            os.getenv("MESSAGE_DELETE_DELAY_MS"), 1000, "MESSAGE_DELETE_DELAY_MS", min_val=0, max_val=5000
        ),
        audit_match_window_seconds=_parse_int_with_default(
            os.getenv("AUDIT_MATCH_WINDOW_SECONDS"), 5, "AUDIT_MATCH_WINDOW_SECONDS", min_val=1, max_val=60
        ),
        audit_page_size=_parse_int_with_default(
            os.getenv("AUDIT_PAGE_SIZE"), 5, "AUDIT_PAGE_SIZE", min_val=1, max_val=100
        ),
        move_cache_ttl_seconds=_parse_int_with_default(
            os.getenv("MOVE_CACHE_TTL_SECONDS"), 10, "MOVE_CACHE_TTL_SECONDS", min_val=1, max_val=300
        ),
        reaction_dedup_seconds=_parse_int_with_default(
            os.getenv("REACTION_DEDUP_SECONDS"), 5, "REACTION_DEDUP_SECONDS", min_val=1, max_val=300
        ),
        move_count_grace=_parse_int_with_default(
            os.getenv("MOVE_COUNT_GRACE"), 0, "MOVE_COUNT_GRACE", min_val=0, max_val=50
        ),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def validate_and_log_config() -> None:
    """
    Validate configuration and log a summary at startup.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from src.core.logger import logger

    config = get_config()

    logger.tree("Configuration Validated", [
        ("Logging Guild", str(config.logging_guild_id)),
        ("Target Guild", str(config.target_guild_id)),
        ("Category", config.log_category_name),
        ("Moderator Role", str(config.moderator_role_id) if config.moderator_role_id else "None"),
        ("Database", str(config.database_path)),
        ("Match Window", f"{config.audit_match_window_seconds}s"),
    ], emoji="⚙️")


__all__ = [
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "load_config",
    "get_config",
    "validate_and_log_config",
]
