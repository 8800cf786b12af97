"""
Default configuration values for vidfeed.

Note: Runtime settings (database path, parent domain, timer tuning) are
resolved via config/loader.py which supports environment variables,
project config, and user config. The values here are the fallbacks.
"""

# Progress tracking (seconds)
PROGRESS_DEBOUNCE_SECONDS = 2.0
PROGRESS_MIN_DELTA_SECONDS = 5.0

# Auto-advance fallback for embeds that cannot report "ended" (seconds)
FALLBACK_BUFFER_SECONDS = 5.0
PINTEREST_FALLBACK_BUFFER_SECONDS = 2.0

# Entries within this distance of the active index mount their player
BUFFER_WINDOW = 1

# Host sent as Twitch's parent= allow-list and YouTube's origin
DEFAULT_PARENT_DOMAIN = "localhost"

# Embed endpoints
YOUTUBE_EMBED_BASE = "https://www.youtube.com/embed/"
TIKTOK_PLAYER_BASE = "https://www.tiktok.com/player/v1/"
VIMEO_PLAYER_BASE = "https://player.vimeo.com/video/"
FACEBOOK_PLUGIN_URL = "https://www.facebook.com/plugins/video.php"
PINTEREST_EMBED_URL = "https://assets.pinterest.com/ext/embed.html"
TWITCH_PLAYER_URL = "https://player.twitch.tv/"
TWITCH_CLIPS_EMBED_URL = "https://clips.twitch.tv/embed"
INSTAGRAM_EMBED_SCRIPT_URL = "https://www.instagram.com/embed.js"
INSTAGRAM_EMBED_VERSION = "14"

# iframe permission strings
IFRAME_ALLOW_DEFAULT = (
    "accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; picture-in-picture"
)
IFRAME_ALLOW_PLAYER = "autoplay; fullscreen; picture-in-picture; encrypted-media"
IFRAME_ALLOW_MINIMAL = "autoplay; encrypted-media"

# Cosmetic zoom applied to iframes whose embeds draw chrome at the edges
CROP_SCALE = 1.01

# Metadata fetching
REDIRECT_TIMEOUT = 8
METADATA_TIMEOUT = 15
DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 14_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/14.0 Mobile/15E148 Safari/604.1"
)
