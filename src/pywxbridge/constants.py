from __future__ import annotations

# Desktop-browser identity sent on every remote media request.
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/87.0.4280.88 Safari/537.36 Edg/87.0.664.66"
)

MEDIA_DOWNLOAD_TIMEOUT_S = 30.0
MEDIA_POLL_INTERVAL_S = 1.0

MAX_KEEPALIVE_CONNECTIONS = 256

# Extensions the desktop client may give a decoded image, in lookup order.
IMAGE_EXTENSIONS = (".png", ".gif", ".jpg")
VOICE_EXTENSION = ".amr"
VIDEO_EXTENSION = ".mp4"

WECHAT_FILES_DIRNAME = "WeChat Files"

VOIP_CALL_STARTED = "VoIP: Started a call"
VOIP_CALL_ENDED = "VoIP: Call ended"
