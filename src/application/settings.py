import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Amap road snapping (Web-service key, not a JS API key)
    AMAP_WEB_KEY = os.getenv("AMAP_WEB_KEY", "")
    AMAP_REGEO_URL = os.getenv(
        "AMAP_REGEO_URL", "https://restapi.amap.com/v3/geocode/regeo"
    )
    SNAP_RADIUS_M = int(os.getenv("SNAP_RADIUS_M", "1000"))
    SNAP_TIMEOUT_S = float(os.getenv("SNAP_TIMEOUT_S", "3.0"))

    # Visited filter
    VISITED_TIMEOUT_S = float(os.getenv("VISITED_TIMEOUT_S", "1.0"))
    VISITED_PROXIMITY_M = float(os.getenv("VISITED_PROXIMITY_M", "500"))

    # Sampling
    WAYPOINT_MAX_ATTEMPTS = int(os.getenv("WAYPOINT_MAX_ATTEMPTS", "20"))
    MAX_RADIUS_KM = float(os.getenv("MAX_RADIUS_KM", "200"))
    MAX_TRACK_POINTS = int(os.getenv("MAX_TRACK_POINTS", "50000"))

    # Application
    APP_HOST = os.getenv("APP_HOST", "127.0.0.1")
    APP_PORT = int(os.getenv("APP_PORT", "8080"))


settings = Settings()
