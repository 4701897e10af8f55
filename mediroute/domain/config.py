# Dispatch Configuration
import os

# Priority Thresholds (meters)
ACTIVATE_DISTANCE = float(os.environ.get("ACTIVATE_DISTANCE", "250.0"))
PREPARE_DISTANCE = float(os.environ.get("PREPARE_DISTANCE", "1000.0"))

# Geometry
EARTH_RADIUS_M = 6371000.0

# Kernel Loop
TICK_INTERVAL = float(os.environ.get("TICK_INTERVAL", "0.5"))   # Seconds between queue drains
POLL_INTERVAL = float(os.environ.get("POLL_INTERVAL", "5.0"))   # Polling fallback for missed pushes

# Persistence
STORE_BACKEND = os.environ.get("STORE_BACKEND", "memory")  # "memory" or "postgrest"
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_KEY = os.environ.get("SUPABASE_KEY", "")
STORE_TIMEOUT = float(os.environ.get("STORE_TIMEOUT", "10.0"))

# MediBot
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
MEDIBOT_TIMEOUT = float(os.environ.get("MEDIBOT_TIMEOUT", "20.0"))

# Logging
LOG_LEVEL = os.environ.get("MEDIROUTE_LOG_LEVEL", "INFO")

# Seed Signals (name, lat, lng) along the Sector 17 corridor
SEED_SIGNALS = [
    ("Sector 17 Chowk", 30.7460, 76.7500),
    ("Piccadily Chowk", 30.7270, 76.7500),
    ("Sector 22/23 Light Point", 30.7180, 76.7500),
    ("Aroma Light Point", 30.7090, 76.7500),
    ("Sector 34/35 Chowk", 30.6980, 76.7500),
    ("Sector 43 ISBT Chowk", 30.6860, 76.7500),
    ("Matka Chowk", 30.7410, 76.7870),
    ("Transport Chowk", 30.7170, 76.8010),
]
