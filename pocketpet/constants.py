import os

# --- GLOBAL CONFIGURATION ---
SCREEN_WIDTH = 480
SCREEN_HEIGHT = 320
FPS = int(os.getenv("POCKETPET_FPS", "30"))
# Time scaling for development/testing. 1 = real time, 10 = 10x faster!
TIME_SCALE = float(os.getenv("POCKETPET_TIME_SCALE", "1.0"))
LOG_LEVEL = os.getenv("POCKETPET_LOG_LEVEL", "INFO")

# --- PET LIMITS ---
MAX_HEALTH = 100
MAX_SCORE = 10
HEALTH_DECREASE_RATE = 2  # per health tick while a need is critical
HEALTH_RECOVERY_RATE = 5  # per health tick while fine or sleeping

# --- TIMER INTERVALS (seconds) ---
HEALTH_TICK_SECONDS = 1.0
HUNGRY_TICK_SECONDS = 5.0
DIRTY_TICK_SECONDS = 15.0
TIRED_TICK_SECONDS = 15.0
BORED_TICK_SECONDS = 10.0
WAKE_CHECK_SECONDS = 1.0
SCHEDULER_RESOLUTION = 0.1  # polling period of the ticker thread

# --- ACTION PACING (seconds) ---
ACTION_COOLDOWN_SECONDS = 30.0
HAPPY_DURATION_SECONDS = 2.0
SLEEP_DURATION_SECONDS = 60.0

# --- RETRO UI PALETTE ---
COLOR_BG = (40, 44, 52)
COLOR_PET_BODY = (171, 220, 255)
COLOR_PET_EYES = (33, 37, 43)
COLOR_UI_BAR_BG = (62, 68, 81)
COLOR_HEALTH = (152, 195, 121)
COLOR_TEXT = (171, 178, 191)
COLOR_BTN = (100, 100, 100)
COLOR_BTN_DISABLED = (70, 70, 70)
COLOR_SICK = (198, 120, 221)
COLOR_MESSAGE_BOX_BG = (50, 50, 50)

# Per-need bar colors
NEED_COLORS = {
    "HUNGRY": (224, 108, 117),
    "DIRTY": (150, 110, 60),
    "TIRED": (97, 175, 239),
    "BORED": (229, 192, 123),
}
