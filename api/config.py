from dotenv import load_dotenv
import os

load_dotenv()
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "3600"))
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "25"))
PREVIEW_ROWS = int(os.getenv("PREVIEW_ROWS", "10"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
