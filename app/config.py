from dotenv import load_dotenv
import os

load_dotenv()
API_BASE = os.getenv("API_BASE_URL", "http://localhost:8000")
REQUEST_TIMEOUT = float(os.getenv("API_TIMEOUT_SECONDS", "30"))
