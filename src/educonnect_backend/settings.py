import os
import threading
from dotenv import load_dotenv

load_dotenv()

def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ["true", "1", "yes", "on"]

class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE","development")

        # Token settings
        self.TOKEN_SECRET = os.environ.get("TOKEN_SECRET", "change-me-in-production")
        self.TOKEN_ALGORITHM = os.environ.get("TOKEN_ALGORITHM", "HS256")
        self.TOKEN_EXPIRATION_MINUTES = int(os.environ.get("TOKEN_EXPIRATION_MINUTES", str(60 * 24 * 7)))

        # Bootstrap admin, created on startup when missing
        self.ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", None)
        self.ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", None)

        # Teachers only see students listing them in teacherIds when enabled
        self.RESTRICT_TEACHER_STUDENTS = _env_flag("RESTRICT_TEACHER_STUDENTS")

        self.CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

settings = BackendSettings()
