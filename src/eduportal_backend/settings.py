import os
import threading

class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE","development")
        self.DATABASE_URL = os.environ.get("DATABASE_URL",None)
        # Token settings
        self.JWT_SECRET = os.environ.get("JWT_SECRET","change-me")
        self.JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM","HS256")
        self.TENANT_TOKEN_TTL = int(os.environ.get("TENANT_TOKEN_TTL","3600"))
        self.PROVIDER_TOKEN_TTL = int(os.environ.get("PROVIDER_TOKEN_TTL","86400"))
        # One-time provider user registration, disabled when unset
        self.PROVIDER_SETUP_SECRET = os.environ.get("PROVIDER_SETUP_SECRET",None)
        self.CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS","*").split(",") if o.strip()]

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

settings = BackendSettings()
