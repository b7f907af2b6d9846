import os


class Settings:
    def __init__(self):
        self.app_name = "LeadConsole"
        self.api_version = "1.0.0"
        self.environment = os.getenv("LEADCONSOLE_ENVIRONMENT", "development")
        self.base_url = os.getenv("LEADCONSOLE_BASE_URL", "http://localhost:8002")
        self.api_prefix = "/api/v1"
        self.api_token = os.getenv("LEADCONSOLE_API_TOKEN") or None
        self.auth_header = "Authorization"
        self.auth_scheme = "Bearer"
        self.request_timeout = float(os.getenv("LEADCONSOLE_REQUEST_TIMEOUT", "30"))
        self.timeline_page_size = int(os.getenv("LEADCONSOLE_TIMELINE_PAGE_SIZE", "50"))
        self.success_highlight_seconds = 1.0
        self.failure_highlight_seconds = 3.0
        self.database_url = os.getenv("LEADCONSOLE_DATABASE_URL", "sqlite://")
        self.log_level = os.getenv("LEADCONSOLE_LOG_LEVEL", "INFO")


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
