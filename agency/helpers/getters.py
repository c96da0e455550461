from agency.core.config import settings


def isDebugMode() -> bool:
    """True when running outside the container network (local development)."""
    return settings.MODE.lower() == "dev"


