from enum import Enum


class Environment(str, Enum):
    """Deployment environment of a collector run."""

    PRODUCTION = "production"
    STAGING = "staging"
    TESTING = "testing"
    DEVELOPMENT = "development"

    @classmethod
    def is_development(cls, env: str) -> bool:
        return env.lower() == cls.DEVELOPMENT.value
