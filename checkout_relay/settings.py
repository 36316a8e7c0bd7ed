import os
from dataclasses import dataclass


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class Settings:
    stripe_secret_key: str
    stripe_publishable_key: str
    stripe_webhook_secret: str
    sink_webhook_url: str
    host_domain: str
    host_port: int = 4242
    contact: str = ""
    webhook_tolerance_seconds: int = 300
    processor_timeout_seconds: float = 10.0
    sink_timeout_seconds: float = 5.0


def _required(env, name: str) -> str:
    value = env.get(name, "").strip()
    if not value:
        raise ConfigError(f"Missing required setting {name}")
    return value


def _number(env, name: str, default, cast):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from None


def load_settings(env=None) -> Settings:
    """Read settings from the environment once at startup."""
    env = os.environ if env is None else env
    return Settings(
        stripe_secret_key=_required(env, "STRIPE_SECRET_KEY"),
        stripe_publishable_key=_required(env, "STRIPE_PUBLISHABLE_KEY"),
        stripe_webhook_secret=_required(env, "STRIPE_WEBHOOK_SECRET"),
        sink_webhook_url=_required(env, "SINK_WEBHOOK_URL"),
        host_domain=_required(env, "HOST_DOMAIN").rstrip("/"),
        host_port=_number(env, "HOST_PORT", 4242, int),
        contact=env.get("CONTACT", ""),
        webhook_tolerance_seconds=_number(env, "WEBHOOK_TOLERANCE_SECONDS", 300, int),
        processor_timeout_seconds=_number(env, "PROCESSOR_TIMEOUT_SECONDS", 10.0, float),
        sink_timeout_seconds=_number(env, "SINK_TIMEOUT_SECONDS", 5.0, float),
    )
