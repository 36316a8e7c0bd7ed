import html
from pathlib import Path
from string import Template

from .settings import Settings

STATIC_DIR = Path(__file__).parent / "static"


def render_page(name: str, **values: str) -> str:
    template = Template((STATIC_DIR / f"{name}.html").read_text(encoding="utf-8"))
    return template.substitute({key: html.escape(value) for key, value in values.items()})


def render_pages(settings: Settings) -> dict:
    """Render the three static pages once; a missing placeholder fails startup."""
    return {
        "/": render_page(
            "checkout",
            stripe_key=settings.stripe_publishable_key,
            contact=settings.contact,
        ),
        "/cancel": render_page("cancel", checkout_page=settings.host_domain),
        "/success": render_page("success", checkout_page=settings.host_domain),
    }
