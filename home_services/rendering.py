from html import escape
from pathlib import Path

from home_services.models import Registry, ServiceRecord

# we always use a path relative to the file as the calling process can come
# from multiple locations
templates_dir = Path(__file__).parent / "templates"

INDEX_HTML_TEMPLATE = (templates_dir / "index.template.html").read_text(
    encoding="utf-8"
)
ERROR_HTML_TEMPLATE = (templates_dir / "error.template.html").read_text(
    encoding="utf-8"
)


def render_service(service: ServiceRecord) -> str:
    url = escape(service.url)
    return (
        f'<article class="service-entry">'
        f'<a href="{url}"><h2>{escape(service.name)}</h2></a>'
        f"<span>{escape(service.description)}</span>"
        f"</article>"
    )


def render_index(registry: Registry) -> str:
    """
    Render the dashboard page.

    :param Registry registry: The services to list, in order.
    :return str: The full HTML page.
    """
    items = "".join(f"<li>{render_service(s)}</li>" for s in registry.services)
    return INDEX_HTML_TEMPLATE.replace("{{services-list}}", items)


def render_error(context: str, cause: object) -> str:
    """
    Render the error page.

    :param str context: What the service was doing when it failed.
    :param object cause: The underlying error; its text is shown.
    :return str: The full HTML page.
    """
    return ERROR_HTML_TEMPLATE.replace("{{context}}", escape(context)).replace(
        "{{e}}", escape(str(cause))
    )
