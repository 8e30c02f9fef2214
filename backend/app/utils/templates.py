# backend/app/utils/templates.py
from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from pathlib import Path

from backend.app.utils.formato import money

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

# .html con autoescape; .txt en crudo
env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"], default_for_string=False),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)
env.filters["money"] = money

def render(template_name: str, **ctx) -> str:
    tpl = env.get_template(template_name)
    return tpl.render(**ctx)
