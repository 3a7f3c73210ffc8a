from __future__ import annotations

from pathlib import Path

from fastapi.templating import Jinja2Templates

from workflow_center.config import settings

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals["app_name"] = settings.app_name
