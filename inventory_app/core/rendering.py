from datetime import datetime
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

def _format_date(value) -> str:
	if isinstance(value, datetime):
		return value.strftime("%Y-%m-%d")
	return value or ""

templates.env.filters["isodate"] = _format_date

def render(request: Request, name: str, context: dict, status_code: int = 200):
	settings = request.app.state.settings
	context = {"app_name": settings.APP_NAME, "error": None, "user": None, **context}
	return templates.TemplateResponse(request, name, context, status_code=status_code)
