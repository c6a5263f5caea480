from fastapi import Request

OVERRIDE_HEADER = "x-http-method-override"
OVERRIDE_PARAM = "_method"
ALLOWED_OVERRIDES = {"PUT", "DELETE"}

async def method_override_middleware(request: Request, call_next):
	"""Let HTML forms reach PUT/DELETE routes: POST /edit/1?_method=PUT."""
	if request.method == "POST":
		override = request.headers.get(OVERRIDE_HEADER) or request.query_params.get(OVERRIDE_PARAM)
		if override and override.upper() in ALLOWED_OVERRIDES:
			request.scope["method"] = override.upper()
	return await call_next(request)
