from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from inventory_app.core.config import Settings, settings as default_settings
from inventory_app.core.errors import register_exception_handlers
from inventory_app.core.logging import log_event, request_id_middleware
from inventory_app.core.method_override import method_override_middleware
from inventory_app.db.base import Base
from inventory_app.db.session import check_database, engine
from inventory_app.routers.auth import router as auth_router
from inventory_app.routers.inventory import router as inventory_router
from inventory_app.routers.pages import router as pages_router
from inventory_app.services.sessions import build_session_manager


def create_app(settings: Settings | None = None) -> FastAPI:
	settings = settings or default_settings
	app = FastAPI(title=settings.APP_NAME)

	base_dir = Path(__file__).resolve().parent
	static_dir = base_dir / "static"

	# DB init; an unreachable database stops startup here.
	check_database()
	Base.metadata.create_all(bind=engine)

	# Sessions
	app.state.settings = settings
	app.state.sessions = build_session_manager(settings)
	purged = app.state.sessions.store.purge_expired()

	# Middleware
	app.middleware("http")(request_id_middleware)
	app.middleware("http")(method_override_middleware)

	register_exception_handlers(app)

	# Routers
	app.include_router(pages_router)
	app.include_router(auth_router)
	app.include_router(inventory_router)

	app.mount("/static", StaticFiles(directory=static_dir), name="static")

	log_event(
		"app_started",
		env=settings.APP_ENV,
		database=engine.url.render_as_string(hide_password=True),
		session_backend=settings.session_backend,
		expired_sessions_purged=purged,
	)
	return app

app = create_app()


def run() -> None:
	import uvicorn

	uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
	run()
