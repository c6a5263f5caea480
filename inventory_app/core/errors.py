import logging
from contextlib import contextmanager

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from inventory_app.core.config import ConfigurationError
from inventory_app.core.logging import log_event, request_id

__all__ = [
	"InventoryError",
	"ValidationError",
	"DuplicateUsername",
	"AuthenticationFailure",
	"Unauthenticated",
	"NotFoundOrForbidden",
	"StorageUnavailable",
	"ConfigurationError",
	"fallback_to",
	"register_exception_handlers",
]


class InventoryError(Exception):
	"""Base class for errors raised by the inventory application."""


class ValidationError(InventoryError):
	"""A form field was missing or invalid. Rendered back on the same form."""

	def __init__(self, message: str, field: str | None = None):
		super().__init__(message)
		self.message = message
		self.field = field


class DuplicateUsername(InventoryError):
	message = "Username already exists."


class AuthenticationFailure(InventoryError):
	# One message for unknown user and wrong password alike.
	message = "Invalid username or password."


class Unauthenticated(InventoryError):
	def __init__(self, clear_cookie: bool = False):
		super().__init__("authentication required")
		self.clear_cookie = clear_cookie


class NotFoundOrForbidden(InventoryError):
	pass


class StorageUnavailable(InventoryError):
	def __init__(self, message: str = "storage unavailable", redirect_to: str | None = None):
		super().__init__(message)
		self.redirect_to = redirect_to


@contextmanager
def fallback_to(path: str):
	"""Attach the page to return to if storage fails inside the block."""
	try:
		yield
	except StorageUnavailable as exc:
		if exc.redirect_to is None:
			exc.redirect_to = path
		raise


def _see_other(url: str) -> RedirectResponse:
	return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


async def unauthenticated_handler(request: Request, exc: Unauthenticated):
	response = _see_other("/login")
	if exc.clear_cookie:
		request.app.state.sessions.clear_cookie(response)
	return response


async def not_found_or_forbidden_handler(request: Request, exc: NotFoundOrForbidden):
	return _see_other("/inventory")


async def storage_unavailable_handler(request: Request, exc: StorageUnavailable):
	target = exc.redirect_to or "/"
	log_event(
		"storage_unavailable",
		level=logging.ERROR,
		path=request.url.path,
		redirect_to=target,
		error=str(exc.__cause__ or exc),
		request_id=request_id(request),
	)
	return _see_other(target)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
	if exc.status_code == status.HTTP_404_NOT_FOUND:
		from inventory_app.core.rendering import render
		from inventory_app.core.security import optional_identity

		return render(
			request,
			"404.html",
			{"title": "Not Found", "user": optional_identity(request)},
			status_code=status.HTTP_404_NOT_FOUND,
		)
	from fastapi.exception_handlers import http_exception_handler as default_handler

	return await default_handler(request, exc)


def register_exception_handlers(app) -> None:
	app.add_exception_handler(Unauthenticated, unauthenticated_handler)
	app.add_exception_handler(NotFoundOrForbidden, not_found_or_forbidden_handler)
	app.add_exception_handler(StorageUnavailable, storage_unavailable_handler)
	app.add_exception_handler(StarletteHTTPException, http_exception_handler)
