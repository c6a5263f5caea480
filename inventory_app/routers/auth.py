import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError as FormValidationError
from sqlalchemy.orm import Session
from starlette import status

from inventory_app.core.errors import AuthenticationFailure, DuplicateUsername, StorageUnavailable
from inventory_app.core.logging import log_event, request_id
from inventory_app.core.rendering import render
from inventory_app.core.security import optional_identity
from inventory_app.db.session import get_db
from inventory_app.schemas.auth import CredentialsForm, credentials_error_message
from inventory_app.services.credentials import CredentialStore
from inventory_app.services.sessions import SessionIdentity

router = APIRouter(tags=["auth"])

def _see_other(url: str) -> RedirectResponse:
	return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)

def _form_page(request: Request, template: str, title: str, error=None, username: str = ""):
	return render(request, template, {"title": title, "error": error, "username": username or ""})

def _start_session(request: Request, response, user) -> None:
	sessions = request.app.state.sessions
	previous = request.cookies.get(sessions.cookie_name)
	if previous:
		sessions.destroy(previous)
	cookie = sessions.create(SessionIdentity(user_id=user.id, username=user.username))
	sessions.attach_cookie(response, cookie)

# --------- REGISTER ---------
@router.get("/register")
def register_form(request: Request, user=Depends(optional_identity)):
	if user:
		return _see_other("/")
	return _form_page(request, "register.html", "Register")

@router.post("/register")
def register(
	request: Request,
	username: str | None = Form(None),
	password: str | None = Form(None),
	db: Session = Depends(get_db),
):
	try:
		form = CredentialsForm(username=username, password=password)
	except FormValidationError as exc:
		return _form_page(request, "register.html", "Register", credentials_error_message(exc), username)

	try:
		user = CredentialStore(db).create(form.username, form.password)
	except DuplicateUsername as exc:
		log_event("register_duplicate", username=form.username, request_id=request_id(request))
		return _form_page(request, "register.html", "Register", exc.message, form.username)
	except StorageUnavailable as exc:
		log_event("storage_unavailable", level=logging.ERROR, path="/register", error=str(exc), request_id=request_id(request))
		return _form_page(request, "register.html", "Register", "Something went wrong during registration.", form.username)

	log_event("user_registered", username=user.username, user_id=user.id, request_id=request_id(request))

	if not request.app.state.settings.AUTO_LOGIN_ON_REGISTER:
		return _see_other("/login")

	response = _see_other("/")
	try:
		_start_session(request, response, user)
	except StorageUnavailable as exc:
		# Account exists; the user can still log in once storage recovers.
		log_event("storage_unavailable", level=logging.ERROR, path="/register", error=str(exc), request_id=request_id(request))
		return _see_other("/login")
	return response

# --------- LOGIN ---------
@router.get("/login")
def login_form(request: Request, user=Depends(optional_identity)):
	if user:
		return _see_other("/")
	return _form_page(request, "login.html", "Login")

@router.post("/login")
def login(
	request: Request,
	username: str | None = Form(None),
	password: str | None = Form(None),
	db: Session = Depends(get_db),
):
	try:
		form = CredentialsForm(username=username, password=password)
	except FormValidationError:
		return _form_page(request, "login.html", "Login", AuthenticationFailure.message, username)

	try:
		user = CredentialStore(db).authenticate(form.username, form.password)
		if user is None:
			log_event("login_failed", username=form.username, request_id=request_id(request))
			return _form_page(request, "login.html", "Login", AuthenticationFailure.message, form.username)

		response = _see_other("/")
		_start_session(request, response, user)
	except StorageUnavailable as exc:
		log_event("storage_unavailable", level=logging.ERROR, path="/login", error=str(exc), request_id=request_id(request))
		return _form_page(request, "login.html", "Login", "Something went wrong during login.", form.username)

	log_event("user_login", username=user.username, user_id=user.id, request_id=request_id(request))
	return response

# --------- LOGOUT ---------
@router.get("/logout")
def logout(request: Request):
	sessions = request.app.state.sessions
	identity = optional_identity(request)
	sessions.destroy(request.cookies.get(sessions.cookie_name))
	response = _see_other("/")
	sessions.clear_cookie(response)
	if identity:
		log_event("user_logout", username=identity.username, request_id=request_id(request))
	return response
