from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from starlette import status

from inventory_app.core.errors import NotFoundOrForbidden, ValidationError, fallback_to
from inventory_app.core.logging import log_event, request_id
from inventory_app.core.rendering import render
from inventory_app.core.security import current_identity
from inventory_app.db.session import get_db
from inventory_app.schemas.items import ItemForm
from inventory_app.services.inventory import InventoryService

router = APIRouter(tags=["inventory"])

def _see_other(url: str) -> RedirectResponse:
	return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)

def _item_form(
	name: str | None = Form(None),
	category: str | None = Form(None),
	quantity: str | None = Form(None),
	dateAcquired: str | None = Form(None),
	date_acquired: str | None = Form(None),
) -> ItemForm:
	return ItemForm.from_form(
		name=name,
		category=category,
		quantity=quantity,
		date_acquired=date_acquired,
		dateAcquired=dateAcquired,
	)

@router.get("/inventory")
def list_items(request: Request, identity=Depends(current_identity), db: Session = Depends(get_db)):
	with fallback_to("/"):
		items = InventoryService(db).list(identity.user_id)
	return render(request, "inventory.html", {"title": "Inventory", "items": items, "user": identity})

@router.get("/add")
def add_form(request: Request, identity=Depends(current_identity)):
	return render(request, "add.html", {"title": "Add Item", "values": {}, "user": identity})

@router.post("/add")
def add_item(
	request: Request,
	form: ItemForm = Depends(_item_form),
	identity=Depends(current_identity),
	db: Session = Depends(get_db),
):
	try:
		with fallback_to("/add"):
			item = InventoryService(db).add(
				identity.user_id,
				name=form.name,
				category=form.category,
				quantity=form.quantity,
				date_acquired=form.date_acquired,
			)
	except ValidationError as exc:
		return render(
			request,
			"add.html",
			{"title": "Add Item", "values": form.form_values(), "error": exc.message, "user": identity},
		)

	log_event("item_created", item_id=item.id, owner=identity.username, request_id=request_id(request))
	return _see_other("/inventory")

@router.get("/edit/{item_id}")
def edit_form(request: Request, item_id: str, identity=Depends(current_identity), db: Session = Depends(get_db)):
	with fallback_to("/inventory"):
		item = InventoryService(db).get(identity.user_id, item_id)
	if item is None:
		raise NotFoundOrForbidden()
	values = {
		"name": item.name,
		"category": item.category,
		"quantity": item.quantity,
		"date_acquired": item.date_acquired,
	}
	return render(request, "edit.html", {"title": "Edit Item", "item_id": item.id, "values": values, "user": identity})

@router.put("/edit/{item_id}")
def update_item(
	request: Request,
	item_id: str,
	form: ItemForm = Depends(_item_form),
	identity=Depends(current_identity),
	db: Session = Depends(get_db),
):
	try:
		with fallback_to("/inventory"):
			item = InventoryService(db).update(identity.user_id, item_id, form.to_fields())
	except ValidationError as exc:
		return render(
			request,
			"edit.html",
			{
				"title": "Edit Item",
				"item_id": item_id,
				"values": form.form_values(),
				"error": exc.message,
				"user": identity,
			},
		)
	if item is None:
		raise NotFoundOrForbidden()

	log_event("item_updated", item_id=item.id, owner=identity.username, request_id=request_id(request))
	return _see_other("/inventory")

@router.delete("/delete/{item_id}")
def delete_item(request: Request, item_id: str, identity=Depends(current_identity), db: Session = Depends(get_db)):
	with fallback_to("/inventory"):
		removed = InventoryService(db).delete(identity.user_id, item_id)
	log_event("item_deleted", item_id=item_id, removed=removed, actor=identity.username, request_id=request_id(request))
	return _see_other("/inventory")

@router.get("/stats")
def stats(request: Request, identity=Depends(current_identity), db: Session = Depends(get_db)):
	with fallback_to("/inventory"):
		summary = InventoryService(db).stats(identity.user_id)
	return render(
		request,
		"stats.html",
		{
			"title": "Statistics",
			"totalItems": summary.total_items,
			"totalQuantity": summary.total_quantity,
			"categoryCount": summary.category_count,
			"user": identity,
		},
	)
