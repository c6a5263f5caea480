from fastapi import APIRouter, Depends, Request

from inventory_app.core.rendering import render
from inventory_app.core.security import optional_identity

router = APIRouter(tags=["pages"])

@router.get("/")
def home(request: Request, user=Depends(optional_identity)):
	return render(request, "index.html", {"title": "Home", "user": user})

@router.get("/health")
def health():
	return {"status": "OK"}
