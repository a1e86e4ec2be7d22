from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.db import get_db
from storefront.errors import ValidationFailedError
from storefront.repositories.subscriber_repo import SubscriberRepository
from storefront.schemas.user_schema import SubscribeIn

router = APIRouter(prefix="/api/subscribe", tags=["newsletter"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Subscribe to the newsletter")
def subscribe(payload: SubscribeIn, db: Session = Depends(get_db)):
    if not payload.email:
        raise ValidationFailedError("Email is required")
    email = payload.email.strip().lower()
    repo = SubscriberRepository(db)
    if repo.get_by_email(email):
        raise ValidationFailedError("Subscriber already exists")
    repo.create(email)
    db.commit()
    return {"success": True, "message": "Successfully subscribed to the newsletter!"}
