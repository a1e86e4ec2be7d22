from typing import Optional

from sqlalchemy.orm import Session

from storefront.models.subscriber import Subscriber


class SubscriberRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[Subscriber]:
        return self.db.query(Subscriber).filter(Subscriber.email == email).first()

    def create(self, email: str) -> Subscriber:
        s = Subscriber(email=email)
        self.db.add(s)
        self.db.flush()
        return s
