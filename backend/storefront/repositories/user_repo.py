from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from storefront.models.user import Role, User


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def list_all(self) -> List[User]:
        return self.db.query(User).order_by(User.id).all()

    def create(self, name: str, email: str, role: Role = Role.CUSTOMER) -> User:
        u = User(name=name, email=email.lower(), role=role)
        self.db.add(u)
        self.db.flush()
        return u

    def update(self, user: User, changes: Dict[str, Any]) -> User:
        for field, value in changes.items():
            if field == "email":
                value = value.lower()
            setattr(user, field, value)
        self.db.flush()
        return user

    def delete(self, user: User):
        self.db.delete(user)
        self.db.flush()
