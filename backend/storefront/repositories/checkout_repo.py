from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from storefront.models.checkout import CheckoutSession, PaymentStatus


class CheckoutRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, checkout_id: int) -> Optional[CheckoutSession]:
        return self.db.get(CheckoutSession, checkout_id)

    def create(
        self,
        user_id: int,
        checkout_items: List[Dict],
        shipping_address: Dict,
        payment_method: str,
        total_cents: int,
    ) -> CheckoutSession:
        c = CheckoutSession(
            user_id=user_id,
            checkout_items=checkout_items,
            shipping_address=shipping_address,
            payment_method=payment_method,
            total_cents=total_cents,
            payment_status=PaymentStatus.PENDING.value,
            is_paid=False,
            is_finalized=False,
        )
        self.db.add(c)
        self.db.flush()
        return c

    def claim_for_finalize(self, checkout_id: int, now: datetime) -> bool:
        """
        Flip is_finalized on a paid, unfinalized session in a single
        conditional UPDATE. Returns True only for the caller that flipped it.
        """
        res = self.db.execute(
            update(CheckoutSession)
            .where(
                CheckoutSession.id == checkout_id,
                CheckoutSession.is_paid.is_(True),
                CheckoutSession.is_finalized.is_(False),
            )
            .values(is_finalized=True, finalized_at=now)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1
