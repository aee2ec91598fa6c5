from sqlalchemy import or_, select

from app.craftops.db.models import Vendor


class VendorRepository:
    def __init__(self, db):
        self.db = db

    def get(self, vendor_id: int) -> Vendor | None:
        return self.db.get(Vendor, vendor_id)

    def find_by(self, **criteria) -> Vendor | None:
        stmt = select(Vendor).filter_by(**criteria)
        return self.db.execute(stmt).scalars().first()

    def list(self, *, search: str | None = None) -> list[Vendor]:
        stmt = select(Vendor)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    Vendor.name.ilike(pattern),
                    Vendor.company_name.ilike(pattern),
                    Vendor.email.ilike(pattern),
                    Vendor.phone.ilike(pattern),
                    Vendor.gstin.ilike(pattern),
                )
            )
        return self.db.execute(stmt.order_by(Vendor.name.asc())).scalars().all()
