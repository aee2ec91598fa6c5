from sqlalchemy import func, or_, select

from app.craftops.db.models import User


class UserRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, user_id: str) -> User | None:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.db.execute(stmt).scalars().first()

    def list(self, *, search: str | None = None, role: str | None = None) -> list[User]:
        stmt = select(User)
        if role:
            stmt = stmt.where(func.lower(User.role) == role.strip().lower())
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        return self.db.execute(stmt.order_by(User.name.asc())).scalars().all()
