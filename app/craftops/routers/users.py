from fastapi import APIRouter, Depends, Query

from app.craftops.core.error_catalog import AppError, ErrorCatalog
from app.craftops.db.models import User
from app.craftops.db.session import get_db
from app.craftops.repos.users import UserRepository
from app.craftops.schemas.users import UserCreateRequest, UserResponse

router = APIRouter()


@router.get("/api/users", response_model=list[UserResponse])
def list_users(
    search: str | None = Query(default=None),
    role: str | None = Query(default=None),
    db=Depends(get_db),
):
    return [UserResponse.model_validate(user) for user in UserRepository(db).list(search=search, role=role)]


@router.post("/api/users", response_model=UserResponse, status_code=201)
def create_user(payload: UserCreateRequest, db=Depends(get_db)):
    repo = UserRepository(db)
    if repo.get_by_email(payload.email) is not None:
        raise AppError(
            ErrorCatalog.DUPLICATE_VALUE,
            message="User with this email already exists",
            details={"email": payload.email},
        )
    user = User(name=payload.name.strip(), email=payload.email.strip().lower(), role=payload.role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return UserResponse.model_validate(user)
