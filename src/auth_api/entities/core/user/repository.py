from sqlmodel import Session, select

from src.auth_api.entities.core.user.entity import User
from src.auth_api.entities.core.user.table import UserTable


class UserRepository:
    """Data-access layer for users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_by_email(self, email: str) -> User | None:
        statement = select(UserTable).where(UserTable.email == email)
        return self._first(statement)

    def get_by_email_verification_token(self, token: str) -> User | None:
        statement = select(UserTable).where(
            UserTable.email_verification_token == token
        )
        return self._first(statement)

    def get_by_password_reset_token(self, token: str) -> User | None:
        statement = select(UserTable).where(UserTable.password_reset_token == token)
        return self._first(statement)

    def create(self, user: User) -> User:
        row = UserTable.model_validate(user.model_dump())
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def update(self, user: User) -> User:
        row = self._session.get(UserTable, user.id)
        if row is None:
            raise ValueError(f"User {user.id} does not exist")

        data = user.model_dump(exclude={"id", "created_at", "updated_at"})
        for field_name, value in data.items():
            setattr(row, field_name, value)
        row.touch()

        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def _first(self, statement) -> User | None:
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)
