from sqlalchemy import false
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session
from typing import Optional


class PolicyViolation(Exception):
    pass


# Everything a repository call can raise when the store refuses a request
DATA_ACCESS_ERRORS = (SQLAlchemyError, PolicyViolation)


class DataClient:
    """
    A query handle bound to one credential.

    A user client only sees rows whose owner column matches its user id.
    Models declare that column as ``__owner__``; models flagged ``__public__``
    are readable by anyone but writable only by the service client. Models
    with neither are private to the service client.

    The service client applies no policy at all and must only be handed to
    webhook and callback handlers.
    """

    def __init__(self, db: Session, user_id: Optional[str] = None, service: bool = False):
        self.db = db
        self.user_id = user_id
        self.service = service

    @classmethod
    def for_user(cls, db: Session, user_id: Optional[str]) -> "DataClient":
        return cls(db, user_id=user_id)

    @classmethod
    def for_service(cls, db: Session) -> "DataClient":
        return cls(db, service=True)

    def query(self, model) -> Query:
        query = self.db.query(model)
        if self.service:
            return query
        owner = getattr(model, "__owner__", None)
        if owner is None:
            if getattr(model, "__public__", False):
                return query
            return query.filter(false())
        if self.user_id is None:
            return query.filter(false())
        return query.filter(getattr(model, owner) == self.user_id)

    def check_write(self, obj) -> None:
        if self.service:
            return
        model = type(obj)
        owner = getattr(model, "__owner__", None)
        if owner is None or self.user_id is None or getattr(obj, owner) != self.user_id:
            self.db.rollback()
            raise PolicyViolation(
                f"Write to {model.__tablename__} not permitted for this credential"
            )

    def commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
