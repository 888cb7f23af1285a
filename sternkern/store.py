# sternkern/store.py
import logging

from sqlalchemy.exc import SQLAlchemyError

from . import db
from .errors import StoreError

logger = logging.getLogger(__name__)


class Store:
    """Thin write/read collaborator over the database session.

    Every write method is one statement followed by its own commit. Nothing
    here groups writes across tables: callers that need several writes issue
    them in sequence and handle a failure part way through themselves.
    """

    @property
    def session(self):
        return db.session

    def query(self, model):
        return model.query

    def get(self, model, ident):
        return self.session.get(model, ident)

    def insert(self, obj):
        self._commit(lambda: self.session.add(obj), f"insert {type(obj).__name__}")
        return obj

    def insert_many(self, objs):
        objs = list(objs)
        if not objs:
            return objs
        self._commit(lambda: self.session.add_all(objs),
                     f"insert {len(objs)} x {type(objs[0]).__name__}")
        return objs

    def update(self, model, values, **filters):
        def run():
            return model.query.filter_by(**filters).update(values, synchronize_session='fetch')
        count = self._commit(run, f"update {model.__tablename__} {filters} -> {values}")
        return count

    def delete(self, model, **filters):
        def run():
            return model.query.filter_by(**filters).delete(synchronize_session='fetch')
        return self._commit(run, f"delete {model.__tablename__} {filters}")

    def _commit(self, action, description):
        try:
            result = action()
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Store write failed (%s): %s", description, exc)
            raise StoreError(f'Store write failed: {description}') from exc
        logger.debug("Store write ok: %s", description)
        return result


def get_store(store=None):
    return store if store is not None else Store()
