"""Persistence adapter for users, stocks and notes.

The store is built by the application factory and reached through
``get_store()``. Flask-SQLAlchemy hands every request its own session and
removes it at teardown, so the store itself holds no per request state.
Every stock and note method takes the caller's username and never reads or
writes rows belonging to anyone else.
"""
import uuid
from typing import List, Optional

from flask import Flask, current_app
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from flask_sqlalchemy import SQLAlchemy

from stockfolio.Models.NoteModel import Note
from stockfolio.Models.StockModel import Stock
from stockfolio.Models.UserModel import User
from stockfolio.Schemas.note import NoteCreate, NoteUpdate, dump_content
from stockfolio.Schemas.stock import StockCreate
from stockfolio.Utils.Errors import ConflictError
from stockfolio.Utils.Timestamps import normalize_timestamp, parse_timestamp

EXTENSION_KEY = "portfolio_store"


class PortfolioStore:
    def __init__(self, database: SQLAlchemy):
        self.db = database
        self.app: Optional[Flask] = None

    # --- lifecycle ---

    def connect(self, app: Flask, create_tables: bool = True):
        self.db.init_app(app)
        if create_tables:
            # In production you might run migrations separately
            with app.app_context():
                self.db.create_all()
        app.extensions[EXTENSION_KEY] = self
        self.app = app

    def close(self):
        if self.app is None:
            return
        with self.app.app_context():
            self.db.session.remove()
            self.db.engine.dispose()
        self.app.extensions.pop(EXTENSION_KEY, None)
        self.app = None

    def ping(self):
        self.db.session.execute(text("SELECT 1"))

    def _commit(self):
        try:
            self.db.session.commit()
        except SQLAlchemyError:
            self.db.session.rollback()
            raise

    # --- users ---

    def find_user(self, username: str) -> Optional[User]:
        return User.query.filter_by(username=username).first()

    def add_user(self, username: str, password: str) -> User:
        if self.find_user(username):
            raise ConflictError("Username already exists")

        user = User(username=username)
        user.set_password(password)
        self.db.session.add(user)
        try:
            self._commit()
        except IntegrityError:
            # lost a race against a concurrent registration
            raise ConflictError("Username already exists")
        return user

    # --- stocks ---

    def list_stocks(
        self, username: str, bookmark_color: Optional[str] = None, bookmarked: bool = False
    ) -> List[Stock]:
        query = Stock.query.filter_by(username=username)
        if bookmark_color is not None:
            query = query.filter(Stock.bookmark_color == bookmark_color)
        elif bookmarked:
            query = query.filter(Stock.bookmark_color != "")
        return query.order_by(Stock.created_at.desc(), Stock.id.desc()).all()

    def get_stock(self, username: str, ticker_symbol: str) -> Optional[Stock]:
        return Stock.query.filter_by(username=username, ticker_symbol=ticker_symbol).first()

    def add_stock(self, username: str, data: StockCreate) -> Stock:
        if self.get_stock(username, data.ticker_symbol):
            raise ConflictError(f"{data.ticker_symbol} is already in your watchlist")

        stock = Stock(
            username=username,
            ticker_symbol=data.ticker_symbol,
            display_name=data.display_name,
            chart_id=data.chart_id,
            created_at=normalize_timestamp(data.created_at),
            is_interesting=data.is_interesting,
            bookmark_color=data.bookmark_color,
        )
        self.db.session.add(stock)
        try:
            self._commit()
        except IntegrityError:
            raise ConflictError(f"{data.ticker_symbol} is already in your watchlist")
        return stock

    def update_stock(self, username: str, ticker_symbol: str, changes: dict) -> bool:
        """Merge ``changes`` into the caller's stock. Returns False when nothing matched."""
        stock = self.get_stock(username, ticker_symbol)
        if stock is None:
            return False
        for field, value in changes.items():
            setattr(stock, field, value)
        self._commit()
        return True

    def delete_stock(self, username: str, ticker_symbol: str) -> int:
        """Delete the caller's stock and every note of theirs that points at it.

        Returns the number of notes removed. Both deletes go out in one
        commit, but nothing stops a concurrent request from adding a note to
        the ticker in between.
        """
        Stock.query.filter_by(username=username, ticker_symbol=ticker_symbol).delete()
        removed_notes = Note.query.filter_by(username=username, stock_id=ticker_symbol).delete()
        self._commit()
        return removed_notes

    # --- notes ---

    def list_notes(self, username: str, stock_id: str) -> List[Note]:
        return (
            Note.query.filter_by(username=username, stock_id=stock_id)
            .order_by(Note.created_at.desc())
            .all()
        )

    def add_note(self, username: str, data: NoteCreate) -> Note:
        note_id = data.id or str(uuid.uuid4())
        if Note.query.filter_by(id=note_id, username=username).first() is not None:
            raise ConflictError(f"Note id {note_id} is already taken")

        note = Note(
            id=note_id,
            stock_id=data.stock_id,
            content=dump_content(data.content),
            created_at=normalize_timestamp(data.created_at),
            username=username,
        )
        self.db.session.add(note)
        try:
            self._commit()
        except IntegrityError:
            raise ConflictError(f"Note id {note_id} is already taken")
        return note

    def update_note(self, username: str, note_id: str, data: NoteUpdate) -> bool:
        note = Note.query.filter_by(id=note_id, username=username).first()
        if note is None:
            return False
        note.content = dump_content(data.content)
        created_at = parse_timestamp(data.created_at)
        if created_at is not None:
            note.created_at = created_at
        self._commit()
        return True

    def delete_note(self, username: str, note_id: str) -> bool:
        deleted = Note.query.filter_by(id=note_id, username=username).delete()
        self._commit()
        return bool(deleted)


def get_store() -> PortfolioStore:
    return current_app.extensions[EXTENSION_KEY]
