import pytest

from stockfolio.Schemas.note import NoteCreate
from stockfolio.Schemas.stock import StockCreate
from stockfolio.Store.PortfolioStore import PortfolioStore, get_store
from stockfolio.Utils.Errors import ConflictError


@pytest.fixture
def store(app):
    with app.app_context():
        yield get_store()


def test_store_is_registered_on_app(app, store):
    assert isinstance(store, PortfolioStore)
    assert store.app is app
    store.ping()


def test_add_user_conflict(store):
    store.add_user("alice", "secret123")
    with pytest.raises(ConflictError):
        store.add_user("alice", "other")


def test_stock_queries_are_scoped(store):
    store.add_stock("alice", StockCreate(ticker_symbol="AAPL", display_name="Apple"))
    assert store.get_stock("bob", "AAPL") is None
    assert store.update_stock("bob", "AAPL", {"display_name": "x"}) is False
    assert store.update_stock("alice", "AAPL", {"display_name": "Apple Inc."}) is True
    assert store.get_stock("alice", "AAPL").display_name == "Apple Inc."


def test_delete_stock_reports_removed_notes(store):
    store.add_stock("alice", StockCreate(ticker_symbol="AAPL", display_name="Apple"))
    for text in ("a", "b"):
        store.add_note("alice", NoteCreate(stock_id="AAPL", content=text))
    store.add_note("bob", NoteCreate(stock_id="AAPL", content="bob keeps his"))

    assert store.delete_stock("alice", "AAPL") == 2
    assert store.delete_stock("alice", "AAPL") == 0
    assert store.list_notes("alice", "AAPL") == []
    assert len(store.list_notes("bob", "AAPL")) == 1


def test_delete_note_reports_match(store):
    note = store.add_note("alice", NoteCreate(stock_id="AAPL", content="x"))
    assert store.delete_note("bob", note.id) is False
    assert store.delete_note("alice", note.id) is True
    assert store.delete_note("alice", note.id) is False


def test_close_detaches_store():
    from stockfolio.Init.main import create_app

    app = create_app("TestingConfig")
    store = app.extensions["portfolio_store"]
    store.close()
    assert "portfolio_store" not in app.extensions
    assert store.app is None
    # closing twice is harmless
    store.close()
