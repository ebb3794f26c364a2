from stockfolio.extensions import db
from stockfolio.Schemas.note import load_content
from stockfolio.Utils.Timestamps import to_iso


class Note(db.Model):
    __tablename__ = "notes"

    # ids are unique per owner, another user's ids are never visible
    id = db.Column(db.String(64), primary_key=True)
    # references stocks.ticker_symbol; the cascade lives in the store, not in a foreign key
    stock_id = db.Column(db.String(20), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False)
    username = db.Column(db.String(80), primary_key=True, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "stock_id": self.stock_id,
            "content": load_content(self.content),
            "created_at": to_iso(self.created_at),
            "username": self.username,
        }

    def __repr__(self):
        return f"Note {self.id} on {self.stock_id} (owner={self.username})"
