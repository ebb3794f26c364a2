from stockfolio.extensions import db
from stockfolio.Utils.Timestamps import to_iso


class Stock(db.Model):
    __tablename__ = "stocks"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), nullable=False, index=True)
    ticker_symbol = db.Column(db.String(20), nullable=False)
    display_name = db.Column(db.String(200), nullable=False)
    chart_id = db.Column(db.String(64), nullable=False, default="")
    created_at = db.Column(db.DateTime, nullable=False)
    is_interesting = db.Column(db.Boolean, nullable=False, default=False)
    bookmark_color = db.Column(db.String(40), nullable=False, default="")

    __table_args__ = (
        db.UniqueConstraint("username", "ticker_symbol", name="uix_user_ticker"),
    )

    def to_dict(self) -> dict:
        # the ticker symbol is the public identifier, the integer key never leaves the store
        return {
            "id": self.ticker_symbol,
            "ticker_symbol": self.ticker_symbol,
            "display_name": self.display_name,
            "chart_id": self.chart_id,
            "created_at": to_iso(self.created_at),
            "is_interesting": bool(self.is_interesting),
            "bookmark_color": self.bookmark_color,
            "username": self.username,
        }

    def __repr__(self):
        return f"Stock {self.ticker_symbol} (owner={self.username})"
