from stockfolio.extensions import db, bcrypt


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.LargeBinary(60), nullable=False)

    def check_password(self, plaintext_password: str) -> bool:
        return bcrypt.check_password_hash(self.password_hash, plaintext_password)

    def set_password(self, plaintext_password: str):
        # cost comes from BCRYPT_LOG_ROUNDS
        self.password_hash = bcrypt.generate_password_hash(plaintext_password)

    def __repr__(self):
        return f"User {self.username} (id={self.id})"
