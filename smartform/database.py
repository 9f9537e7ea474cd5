"""
SQLite storage for learned question/answer pairs.

Uses SQLAlchemy; an alternative to the ``learned`` list of the JSON store
when the pool grows large.
"""

from pathlib import Path
from typing import List
from sqlalchemy import create_engine, Column, Integer, String
from sqlalchemy.orm import declarative_base, sessionmaker

from .models import LearnedPair

Base = declarative_base()


class LearnedPairRecord(Base):
    """Learned pair row; ``id`` preserves insertion order."""

    __tablename__ = "learned_pairs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question = Column(String, nullable=False)
    answer = Column(String, nullable=False)
    timestamp = Column(Integer, nullable=False, default=0)  # epoch milliseconds

    def to_pair(self) -> LearnedPair:
        return LearnedPair(question=self.question, answer=self.answer, timestamp=self.timestamp)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()


class SqlLearnedStore:
    """Learned-pair pool backed by the ``learned_pairs`` table."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        init_database(self.db_path)

    def pairs(self) -> List[LearnedPair]:
        session = get_session(self.db_path)
        try:
            rows = session.query(LearnedPairRecord).order_by(LearnedPairRecord.id).all()
            return [row.to_pair() for row in rows]
        finally:
            session.close()

    def append(self, question: str, answer: str, timestamp: int) -> None:
        session = get_session(self.db_path)
        try:
            session.add(LearnedPairRecord(question=question, answer=answer, timestamp=int(timestamp)))
            session.commit()
        finally:
            session.close()

    def extend(self, pairs: List[LearnedPair]) -> int:
        """Bulk-append pairs in order (used by imports and migrations)."""
        session = get_session(self.db_path)
        try:
            for pair in pairs:
                session.add(LearnedPairRecord(
                    question=pair.question, answer=pair.answer, timestamp=pair.timestamp
                ))
            session.commit()
            return len(pairs)
        finally:
            session.close()

    def clear(self) -> int:
        session = get_session(self.db_path)
        try:
            count = session.query(LearnedPairRecord).delete()
            session.commit()
            return count
        finally:
            session.close()

    def delete(self, index: int) -> LearnedPair:
        """Remove the ``index``-th pair in insertion order and return it."""
        session = get_session(self.db_path)
        try:
            row = None
            if index >= 0:
                row = (
                    session.query(LearnedPairRecord)
                    .order_by(LearnedPairRecord.id)
                    .offset(index)
                    .first()
                )
            if row is None:
                raise IndexError(f"No learned pair at index {index}")
            pair = row.to_pair()
            session.delete(row)
            session.commit()
            return pair
        finally:
            session.close()
