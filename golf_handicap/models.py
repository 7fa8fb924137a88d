from sqlalchemy import Column, Integer, String, Float, Date, ForeignKey
from sqlalchemy.orm import relationship
from .db import Base


class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    favorite_course = Column(String, nullable=True)

    rounds = relationship(
        "Round",
        back_populates="player",
        cascade="all, delete-orphan"
    )


class Round(Base):
    __tablename__ = "rounds"

    id = Column(Integer, primary_key=True, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    course = Column(String, nullable=False)
    tee = Column(String, nullable=False)             # texto libre: blancas, amarillas...

    rating = Column(Float, nullable=False)           # course rating (ej: 72.5)
    slope = Column(Integer, nullable=False)          # slope 55..155
    score = Column(Integer, nullable=False)          # golpes totales

    player = relationship("Player", back_populates="rounds")
