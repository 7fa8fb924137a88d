import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

# Topes de entrada (enteros de la BBDD)
MAX_SLOPE = 999
MAX_SCORE = 999


class PlayerCreate(BaseModel):
    name: str
    favorite_course: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("favorite_course")
    @classmethod
    def blank_course_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class PlayerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    favorite_course: Optional[str] = None


class RoundCreate(BaseModel):
    player_id: int
    date: datetime.date
    course: str
    tee: str
    rating: float = Field(allow_inf_nan=False)
    slope: int = Field(gt=0, le=MAX_SLOPE)
    score: int = Field(gt=0, le=MAX_SCORE)

    @field_validator("course", "tee")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class RoundOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    player_id: int
    date: datetime.date
    course: str
    tee: str
    rating: float
    slope: int
    score: int
    differential: Optional[float] = None   # 1 decimal, solo para mostrar


class HandicapHistoryPoint(BaseModel):
    date: datetime.date
    handicap: float
    rounds: int          # vueltas usadas en el cálculo


class HandicapOut(BaseModel):
    player_id: int
    handicap: float
    rounds: int
