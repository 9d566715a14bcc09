"""Request and response bodies for the HTTP API."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel


class ConfigureRequest(BaseModel):
    currencies: List[str]


class MessageResponse(BaseModel):
    message: str


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    token: str


class ObservationRow(BaseModel):
    currency: str
    rate: str
    date: str
