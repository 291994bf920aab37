# server/routes/auth.py
from fastapi import FastAPI
from pydantic import BaseModel, Field


class TokenSetupIn(BaseModel):
    token: str = Field(..., description="Shared bearer token to register")


class MessageOut(BaseModel):
    message: str


def register_auth_routes(app: FastAPI, token_store):
    """Token registration endpoints (not behind the bearer gate)."""

    @app.post("/api/auth/setup", response_model=MessageOut)
    def setup_token(body: TokenSetupIn) -> MessageOut:
        token_store.set_token(body.token)
        return MessageOut(message="Token set successfully")

    @app.get("/api/auth/status")
    def token_status() -> dict:
        return {"tokenSet": token_store.is_set()}
