from __future__ import annotations  # FastAPI server exposing the interview coach

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agents.dialog_manager import DialogManager
from api.bot import router as bot_router
from api.routes import router as webchat_router
from config import Settings, settings as default_settings
from llm_gateway import ChatModel, LlmClient
from services.sessions import InMemorySessionStore, SessionStore


logger = logging.getLogger(__name__)


def create_app(
    *,
    llm: Optional[ChatModel] = None,
    store: Optional[SessionStore] = None,
    config: Optional[Settings] = None,
    knowledge_base: Optional[str] = None,
) -> FastAPI:  # Build the app with one dialog manager shared by both channels
    cfg = config if config is not None else default_settings
    owned_client: Optional[LlmClient] = None
    if llm is None:
        owned_client = LlmClient(cfg.llm_route())
        llm = owned_client

    dialog = DialogManager(
        store if store is not None else InMemorySessionStore(),
        llm,
        config=cfg,
        knowledge_base=knowledge_base,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        if owned_client is not None:
            await owned_client.aclose()

    app = FastAPI(title="Interview Coach API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.dialog = dialog
    app.state.settings = cfg
    app.include_router(webchat_router)
    app.include_router(bot_router)
    logger.info("Interview coach ready (model=%s)", cfg.LLM_MODEL)
    return app


app = create_app()
