import secrets
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from config import logger, AI_URL_API_KEY, PORT
from services.assistant import create_agent_invoker

UNAUTHORIZED_BODY = {"status": "error", "message": "Unauthorized"}
INTERNAL_ERROR_BODY = {"status": "error", "message": "Internal Server Error"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One graph and one in-memory checkpointer for the whole process
    if getattr(app.state, "agent", None) is None:
        try:
            app.state.agent = create_agent_invoker()
            logger.info("Agent initialized on startup")
        except Exception as e:
            logger.error(f"Failed to initialize agent: {e}")
            raise

    yield


app = FastAPI(lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow any origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ChatContext(BaseModel):
    model_config = ConfigDict(extra="allow")

    address: Optional[str] = None  # Wallet address the tools prepare transactions for
    sessionId: Optional[str] = None  # Conversation thread; a new one is used when absent


class ChatRequest(BaseModel):
    message: str
    context: ChatContext = ChatContext()


def verify_api_key(api_key: Optional[str]) -> bool:
    # An unset secret rejects every request
    if not AI_URL_API_KEY or not api_key:
        return False
    return secrets.compare_digest(api_key, AI_URL_API_KEY)


@app.post("/api/chat")
async def chat_endpoint(
    request: Request,
    x_api_key: Optional[str] = Header(default=None),
):
    if not verify_api_key(x_api_key):
        return JSONResponse(status_code=401, content=UNAUTHORIZED_BODY)

    try:
        body = ChatRequest.model_validate(await request.json())

        agent = getattr(app.state, "agent", None)
        if agent is None:
            raise RuntimeError("Agent not initialized")

        context: Dict[str, Any] = body.context.model_dump(exclude_none=True)
        logger.info(f"Chat request from {context.get('address', 'unknown')}")
        return await agent.invoke(body.message, context)

    except Exception as e:
        logger.error(f"Error processing chat request: {e}")
        return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)


@app.get("/")
async def health():
    return {"status": "ok", "message": "Loanify agent API running."}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=PORT)
