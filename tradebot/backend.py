from fastapi import FastAPI, Request, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from .admin import router as admin_router
from .dependencies import get_agent
from .models.chat import ChatReply
from .models.result import Err, ErrorKind, Result, SOURCE_REQUEST
from .services.agent import TradingAgent
from .services.replies import EMPTY_MESSAGE, UNEXPECTED_ERROR, render, status_for

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="AI Trading Agent")

# middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(admin_router)

def reply(result: Result) -> JSONResponse:
    return JSONResponse(ChatReply(reply=render(result)).model_dump(), status_code=status_for(result))

@app.post("/chat")
async def chat(request: Request, agent: TradingAgent = Depends(get_agent)):
    try:
        data = await request.json()
    except ValueError as e:
        logger.error(f"Error parsing request body: {e}")
        return reply(Err(ErrorKind.INPUT, SOURCE_REQUEST, str(e)))

    if not isinstance(data, dict):
        return reply(Err(ErrorKind.INPUT, SOURCE_REQUEST, "body must be a JSON object"))

    message = data.get("message")
    if not isinstance(message, str) or not message.strip():
        return JSONResponse(ChatReply(reply=EMPTY_MESSAGE).model_dump())

    logger.info(f"Received message: {message}")
    try:
        result = await run_in_threadpool(agent.handle, message)
    except Exception as e:
        logger.error(f"Unexpected error processing message: {e}", exc_info=True)
        return JSONResponse(ChatReply(reply=UNEXPECTED_ERROR.format(detail=e)).model_dump(), status_code=500)

    return reply(result)

@app.get("/health")
async def health_check():
    return {"status": "healthy"}
