"""Main entry point for the CareerChat API."""
import logging
from typing import Dict, List

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware

from config import (
    CORS_ORIGINS,
    EXCHANGE_LOG_PATH,
    GEMINI_API_URL,
    LOG_FORMAT,
    LOG_LEVEL,
    PORT,
    REQUEST_TIMEOUT_SECONDS,
    get_api_key,
)
from logger import setup_logging
from models.api import (
    ConversationOut,
    CreateConversationRequest,
    MessageRequest,
    MessageResponse,
    NotificationOut,
    PersonaOut,
    TurnOut,
)
from services.completion_client import CompletionClient
from services.conversation_manager import (
    ConversationManager,
    ConversationNotFoundError,
    PersonaUnavailableError,
)
from services.exchange_logger import ExchangeLogger
from services.personas import PERSONAS, UnknownPersonaError
from services.turn_orchestrator import SubmitResult, SubmitStatus, TurnOrchestrator

# Initialize logging
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="CareerChat API",
    description="Persona chat assistants for LinkedIn optimization and career guidance",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
completion_clients: Dict[str, CompletionClient] = {}
exchange_logger: ExchangeLogger = None
conversation_manager: ConversationManager = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global exchange_logger, conversation_manager

    if LOG_FORMAT == "json":
        setup_logging(LOG_LEVEL, "json")

    logger.info("Initializing CareerChat services...")

    try:
        for key, persona in PERSONAS.items():
            api_key = get_api_key(persona.api_key_env)
            if not api_key:
                logger.warning(f"No API key configured for persona '{key}'; it will be unavailable")
                continue
            completion_clients[key] = CompletionClient(
                api_key=api_key,
                api_url=GEMINI_API_URL,
                timeout_seconds=REQUEST_TIMEOUT_SECONDS
            )
            logger.info(f"Initialized CompletionClient for persona '{key}'")

        exchange_logger = ExchangeLogger(EXCHANGE_LOG_PATH)
        logger.info("Initialized ExchangeLogger")

        conversation_manager = ConversationManager(completion_clients, exchange_logger)
        logger.info("Initialized ConversationManager")

        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Tear down live sessions and release HTTP clients."""
    if conversation_manager is not None:
        conversation_manager.close_all()
    for client in completion_clients.values():
        await client.aclose()
    completion_clients.clear()
    if exchange_logger is not None:
        exchange_logger.close()
    logger.info("CareerChat services shut down")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "CareerChat API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "careerchat",
        "version": "1.0.0"
    }


@app.get("/personas", response_model=List[PersonaOut])
async def list_personas() -> List[PersonaOut]:
    """List the available assistant personas."""
    return [
        PersonaOut(
            key=persona.key,
            display_name=persona.display_name,
            greeting_suggestions=list(persona.greeting_suggestions)
        )
        for persona in PERSONAS.values()
    ]


@app.post("/conversations", response_model=ConversationOut, status_code=201)
async def create_conversation(request: CreateConversationRequest) -> ConversationOut:
    """Start a conversation seeded with the persona's greeting turn."""
    try:
        orchestrator = conversation_manager.create_conversation(request.persona)
    except UnknownPersonaError:
        raise HTTPException(status_code=404, detail=f"Unknown persona: {request.persona}")
    except PersonaUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _conversation_out(orchestrator)


@app.get("/conversations/{conversation_id}", response_model=ConversationOut)
async def get_conversation(conversation_id: str) -> ConversationOut:
    """Return the full transcript of a conversation."""
    return _conversation_out(_get_orchestrator(conversation_id))


@app.post("/conversations/{conversation_id}/messages", response_model=MessageResponse)
async def send_message(conversation_id: str, request: MessageRequest) -> MessageResponse:
    """
    Submit one user turn and wait for the assistant turn.

    Empty input is ignored (no turns appended). A submit while another
    exchange is in flight for the same conversation is rejected with 409.
    """
    orchestrator = _get_orchestrator(conversation_id)

    try:
        result = await orchestrator.submit(request.text)
    except Exception as e:
        logger.error(
            f"Unexpected error processing message: {e}",
            exc_info=True,
            extra={"conversation_id": conversation_id}
        )
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    if result.status is SubmitStatus.BUSY:
        raise HTTPException(
            status_code=409,
            detail="A response is already being generated for this conversation"
        )
    if result.status is SubmitStatus.CLOSED:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")

    return _message_response(result)


@app.post("/conversations/{conversation_id}/suggestions", response_model=MessageResponse)
async def select_suggestion(conversation_id: str, request: MessageRequest) -> MessageResponse:
    """Submit a suggestion chip; identical to sending its text as a message."""
    return await send_message(conversation_id, request)


@app.delete("/conversations/{conversation_id}", status_code=204)
async def delete_conversation(conversation_id: str) -> Response:
    """Tear down a conversation, cancelling any in-flight exchange."""
    try:
        conversation_manager.close(conversation_id)
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")
    return Response(status_code=204)


def _get_orchestrator(conversation_id: str) -> TurnOrchestrator:
    try:
        return conversation_manager.get(conversation_id)
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")


def _conversation_out(orchestrator: TurnOrchestrator) -> ConversationOut:
    conversation = orchestrator.conversation
    return ConversationOut(
        conversation_id=conversation.conversation_id,
        persona=conversation.persona_key,
        state=orchestrator.state.value,
        created_at=conversation.created_at,
        turns=[TurnOut.from_turn(turn) for turn in conversation.turns]
    )


def _message_response(result: SubmitResult) -> MessageResponse:
    notification = None
    if result.notification is not None:
        notification = NotificationOut(
            level=result.notification.level,
            title=result.notification.title,
            description=result.notification.description
        )
    return MessageResponse(
        status=result.status.value,
        turns=[TurnOut.from_turn(turn) for turn in result.turns],
        notification=notification
    )


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting CareerChat API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
