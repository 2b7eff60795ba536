import os
import time
import logging
from fastapi import FastAPI, HTTPException, Body, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv
from models import ContactInput, ChatInput, MessageInput, validate_payload, format_validation_errors
from services.errors import ApiError
from services import contacts_service as contacts
from services import chats_service as chats
from services import messages_service as messages
from db import init_db

# Load environment variables first
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize database
try:
    init_db()
    logger.info("Database initialized successfully")
except Exception as e:
    logger.error(f"Failed to initialize database: {e}")
    raise

app = FastAPI(title="Chatdesk Backend", version="1.0.0")

# Configure CORS - allow specific origins or localhost for development
ALLOWED_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
ALLOWED_ORIGINS = [origin.strip() for origin in ALLOWED_ORIGINS if origin.strip()]

if os.getenv("ENVIRONMENT", "development") == "development":
    ALLOWED_ORIGINS.extend([
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ])
    logger.warning("CORS is configured for development. Set ENVIRONMENT=production and CORS_ORIGINS for production.")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.error(f"Request error: {request.method} {request.url.path} 500 {elapsed_ms:.1f}ms")
        raise
    elapsed_ms = (time.perf_counter() - start) * 1000
    line = f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms"
    if response.status_code >= 500:
        logger.error(f"Request error: {line}")
    elif response.status_code >= 400:
        logger.warning(f"Request warning: {line}")
    else:
        logger.info(f"Request completed: {line}")
    return response

# ============================================================================
# Error handlers
# ============================================================================

@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error} ({exc.details})")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation error", "details": format_validation_errors(exc.errors())},
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "details": str(exc)},
    )

# Health and readiness endpoints
@app.get("/health")
def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy"}

@app.get("/ready")
def readiness_check():
    """Readiness check - verifies database connectivity."""
    try:
        from db import get_session
        from sqlmodel import text
        with get_session() as session:
            session.exec(text("SELECT 1"))
        return {"status": "ready", "database": "connected"}
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Service not ready: {str(e)}"
        )

# ============================================================================
# Contacts
# ============================================================================

@app.post("/contacts", status_code=status.HTTP_201_CREATED)
def create_contact(req: dict = Body(...)):
    """
    Create a contact. Its chat is provisioned right after; if that fails the
    contact is still returned with chatId=null.
    """
    data = validate_payload(ContactInput, req)
    return {"message": "Contact created", "data": contacts.create_contact(data)}

@app.get("/contacts")
def contacts_list():
    items = contacts.list_contacts()
    return {"count": len(items), "data": items}

@app.get("/contacts/{contact_id}")
def contact_detail(contact_id: str):
    return contacts.get_contact(contact_id)

@app.put("/contacts/{contact_id}")
def update_contact(contact_id: str, req: dict = Body(...)):
    data = validate_payload(ContactInput, req)
    return contacts.update_contact(contact_id, data)

@app.delete("/contacts/{contact_id}")
def delete_contact(contact_id: str):
    return {"message": "Contact deleted", "data": contacts.delete_contact(contact_id)}

# ============================================================================
# Chats
# ============================================================================

@app.post("/chats", status_code=status.HTTP_201_CREATED)
def create_chat(req: dict = Body(...)):
    data = validate_payload(ChatInput, req)
    return {"message": "Chat created", "data": chats.create_chat(data)}

@app.get("/chats")
def chats_list():
    """Chats ordered by most recent activity, with contact and last message resolved."""
    items = chats.list_chats()
    return {"count": len(items), "data": items}

@app.get("/chats/{chat_id}")
def chat_detail(chat_id: str):
    """
    Chat with its contact and latest 50 messages.
    Side effect: marks the chat as read (unreadCount is reset to 0 after
    this response, which still reports the previous count).
    """
    return chats.open_chat(chat_id)

@app.delete("/chats/{chat_id}")
def delete_chat(chat_id: str):
    """Delete a chat. Its messages are kept."""
    return {"message": "Chat deleted", "data": chats.delete_chat(chat_id)}

# ============================================================================
# Messages
# ============================================================================

@app.post("/messages", status_code=status.HTTP_201_CREATED)
def send_message(req: dict = Body(...)):
    data = validate_payload(MessageInput, req)
    return {"message": "Message sent", "data": messages.send_message(data)}

@app.get("/messages/chat/{chat_id}")
def chat_messages(chat_id: str):
    """
    All messages of a chat, oldest first.
    Side effect: marks the chat as read.
    """
    return messages.read_chat_messages(chat_id)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "3000")))
