# Role: FastAPI app bootstrap. Loads environment config early, registers routers, and exposes health/docs endpoints.

from fastapi import FastAPI

import booking_assistant.config
booking_assistant.config.load_env()

from booking_assistant.api.chat import router as chat_router
from booking_assistant.api.deps import flow_controller
from booking_assistant.api.state import router as state_router

app = FastAPI(title="VIP Booking Assistant API", version="0.1.0")
app.include_router(chat_router)
app.include_router(state_router)


@app.get("/")
def root() -> dict:
    # Role: quick discoverability for clients (where are docs/health).
    return {
        "message": "VIP Booking Assistant API is running",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
def health() -> dict:
    store_ok = flow_controller.store.ping()
    return {"status": "ok" if store_ok else "degraded", "store_connected": store_ok}
