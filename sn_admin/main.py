# === Built-in & External Imports ===
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

# === Internal Imports ===
from sn_admin.api import bookings, linen, pricing
from sn_admin.config import check_settings, logger

# === FastAPI App Setup ===
app = FastAPI(
    title="SN Admin API",
    description="Admin backend for SN Cleaning Services bookings, pricing and linen",
    version="1.0.0"
)

# === CORS Configuration ===
origins = [
    "https://account.sncleaningservices.co.uk",
    "http://localhost",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Routers ===
app.include_router(pricing.router, prefix="/api")    # End of Tenancy quotes & cost form
app.include_router(linen.router, prefix="/api")      # Linen selection
app.include_router(bookings.router, prefix="/api")   # Bookings, dialogs, bulk operations


@app.on_event("startup")
def startup_checks():
    missing = check_settings()
    if missing:
        logger.warning("⚠️ SN Admin started with incomplete configuration")


# === Root Endpoint ===
@app.get("/")
def read_root():
    return JSONResponse(
        content={"message": "SN Admin backend is running"},
        media_type="application/json; charset=utf-8"
    )


# === Health Check ===
@app.get("/ping")
def ping():
    return {"ping": "pong"}
