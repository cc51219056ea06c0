from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS
from database.conexion import Base, engine
import models  # registra todos los modelos en Base.metadata
from utils.logging_utils import log_event
from utils.rate_limiter import setup_rate_limiting

try:
    Base.metadata.create_all(bind=engine)
    log_event("startup", "system", "Tables ready")
except Exception as e:
    log_event("startup", "system", "Error", f"Could not create tables: {e}")
    raise

app = FastAPI(title="Hotel PMS")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_rate_limiting(app)

from endpoints import admin, auth, lost_found, notifications, rates, reservations, rooms, tickets
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(rates.router)
app.include_router(rooms.router)
app.include_router(reservations.router)
app.include_router(notifications.router)
app.include_router(lost_found.router)
app.include_router(tickets.router)


@app.get("/")
def read_root():
    return {"message": "Hotel PMS API"}
