from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import CORS_ORIGINS
from database.conexion import Base, engine
import models  # 👈 asegura que todos los modelos estén registrados
from services.errors import HousekeepingError, Unauthenticated
from utils.logging_utils import log_event
from utils.rate_limiter import setup_rate_limiting

try:
    Base.metadata.create_all(bind=engine)
    log_event("startup", "system", "Tablas creadas (o ya existian)")
except Exception as e:
    log_event("startup", "system", "Error creando tablas", f"error={e}")
    raise

app = FastAPI(title="Hotel Housekeeping API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_rate_limiting(app)


@app.exception_handler(HousekeepingError)
async def housekeeping_error_handler(request: Request, exc: HousekeepingError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
        headers=headers,
    )


from endpoints import auth, housekeeping, maintenance
app.include_router(auth.router)
app.include_router(housekeeping.router)
app.include_router(maintenance.router)


@app.get("/")
def read_root():
    return {"message": "Hotel Housekeeping API"}
