import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from tripsplit.core.config import settings
from tripsplit.db.database import init_db, check_db_connection
from tripsplit.api.v1.routes.trips import router as trips_router
from tripsplit.api.v1.routes.expenses import router as expenses_router
from tripsplit.api.v1.routes.settlements import router as settlements_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="Trip Split Service - Expense Settlement",
    description="Manages trips, members, shared expenses and settlements",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(trips_router)
app.include_router(expenses_router)
app.include_router(settlements_router)


@app.get("/")
def read_root():
    return {"message": "Trip Split Service API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    if not check_db_connection():
        return {"status": "degraded", "database": "unreachable"}
    return {"status": "healthy"}
