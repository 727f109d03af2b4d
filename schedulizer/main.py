from fastapi import FastAPI

from schedulizer.config import configure_logging
from schedulizer.database import create_db_and_tables
from schedulizer.models import appointment, organization, schedule, service, subscription, time_block, user  # noqa: F401
from schedulizer.routers import (
    appointments,
    auth,
    billing,
    booking,
    organizations,
    schedules,
    services,
    time_blocks,
    users,
)

app = FastAPI(title="Schedulizer API")
app.include_router(users.router)
app.include_router(auth.router)
app.include_router(organizations.router)
app.include_router(billing.router)
app.include_router(services.router)
app.include_router(schedules.router)
app.include_router(time_blocks.router)
app.include_router(appointments.router)
app.include_router(booking.router)


@app.on_event("startup")
def on_startup():
    configure_logging()
    create_db_and_tables()

@app.get("/")
def root():
    return {"message": "Schedulizer API funcionando 🚀"}
