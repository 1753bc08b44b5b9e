from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from app.api.dashboard.routes import router as dashboard_router
from app.api.id_cards.routes import router as id_cards_router
from app.api.users.routes import router as users_router
from app.api.validator.routes import router as validator_router
from app.core.config import Environment, settings
from app.core.database import create_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.ENVIRONMENT != Environment.TEST:
        create_db()
    yield


app = FastAPI(lifespan=lifespan)

# Include routers
app.include_router(users_router, prefix='/users', tags=['Users'])
app.include_router(validator_router, prefix='/validator', tags=['Validator'])
app.include_router(id_cards_router, prefix='/id-cards', tags=['ID Cards'])
app.include_router(dashboard_router, prefix='/dashboard', tags=['Dashboard'])

origins = [settings.FRONTEND_URL] if settings.FRONTEND_URL else ['*']
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.get('/', include_in_schema=False)
def ping():
    return Response(status_code=200)
