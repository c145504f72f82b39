import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from liveshop.api.v1.routes import routers as v1_routers
from liveshop.core.config import configs
from liveshop.core.container import Container
from liveshop.utils.class_object import singleton

logging.basicConfig(
    level=configs.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@singleton
class AppCreator:
    def __init__(self):
        # Init DI container & DB
        self.container = Container()
        self.db = self.container.db()

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            # PostgreSQL schema is managed by alembic; SQLite is for local runs and tests
            if configs.IS_SQLITE:
                await self.db.create_database()
                logger.info("SQLite schema ensured")
            yield
            await self.db.dispose()

        # Init FastAPI
        self.app = FastAPI(
            title=configs.PROJECT_NAME,
            version="0.1.0",
            openapi_url=f"{configs.API_V1_STR}/openapi.json",
            lifespan=lifespan,
        )

        # CORS
        if configs.BACKEND_CORS_ORIGINS:
            self.app.add_middleware(
                CORSMiddleware,
                allow_origins=[str(origin) for origin in configs.BACKEND_CORS_ORIGINS],
                allow_credentials=True,
                allow_methods=["*"],
                allow_headers=["*"],
            )

        # Health check
        @self.app.get("/")
        async def root():
            return {"status": "service is working"}

        # API v1 routes
        self.app.include_router(
            v1_routers,
            prefix=configs.API_V1_STR,
        )


app_creator = AppCreator()
app = app_creator.app
db = app_creator.db
container = app_creator.container
