# crudsuite/main.py
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from crudsuite.api.v1.routes import routers_for
from crudsuite.core.config import Deployment, settings
from crudsuite.core.errors import register_error_handlers
from crudsuite.db.mongo import close_db, init_db, select_database

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

TITLES = {
    Deployment.SHOP: "Atelier Shop API",
    Deployment.QUIZ: "QuizSphere API",
    Deployment.JOBS: "Job Board API",
}


def create_app(deployment: Optional[Deployment] = None) -> FastAPI:
    deployment = Deployment(deployment or settings.DEPLOYMENT)
    app = FastAPI(title=TITLES[deployment])
    app.state.deployment = deployment

    register_error_handlers(app)
    for router in routers_for(deployment):
        app.include_router(router)
    if deployment is Deployment.JOBS:
        app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

    @app.on_event("startup")
    async def startup_event():
        select_database(settings.database_name(deployment))
        await init_db()
        logger.info("%s deployment ready", deployment.value)

    @app.on_event("shutdown")
    async def shutdown_event():
        close_db()

    return app


app = create_app()
