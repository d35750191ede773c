# crudsuite/api/v1/routes.py
from datetime import datetime
from typing import Dict, List

from fastapi import APIRouter, Request

from crudsuite.api.v1 import admin, applications, auth, jobs, orders, products, profiles, quizzes
from crudsuite.core.config import Deployment

health_router = APIRouter(prefix="/api", tags=["health"])


@health_router.get("/health")
async def health(request: Request):
    return {
        "status": "ok",
        "deployment": request.app.state.deployment.value,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }


# routers each deployment mounts on top of health and auth
DEPLOYMENT_ROUTERS: Dict[Deployment, List[APIRouter]] = {
    Deployment.SHOP: [products.router, orders.router, admin.router],
    Deployment.QUIZ: [quizzes.router],
    Deployment.JOBS: [profiles.router, jobs.router, applications.router],
}


def routers_for(deployment: Deployment) -> List[APIRouter]:
    return [health_router, auth.router] + DEPLOYMENT_ROUTERS[deployment]
