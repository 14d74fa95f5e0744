"""
Vivario API Server Entry Point

Use this file for deployment:
  uvicorn main:app --host 0.0.0.0 --port $PORT
"""

import logging

from fastapi import FastAPI

from vivario import __version__
from vivario.config import configure_logging
from vivario.flow.admin import router as flow_router
from vivario.health.router import router as health_router
from vivario.planner.admin import router as planner_router
from vivario.profile.admin import router as profile_router
from vivario.scenario.admin import router as scenario_router
from vivario.store.admin import router as store_router

configure_logging()
logger = logging.getLogger("vivario.main")

app = FastAPI(
    title="Vivario API",
    description="Adaptive wellness questionnaire, scenarios, diagnostic and 7-day plan",
    version=__version__,
)

app.include_router(health_router)
app.include_router(flow_router)
app.include_router(profile_router)
app.include_router(scenario_router)
app.include_router(planner_router)
app.include_router(store_router)

logger.info(f"Vivario API v{__version__} routers registered")


@app.get("/")
def root():
    return {"service": "vivario", "version": __version__, "docs": "/docs"}


# For local development
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
