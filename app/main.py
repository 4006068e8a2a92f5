"""
Application FastAPI — Point d'entrée
====================================

Rôle
----
- Instancie l'app FastAPI, configure le CORS et la journalisation,
- Monte les routeurs (REST + WebSocket) et, s'il existe, le front statique,
- Démarre la session par défaut (rôle secret + compte à rebours) au lancement,
- Lance le module de simulation si `RUN_SIMULATION` vaut "true".

Notes
-----
- ⚠️ Le middleware CORS doit être ajouté AVANT les include_router.
- Le montage statique vient en dernier : il capte `/` et masquerait les routes suivantes.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config.settings import settings
from app.routes.debug_ws import router as debug_ws_router
from app.routes.health import router as health_router
from app.routes.session import router as session_router
from app.routes.websocket import router as ws_router
from app.services.session_store import DEFAULT_SESSION_ID, drop_session_engine, get_session_engine
from app.services.simulation_process import SimulationProcess

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("[ENV] PORT = %s", settings.PORT)
    logger.info("[ENV] RUN_SIMULATION = %s", settings.RUN_SIMULATION)

    engine = get_session_engine()
    await engine.start()
    logger.info("Tartarus Protocol server running on http://%s:%s", settings.HOST, settings.PORT)
    logger.info("[SYSTEM] turn system active")

    simulation = None
    if settings.RUN_SIMULATION:
        simulation = SimulationProcess(settings.SIMULATION_COMMAND)
        await simulation.start()
    else:
        logger.info("[SYSTEM] RUN_SIMULATION is disabled")

    yield

    if simulation is not None:
        await simulation.stop()
    await engine.shutdown()
    drop_session_engine(DEFAULT_SESSION_ID)
    logger.info("Backend shutting down.")


# --- App FastAPI principale  ---
app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ===========================
# CORS (toutes origines, comme le front historique)
# ===========================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# ===========================
# Montage des routers
# ===========================
app.include_router(ws_router)                  # WebSocket endpoint (/ws)
app.include_router(health_router)
app.include_router(session_router)
app.include_router(debug_ws_router)


# --- Racine utile pour "ping" simple (sans /health) ---
@app.get("/ping")
async def root():
    """Ping basique : permet de vérifier que l'app tourne."""
    return {"ok": True, "service": "tartarus-backend"}


# Front compilé (dossier public/) servi à la racine
if os.path.isdir(settings.STATIC_DIR):
    app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")
    logger.info("Serving frontend from %s", settings.STATIC_DIR)


def run() -> None:
    """Point d'entrée console (`tartarus-server`)."""
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
