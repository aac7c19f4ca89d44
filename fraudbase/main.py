import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from fraudbase.auth import routes as auth_routes
from fraudbase.cadastro import routes as cadastro_routes
from fraudbase.common import notifications
from fraudbase.common.config import get_settings
from fraudbase.common.exceptions import AdminRequired, SessionRequired
from fraudbase.common.templating import redirect
from fraudbase.consulta import routes as consulta_routes
from fraudbase.dashboard import routes as dashboard_routes
from fraudbase.reincidencia import routes as reincidencia_routes
from fraudbase.upload import routes as upload_routes
from fraudbase.usuarios import routes as usuarios_routes

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

MSG_ADMIN_ONLY = "Acesso restrito a administradores."

app = FastAPI(title=settings.app_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_routes.router)
app.include_router(dashboard_routes.router)
app.include_router(consulta_routes.router)
app.include_router(cadastro_routes.router)
app.include_router(reincidencia_routes.router)
app.include_router(upload_routes.router)
app.include_router(usuarios_routes.router)


@app.exception_handler(SessionRequired)
async def session_required_handler(request: Request, exc: SessionRequired):
    logger.info("Acesso sem sessão a %s, redirecionando para login", request.url.path)
    return redirect("/")


@app.exception_handler(AdminRequired)
async def admin_required_handler(request: Request, exc: AdminRequired):
    logger.warning("Acesso não autorizado a %s", request.url.path)
    return redirect("/dashboard", notifications.warning(MSG_ADMIN_ONLY))


@app.get("/health")
async def health_check():
    return {"status": "online", "timestamp": datetime.now().isoformat()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("fraudbase.main:app", host="0.0.0.0", port=3000, reload=settings.debug)
