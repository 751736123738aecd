import logging

# SSM 값이 Settings보다 먼저 환경변수에 들어가야 한다.
from quizgen.core.ssm import load_ssm_parameters
load_ssm_parameters()

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI

from quizgen.api.routes.quiz import router as quiz_router
from quizgen.core.scheduler import shutdown_scheduler, start_scheduler
from quizgen.db.session import init_db

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title="Quiz Generation API")

_scheduler = None


@app.get("/health", tags=["health"])
def health_check():
    return {"status": "ok"}


app.include_router(quiz_router)


@app.on_event("startup")
def _startup():
    global _scheduler
    init_db()
    _scheduler = start_scheduler()


@app.on_event("shutdown")
def _stop_scheduler():
    shutdown_scheduler(_scheduler)
