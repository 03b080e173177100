from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from pydantic import BaseModel

from request_background.config import get_safe_config_report, get_settings
from request_background.deps import TaskQueueDep
from request_background.plugin import install_background
from request_background.utils.log import logger


class Registration(BaseModel):
    email: str
    name: str


async def send_email(outbox: list[dict[str, Any]], email: str, message: str) -> None:
    logger.info("demo_email_sending", email=email)
    await asyncio.sleep(float(get_settings().demo_email_delay_sec))
    outbox.append({"to": email, "message": message})
    logger.info("demo_email_sent", email=email)


async def log_activity(activity: list[str], action: str, user_email: str) -> None:
    await asyncio.sleep(float(get_settings().demo_activity_delay_sec))
    activity.append(f"{action}:{user_email}")
    logger.info("demo_activity_logged", action=action)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.outbox = []
    app.state.activity = []
    logger.info("demo_startup", config=get_safe_config_report())
    yield
    await app.state.background_runner.shutdown()


app = FastAPI(title="request-background demo", lifespan=lifespan)
install_background(app)


@app.post("/register")
async def register(body: Registration, request: Request, tasks: TaskQueueDep) -> dict[str, str]:
    state = request.app.state
    tasks.add_task(
        send_email,
        state.outbox,
        body.email,
        f"Dear {body.name}, thank you for registering with us.",
    )
    tasks.add_task(log_activity, state.activity, "user_registered", body.email)
    return {
        "message": (
            f"Thank you, {body.name}. Your registration has been processed successfully. "
            f"A confirmation email will be sent to {body.email} shortly."
        )
    }


def main() -> None:
    s = get_settings()
    uvicorn.run(
        "request_background.demo:app",
        host=str(s.host),
        port=int(s.port),
        reload=False,
    )


if __name__ == "__main__":
    main()
