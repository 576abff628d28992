from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from shared.config.settings import get_settings
from services.order_service.main import init_order_service, order_app, shutdown_order_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Mounted apps do not run their own lifespan
    await init_order_service()
    yield
    await shutdown_order_service()


app = FastAPI(title="Order Cluster", lifespan=lifespan)

app.mount("/orders", order_app)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
