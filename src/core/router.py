import typing as t
from fastapi import APIRouter
from config import Config
from core.ioc import Inject
from cart.handlers import router as cart_router

api_router = APIRouter(prefix="/api/v1", tags=["api_v1"])

api_router.include_router(cart_router)

router = APIRouter()
router.include_router(api_router)


@router.get("/ping")
async def ping(cfg: t.Annotated[Config, Inject(Config)]) -> dict[str, str]:
    return {"status": "available", "version": cfg.api_version}
