from fastapi import Depends

from shared.config.settings import Settings, get_settings
from .clients import CatalogClient, IdentityClient
from .service import OrderService


def get_order_service(settings: Settings = Depends(get_settings)) -> OrderService:
    return OrderService(
        identity=IdentityClient(settings.user_service_url, timeout=settings.upstream_timeout),
        catalog=CatalogClient(settings.product_service_url, timeout=settings.upstream_timeout),
    )
