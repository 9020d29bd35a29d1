"""Display configuration for the storefront: currency and support contacts."""

import re

from fastapi import APIRouter
from libs.common.config import get_settings
from libs.common.currency import Currency
from services.marketplace_service.schemas import CurrencyConfig, SupportInfo

router = APIRouter(tags=["site"])


@router.get("/currency", response_model=CurrencyConfig)
async def currency_config():
    settings = get_settings()
    return CurrencyConfig(
        default_currency=Currency(settings.DEFAULT_CURRENCY),
        rate=settings.USD_RATE,
        currencies=list(Currency),
    )


@router.get("/support", response_model=SupportInfo)
async def support_info():
    settings = get_settings()
    phone = settings.SUPPORT_PHONE
    return SupportInfo(
        email=settings.SUPPORT_EMAIL,
        phone=phone,
        mailto=f"mailto:{settings.SUPPORT_EMAIL}",
        whatsapp_url=f"https://wa.me/{re.sub(r'[^0-9]', '', phone)}" if phone else None,
    )
