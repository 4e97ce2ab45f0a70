"""
Portfolio Router

Account balances from the active portfolio gateway.
"""

from typing import List

from fastapi import APIRouter, Depends

from trading_bot.dependencies import get_portfolio
from trading_bot.exchange_clients.base import PortfolioGateway
from trading_bot.schemas.market import AssetBalanceResponse

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])


@router.get("/balances", response_model=List[AssetBalanceResponse])
async def get_balances(portfolio: PortfolioGateway = Depends(get_portfolio)):
    """All assets with a non-zero free or locked amount"""
    balances = await portfolio.get_balances()
    return [AssetBalanceResponse.model_validate(b) for b in balances]


@router.get("/balances/{asset}", response_model=AssetBalanceResponse)
async def get_balance(asset: str, portfolio: PortfolioGateway = Depends(get_portfolio)):
    """Balance for one asset; zero when the account holds none"""
    balance = await portfolio.get_balance(asset)
    return AssetBalanceResponse.model_validate(balance)
