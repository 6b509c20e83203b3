"""
HTTP API for the portfolio analyzer.

Run with `python server.py` or `uvicorn server:app`.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from adapters.base import ProviderStatus
from config import Config
from exceptions import InvalidAddressError
from logging_config import setup_logging
from portfolio_analyzer import PortfolioAnalyzer

logger = logging.getLogger(__name__)


class AnalyzeRequest(BaseModel):
    walletAddress: Optional[str] = None
    query: Optional[str] = None


def _error(status_code: int, error: str, details: str = None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def create_app(analyzer: Optional[PortfolioAnalyzer] = None) -> FastAPI:
    """Create the FastAPI application around a portfolio analyzer."""
    analyzer = analyzer or PortfolioAnalyzer.from_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        status = await asyncio.to_thread(analyzer.probe)
        if status == ProviderStatus.DEGRADED:
            logger.warning("⚠️  Provider degraded, portfolio enhancement disabled")
        async with analyzer:
            yield

    app = FastAPI(title="Multi-Chain Portfolio Analyzer", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidAddressError)
    async def invalid_address_handler(request: Request, exc: InvalidAddressError):
        return _error(
            400,
            "Invalid wallet address format",
            "Please provide a valid Ethereum, Polygon, or Solana address",
        )

    @app.get("/api/health")
    async def health():
        return {"status": "OK", "message": "Portfolio analyzer API is running"}

    @app.get("/api/provider/status")
    async def provider_status():
        provider = analyzer.provider
        return {
            "providerStatus": provider.status.value,
            "hasApiKey": bool(getattr(provider, "api_key", None)),
            "message": (
                "Provider is reachable"
                if provider.status == ProviderStatus.READY
                else "Provider not verified, enhanced data unavailable"
            ),
        }

    @app.get("/api/portfolio/{address}")
    async def get_portfolio(address: str, comprehensive: bool = False):
        logger.info(f"📊 Portfolio request for address: {address}")
        try:
            portfolio = await analyzer.get_portfolio(
                address, comprehensive=comprehensive
            )
        except InvalidAddressError:
            raise
        except Exception as e:
            logger.exception("Portfolio API error")
            return _error(500, "Failed to fetch portfolio data", str(e))
        return portfolio.to_dict()

    @app.get("/api/nfts/{address}")
    async def get_nfts(address: str, chain: str = "ethereum"):
        return {"nfts": await analyzer.get_nfts(address, chain=chain)}

    @app.post("/api/ai/analyze")
    async def analyze(request: Request):
        try:
            body = AnalyzeRequest.model_validate(await request.json())
        except (ValueError, ValidationError):
            body = AnalyzeRequest()
        if not body.walletAddress or not body.query:
            return _error(400, "Wallet address and query are required")
        try:
            return await analyzer.analyze_query(body.walletAddress, body.query)
        except InvalidAddressError:
            raise
        except Exception as e:
            logger.exception("AI analysis error")
            return _error(500, "Failed to analyze portfolio", str(e))

    @app.get("/api/chains")
    async def get_chains():
        return {"chains": analyzer.get_supported_chains()}

    @app.get("/api/rates")
    async def get_rates(currencies: Optional[str] = None):
        currency_list = (
            currencies.split(",") if currencies else list(Config.DEFAULT_RATE_CURRENCIES)
        )
        try:
            rates = await analyzer.get_exchange_rates(currency_list)
        except Exception as e:
            logger.exception("Rates API error")
            return _error(500, "Failed to fetch exchange rates", str(e))
        return {"rates": rates, "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/transactions/{address}")
    async def get_transactions(
        address: str, chain: str = "ethereum", limit: int = Query(10, ge=1, le=50)
    ):
        transactions = await analyzer.get_transactions(
            address, chain=chain, limit=limit
        )
        return {"transactions": transactions}

    return app


app = create_app()


if __name__ == "__main__":
    setup_logging(Config.LOG_LEVEL)
    logger.info(f"🚀 Portfolio analyzer running on port {Config.PORT}")
    uvicorn.run(app, host=Config.HOST, port=Config.PORT)
