# tierpoints/main.py
import logging

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI

from tierpoints.core.config import Settings, settings as env_settings
from tierpoints.services.customer_store import CustomerStore, InMemoryCustomerStore, SqlCustomerStore
from tierpoints.services.loyalty_engine import LoyaltyEngine
from tierpoints.services.purchases import seed_demo_customers
from tierpoints.api.customers import router as customers_router

logger = logging.getLogger(__name__)


def build_store(s: Settings) -> CustomerStore:
    kind = (s.CUSTOMER_STORE or "memory").strip().lower()
    if kind == "memory":
        return InMemoryCustomerStore()
    if kind == "sql":
        from tierpoints.core.database import Base, SessionLocal, engine
        import tierpoints.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        return SqlCustomerStore(SessionLocal)
    raise ValueError(f"Unknown CUSTOMER_STORE: {s.CUSTOMER_STORE!r} (expected memory or sql)")


def create_app(
    s: Settings | None = None,
    store: CustomerStore | None = None,
    engine: LoyaltyEngine | None = None,
) -> FastAPI:
    s = s or env_settings
    logging.basicConfig(
        level=(s.LOG_LEVEL or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Tierpoints Loyalty Engine")
    app.state.engine = engine or LoyaltyEngine.from_settings(s)
    app.state.store = store if store is not None else build_store(s)

    if s.SEED_DEMO_CUSTOMERS:
        added = seed_demo_customers(app.state.store)
        if added:
            logger.info(f"Seeded {added} demo customers")

    app.include_router(customers_router, prefix="/api")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
