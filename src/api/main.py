from dotenv import load_dotenv

# Load environment variables first, before importing modules that depend on them
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from src.db.session import Base, engine
from src.models import customer, notification_log, product_variant, subscription  # noqa: F401 register tables
from src.api.routes.subscriptions import router as subs_router
from src.api.routes.account import router as account_router
from src.api.routes.notifications import router as notifications_router

# Auto-create all tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Back-in-Stock Notification Service",
    version="0.1.0",
    openapi_url="/openapi.json",
    docs_url="/docs",
)

origins = [
    "http://localhost:3000", # Storefront dev server
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Subscribe / unsubscribe
app.include_router(
    subs_router,
    prefix="/subscriptions",
    tags=["subscriptions"],
)

# Customer account listing
app.include_router(
    account_router,
    tags=["account"],
)

# Confirmation mail delivery status
app.include_router(
    notifications_router,
    tags=["notifications"],
)
