from dataclasses import dataclass, field
from fastapi import Request

from config.env import (
    BACKEND_URL,
    FRONTEND_URL,
    COOKIE_SECURE,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    CLOUDINARY_CLOUD_NAME,
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
    UPLOAD_FOLDER,
)
from database import connect, get_default_db
from utils.cloudinary import UploadRelay
from utils.google_oauth import GoogleOAuthClient
from utils.jwt import TokenCodec
from utils.products import CatalogStore
from utils.sellers import SellerDirectory
from utils.users import IdentityStore


@dataclass
class AppContext:
    """Everything a request handler needs, built once at startup."""

    db: object
    tokens: TokenCodec
    relay: UploadRelay
    oauth: GoogleOAuthClient
    frontend_url: str = FRONTEND_URL
    cookie_secure: bool = COOKIE_SECURE
    client: object = None

    users: IdentityStore = field(init=False)
    sellers: SellerDirectory = field(init=False)
    products: CatalogStore = field(init=False)

    def __post_init__(self):
        self.users = IdentityStore(self.db)
        self.sellers = SellerDirectory(self.db)
        self.products = CatalogStore(self.db)

    def close(self):
        if self.client is not None:
            self.client.close()


def build_context() -> AppContext:
    client = connect()
    return AppContext(
        db=get_default_db(client),
        tokens=TokenCodec(),
        relay=UploadRelay(
            CLOUDINARY_CLOUD_NAME,
            CLOUDINARY_API_KEY,
            CLOUDINARY_API_SECRET,
            folder=UPLOAD_FOLDER,
        ),
        oauth=GoogleOAuthClient(
            GOOGLE_CLIENT_ID,
            GOOGLE_CLIENT_SECRET,
            redirect_uri=f"{BACKEND_URL}/auth/external/callback",
        ),
        client=client,
    )


def get_context(request: Request) -> AppContext:
    return request.app.state.context
