# backend/config/constants.py

# -----------------------------
# ROLES
# -----------------------------

ROLE_CUSTOMER = "customer"          # default for every new login
ROLE_SELLER = "seller"              # set once, on shop registration

# -----------------------------
# AUTH COOKIE
# -----------------------------

TOKEN_COOKIE_NAME = "token"
TOKEN_COOKIE_MAX_AGE = 24 * 60 * 60   # seconds, matches token lifetime

OAUTH_STATE_COOKIE_NAME = "oauth_state"
OAUTH_STATE_MAX_AGE = 10 * 60

# -----------------------------
# UPLOADS
# -----------------------------

ALLOWED_IMAGE_FORMATS = ("jpg", "jpeg", "png", "webp")

ALLOWED_IMAGE_CONTENT_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
}
