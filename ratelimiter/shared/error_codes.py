# ratelimiter/shared/error_codes.py
# Central mapping for the error contract.
# Keep keys stable: API clients rely on these.
ERROR_CODES = {
    # ─── Validation & Requests ──────────────────────────────────────────────
    "validation_error": {
        "http": 400,
        "message": "Validation failed for one or more fields."
    },
    "pattern_error": {
        "http": 400,
        "message": "Invalid API pattern."
    },

    # ─── Tenant & Rule Management ──────────────────────────────────────────
    "not_found": {
        "http": 404,
        "message": "Resource not found."
    },
    "tenant_not_found": {
        "http": 404,
        "message": "Tenant not found."
    },
    "tenant_conflict": {
        "http": 409,
        "message": "Tenant with this name already exists."
    },
    "conflict": {
        "http": 409,
        "message": "Conflict with existing resource."
    },

    # ─── Rate Limiting ─────────────────────────────────────────────────────
    "rate_limited": {
        "http": 429,
        "message": "Too many requests. Please try again later."
    },

    # ─── Infrastructure ────────────────────────────────────────────────────
    "store_unavailable": {
        "http": 503,
        "message": "A backing store is unavailable."
    },

    # ─── Internal ──────────────────────────────────────────────────────────
    "internal_error": {
        "http": 500,
        "message": "An unexpected error occurred. Please try again later."
    },
}
