HTTP_STATUS_CODES = {
    "OK": 200,
    "CREATED": 201,
    "NO_CONTENT": 204,
    "BAD_REQUEST": 400,
    "UNAUTHORIZED": 401,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "CONFLICT": 409,
    "VALIDATION_ERROR": 422,
    "INTERNAL_SERVER_ERROR": 500,
    "SERVICE_UNAVAILABLE": 503,
}

ERROR_MESSAGES = {
    "VALIDATION_FAILED": "Validation failed. Please check your inputs.",
    "UNAUTHORIZED_ACCESS": "You are not authorized to access this resource.",
    "RESOURCE_NOT_FOUND": "The requested resource could not be found.",
    "DUPLICATE_RESOURCE": "The resource already exists.",
    "SERVER_ERROR": "An unexpected error occurred. Please try again later.",
    "STORAGE_PATH": "Could not determine storage path",
}

AUTHENTICATION_MESSAGES = {
    "AUTHENTICATION_REQUIRED": "Authentication Required",
    "TOKEN_EXPIRED": "Token expired",
    "INVALID_TOKEN": "Invalid token",
    "TOKEN_REVOKED": "Token has been revoked",
    "INVALID_CREDENTIALS": "Invalid email or password",
    "EMAIL_IN_USE": "Email address is already in use",
    "ACCOUNT_DISABLED": "Your account has been disabled. Please contact the administrator.",
    "ADMIN_ONLY": "Only administrators can access this resource",
}

SYSTEM_USERS = {
    "ADMIN": "admin",
    "BUSINESS": "business",
}

ACCOUNT_STATUS = {
    "ENABLED": "enabled",
    "DISABLED": "disabled",
}

ORDER_STATUS = {
    "PENDING": "pending",
    "PROCESSING": "processing",
    "COMPLETED": "completed",
    "CANCELLED": "cancelled",
}

# pending -> processing|cancelled, processing -> completed|cancelled
ORDER_STATUS_TRANSITIONS = {
    "pending": {"processing", "cancelled"},
    "processing": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

TERMINAL_ORDER_STATUSES = {"completed", "cancelled"}

ORDER_SOURCES = ["whatsapp", "messenger", "phone"]

COLLECTIONS = {
    "USERS": "users",
    "BUSINESS_ACCOUNTS": "BusinessAccounts",
    "PLANS": "Plan",
    "ACTIVITY_LOGS": "activity_logs",
    "CUSTOMERS": "customers",
    "PRODUCTS": "products",
    "ORDERS": "orders",
    "EXPERIENCES": "experiences",
}

AUDIT_ACTIONS = {
    "TOGGLE_ACCESS": "toggle_access",
    "TOGGLE_ORDER_CREATION": "toggle_order_creation",
    "ASSIGN_PLAN": "assign_plan",
    "CREATE_PLAN": "create_plan",
    "UPDATE_PLAN": "update_plan",
    "SEED_PLANS": "seed_plans",
}

# quotas at or above this value are shown as "Unlimited"
UNLIMITED_QUOTA = 999999
