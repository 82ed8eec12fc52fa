"""
orderdesk/utils/constants.py

Purpose: Centralized static content

- All user-facing notification titles and messages
- Resource cache keys
- Canonical storage and navigation values

(Prevents hardcoding across the codebase)
"""

# ============================================================
# NOTIFICATION TITLES & VARIANTS
# ============================================================

VARIANT_DEFAULT = "default"
VARIANT_DESTRUCTIVE = "destructive"

TITLE_SUCCESS = "Success"
TITLE_ERROR = "Error"

# ============================================================
# API GATEWAY RESPONSE POLICY
# ============================================================

SESSION_EXPIRED_TITLE = "Session Expired"
SESSION_EXPIRED_MESSAGE = "Please log in again"

ACCESS_DENIED_TITLE = "Access Denied"
ACCESS_DENIED_MESSAGE = "You do not have permission to perform this action"

RATE_LIMITED_TITLE = "Too Many Requests"
RATE_LIMITED_MESSAGE = "Please wait before trying again"

SERVER_ERROR_TITLE = "Server Error"
SERVER_ERROR_MESSAGE = "Something went wrong. Please try again later."

NETWORK_ERROR_TITLE = "Network Error"
NETWORK_ERROR_MESSAGE = "Unable to reach the server. Please check your connection."
TIMEOUT_MESSAGE = "The server is taking too long to respond. Please try again."
INVALID_RESPONSE_MESSAGE = "Invalid response from server"

# ============================================================
# AUTHENTICATION
# ============================================================

LOGIN_SUCCESS_MESSAGE = "Login successful!"
LOGIN_FAILED_MESSAGE = "Login failed"
LOGIN_NO_TOKEN_MESSAGE = "Login failed: no token returned"
LOGIN_PROFILE_FAILED_MESSAGE = "Login successful but failed to fetch user details"
LOGOUT_SUCCESS_MESSAGE = "Logged out successfully"

ACCESS_DENIED_PAGE_TITLE = "Access Denied"
ACCESS_DENIED_PAGE_MESSAGE = "You don't have permission to access this page."

# ============================================================
# RESOURCE CACHE KEYS
# ============================================================

ORDERS_KEY = "orders"
PRODUCTS_KEY = "products"
TASKS_KEY = "tasks"
USERS_KEY = "users"
FOLLOW_UPS_KEY = "followUps"

# ============================================================
# SMS
# ============================================================

SMS_SENT_MESSAGE = "SMS sent to {count} numbers"
SMS_SEND_FAILED_MESSAGE = "Failed to send SMS"
SMS_BALANCE_FAILED_MESSAGE = "Failed to fetch SMS balance"
SMS_MISSING_INPUT_MESSAGE = "Please enter a message and select at least one number"
SMS_IMPORTED_MESSAGE = "Imported {count} new numbers"

# ============================================================
# VALIDATION
# ============================================================

VALIDATION_FAILED_MESSAGE = "Please correct the highlighted fields"

PHONE_REGEX = r"^(\+88)?01[3-9]\d{8}$"
NAME_REGEX = r"^[a-zA-Z\s.'-]+$"
EMAIL_REGEX = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
PASSWORD_REGEX = r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]"

ORDER_CSV_HEADER = ["Order ID", "Customer Name", "Mobile", "Product", "Quantity", "Total Amount", "Status", "Date"]

# ============================================================
# RESOURCE MUTATIONS
# ============================================================

MUTATION_SUCCESS_MESSAGE = "{resource} {action} successfully"
MUTATION_FAILED_MESSAGE = "Failed to {verb} {resource}"

MUTATION_PAST_TENSE = {
    "create": "created",
    "update": "updated",
    "delete": "deleted",
    "dispatch": "dispatched",
}
