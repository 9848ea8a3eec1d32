"""Shared constants used across the application."""

# Session cookies
ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

# Ephemeral store key prefixes
VERIFY_KEY_PREFIX = "verify:"
VERIFY_EMAIL_KEY_PREFIX = "verify-email:"
OTP_KEY_PREFIX = "otp:"
REFRESH_TOKEN_KEY_PREFIX = "refresh_token:"

OTP_LENGTH = 6

# Default moderation messages
DEFAULT_AGENT_REJECTION_REASON = "Your application does not meet our requirements."
DEFAULT_PROPERTY_REJECTION_REASON = "Your listing does not meet our guidelines."

APP_NAME = "Real Estate Pro"
