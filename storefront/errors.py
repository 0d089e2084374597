"""
Common Error Constants

Centralized error messages returned in CartResult.error and used in logs.
"""

# Candidate validation
ERROR_INVALID_ITEM = "Invalid cart item"

# Persistence
ERROR_SNAPSHOT_WRITE = "Cart could not be saved"
ERROR_SNAPSHOT_CORRUPTED = "Stored cart was unreadable and has been reset"

# Configuration
ERROR_UNKNOWN_BACKEND = "Unknown cart storage backend"
ERROR_REDIS_NOT_CONFIGURED = "UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set"
