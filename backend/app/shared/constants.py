"""
Shared constants.

Strava endpoints and webhook vocabulary used across features.
"""

# =============================================================================
# Strava API
# =============================================================================

STRAVA_API_URL = "https://www.strava.com/api/v3"
STRAVA_OAUTH_TOKEN_URL = "https://www.strava.com/oauth/token"

# Activity type that counts as a run (exact match on the "type" field)
RUN_ACTIVITY_TYPE = "Run"

# Webhook object type for activity events
WEBHOOK_OBJECT_ACTIVITY = "activity"

# Webhook aspect types
ASPECT_CREATE = "create"
ASPECT_UPDATE = "update"
ASPECT_DELETE = "delete"
