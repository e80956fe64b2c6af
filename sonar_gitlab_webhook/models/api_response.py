"""API response data models."""

from pydantic import BaseModel


class WebhookResponse(BaseModel):
    """Response from webhook handler."""

    status: str  # 'suppressed', 'incomplete', 'posted', 'failed'
    message: str
