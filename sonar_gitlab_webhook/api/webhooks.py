"""
Webhook endpoint for SonarQube quality gate notifications.
"""

import hashlib
import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from sonar_gitlab_webhook.config import settings
from sonar_gitlab_webhook.models.api_response import WebhookResponse
from sonar_gitlab_webhook.models.routing import Incomplete, Suppressed
from sonar_gitlab_webhook.services.comment_publisher import (
    CommentPublisher,
    PublishError,
    get_comment_publisher,
)
from sonar_gitlab_webhook.services.interpreter import (
    NotificationParseError,
    decide,
    parse_notification,
)
from sonar_gitlab_webhook.utils.logging import get_logger, log_error_with_context, log_notification

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])


def verify_webhook_signature(payload: bytes, signature: Optional[str], secret: str) -> bool:
    """
    Verify the SonarQube webhook signature.

    Args:
        payload: Raw request payload
        signature: Hex HMAC-SHA256 from the X-Sonar-Webhook-HMAC-SHA256 header
        secret: Secret configured on the SonarQube webhook

    Returns:
        True if signature is valid, False otherwise
    """
    if not signature:
        return False

    expected_signature = hmac.new(
        secret.encode(),
        payload,
        hashlib.sha256
    ).hexdigest()

    return hmac.compare_digest(signature, expected_signature)


@router.post("/webhook", response_model=WebhookResponse)
async def handle_quality_gate_webhook(
    request: Request,
    publisher: CommentPublisher = Depends(get_comment_publisher),
    x_sonar_signature: Optional[str] = Header(None, alias="X-Sonar-Webhook-HMAC-SHA256"),
) -> WebhookResponse:
    """
    Receive a SonarQube quality gate notification and relay it to GitLab.

    This endpoint:
    1. Validates the webhook signature when a secret is configured
    2. Parses the notification payload
    3. Skips main branch analyses and notifications without routing properties
    4. Posts the quality gate comment to the commit or merge request

    A failed GitLab call is logged and still answered with 200 OK, the
    notification having been accepted.

    Args:
        request: FastAPI request object
        publisher: Comment publisher for GitLab
        x_sonar_signature: Webhook signature header

    Returns:
        WebhookResponse with status and message

    Raises:
        HTTPException: If the signature is invalid or the payload is malformed
    """
    try:
        payload = await request.body()

        if settings.webhook_secret and not verify_webhook_signature(
            payload, x_sonar_signature, settings.webhook_secret
        ):
            logger.warning("Invalid webhook signature received")
            raise HTTPException(status_code=401, detail="Invalid webhook signature")

        try:
            notification = parse_notification(payload)
        except NotificationParseError as e:
            logger.warning(f"Rejected webhook payload: {e}")
            raise HTTPException(status_code=400, detail="Failed to parse JSON")

        log_notification(
            logger,
            project_key=notification.project.key,
            task_id=notification.task_id,
            branch=notification.branch.name,
            quality_gate_status=notification.quality_gate.status,
        )
        request_logger = logger.with_context(
            project_key=notification.project.key,
            task_id=notification.task_id,
        )

        decision = decide(notification, settings.property_prefix)

        if isinstance(decision, Suppressed):
            request_logger.info(decision.reason)
            return WebhookResponse(status="suppressed", message=decision.reason)

        if isinstance(decision, Incomplete):
            request_logger.info(decision.reason)
            return WebhookResponse(status="incomplete", message=decision.reason)

        target = decision.target.describe()
        try:
            await publisher.publish(decision.target, decision.comment_input)
        except PublishError as e:
            request_logger.error(
                f"Failed to post comment on {target}: {e.detail}",
                extra={"target": target, "status_code": e.status_code},
            )
            return WebhookResponse(status="failed", message=f"Failed to post comment on {target}")

        request_logger.info("Comment posted successfully", extra={"target": target})
        return WebhookResponse(status="posted", message=f"Comment posted on {target}")

    except HTTPException:
        raise
    except Exception as e:
        log_error_with_context(logger, f"Error handling webhook: {e}", e)
        raise HTTPException(status_code=500, detail="Internal server error processing webhook")
