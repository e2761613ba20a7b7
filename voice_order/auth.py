"""
Authentication Module for Voice Order
=====================================

This module provides the request identity dependencies for the voice order
endpoints.

Authentication Methods:
-----------------------
1. **Customer identity (X-User-ID)**: Customer endpoints trust the user id
   forwarded by the API gateway in the `X-User-ID` header. Token issuance
   and verification happen upstream; a request without the header is
   rejected with 401.

2. **Device identity (X-Device-ID)**: The offline sync endpoint requires the
   id of the device whose queue is being replayed.

3. **HTTP Basic Auth (Merchant)**: Used by the merchant status progression
   endpoint. Credentials are configured via environment variables
   (MERCHANT_USERNAME, MERCHANT_PASSWORD) and compared in constant time.

Graceful Degradation:
---------------------
If MERCHANT_PASSWORD is not configured, merchant endpoints return
503 Service Unavailable rather than allowing unauthenticated access.

Usage:
------
    from voice_order.auth import get_current_user_id, verify_merchant_credentials

    @router.get("/orders")
    def list_orders(
        user_id: str = Depends(get_current_user_id),
        db: Session = Depends(get_db),
    ):
        ...
"""

import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from . import config


# =============================================================================
# HTTP Basic Auth Setup
# =============================================================================

security = HTTPBasic(realm="Voice Order Merchant")


# =============================================================================
# Merchant Authentication Dependency
# =============================================================================

def verify_merchant_credentials(
    credentials: HTTPBasicCredentials = Depends(security),
) -> str:
    """
    Verify HTTP Basic Auth credentials for merchant endpoints.

    Returns:
        str: The authenticated username if credentials are valid.

    Raises:
        HTTPException (503): If MERCHANT_PASSWORD is not set.
        HTTPException (401): If credentials are invalid. Includes a
                            WWW-Authenticate header.
    """
    # Fail closed: if password not configured, deny all access
    if not config.MERCHANT_PASSWORD:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Merchant authentication not configured. Set MERCHANT_PASSWORD environment variable.",
        )

    username_correct = secrets.compare_digest(
        credentials.username.encode("utf-8"),
        config.MERCHANT_USERNAME.encode("utf-8"),
    )
    password_correct = secrets.compare_digest(
        credentials.password.encode("utf-8"),
        config.MERCHANT_PASSWORD.encode("utf-8"),
    )

    if not (username_correct and password_correct):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid merchant credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# =============================================================================
# Customer / Device Identity Dependencies
# =============================================================================

def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """The authenticated customer, as forwarded by the gateway."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return x_user_id.strip()


def get_device_id(x_device_id: Optional[str] = Header(None)) -> str:
    if not x_device_id or not x_device_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Device ID is required",
        )
    return x_device_id.strip()
