import httpx
import logging
from typing import Optional
from digital_menu.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

VERIFICATION_EMAIL_SUBJECT = "Your Verification Code - Digital Menu"

VERIFICATION_EMAIL_TEMPLATE = """\
<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"></head>
  <body style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="margin: 0;">Digital Menu Management</h1>
    <h2>Your Verification Code</h2>
    <p>Use the following code to verify your email and access your account:</p>
    <div style="font-size: 36px; font-weight: bold; letter-spacing: 8px; font-family: 'Courier New', monospace;">
      {code}
    </div>
    <p style="color: #666; font-size: 14px;">This code will expire in {ttl_minutes} minutes.</p>
    <p style="color: #666; font-size: 14px;">If you didn't request this code, please ignore this email.</p>
  </body>
</html>
"""


class EmailService:
    """Service for sending verification emails through the Resend HTTP API"""

    def __init__(self, config: Optional[Settings] = None):
        self.settings = config or default_settings

    @property
    def dispatch_enabled(self) -> bool:
        return self.settings.SEND_VERIFICATION_CODE and bool(self.settings.RESEND_API_KEY)

    async def send_verification_code(self, email: str, code: str) -> dict:
        """
        Send a verification code by email

        Args:
            email: Recipient address
            code: 6-digit verification code

        Returns:
            dict with 'success' key, 'dev_mode' when the code was not sent
            and must be disclosed to the caller, and 'error' on failure
        """
        # Development mode: skip the email and just log
        if not self.settings.SEND_VERIFICATION_CODE:
            logger.info(f"DEV MODE: Verification code for {email}: {code}")
            return {"success": True, "dev_mode": True}

        if not self.settings.RESEND_API_KEY:
            logger.warning(f"RESEND_API_KEY not set, not emailing. Verification code for {email}: {code}")
            return {"success": True, "dev_mode": True}

        html = VERIFICATION_EMAIL_TEMPLATE.format(
            code=code,
            ttl_minutes=self.settings.VERIFICATION_CODE_TTL_MINUTES,
        )

        try:
            async with httpx.AsyncClient(timeout=self.settings.EMAIL_TIMEOUT_SECONDS) as client:
                response = await client.post(
                    self.settings.RESEND_API_URL,
                    headers={"Authorization": f"Bearer {self.settings.RESEND_API_KEY}"},
                    json={
                        "from": self.settings.RESEND_FROM_EMAIL,
                        "to": [email],
                        "subject": VERIFICATION_EMAIL_SUBJECT,
                        "html": html,
                    }
                )

                if response.status_code in (200, 201):
                    logger.info(f"Verification code sent successfully to {email}")
                    return {"success": True}
                else:
                    error_msg = f"Failed to send email: {response.status_code}"
                    logger.error(f"{error_msg} - {response.text}")
                    return {"success": False, "error": error_msg}

        except httpx.TimeoutException:
            error_msg = "Timeout while sending verification email"
            logger.error(error_msg)
            return {"success": False, "error": error_msg}
        except httpx.HTTPError as e:
            error_msg = f"Error sending verification email: {str(e)}"
            logger.error(error_msg, exc_info=True)
            return {"success": False, "error": error_msg}
