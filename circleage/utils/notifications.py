import logging
import re
from typing import Any, Dict

import aiohttp

from circleage.config import Settings, settings
from circleage.models.emergency import AlertRequest, EmergencyContact

logger = logging.getLogger(__name__)

class SMSDeliveryError(Exception):
    """Raised when the SMS provider rejects a message"""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status

class TwilioClient:
    """Minimal Twilio Messages API client"""

    def __init__(self, account_sid: str, auth_token: str, api_url: str, timeout: int = 30):
        self.account_sid = account_sid
        self.auth = aiohttp.BasicAuth(account_sid, auth_token)
        self.messages_url = f"{api_url}/Accounts/{account_sid}/Messages.json"
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def send(self, body: str, from_: str, to: str) -> Dict[str, Any]:
        """
        Send a single SMS

        Returns the provider's message resource (sid, status, ...)
        Raises SMSDeliveryError on any non-2xx response
        """
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(
                self.messages_url,
                data={"Body": body, "From": from_, "To": to},
                auth=self.auth
            ) as response:
                response_data = await response.json(content_type=None)

                if response.status >= 400:
                    raise SMSDeliveryError(
                        response_data.get("message", f"SMS API error: {response.status}"),
                        status=response.status
                    )
                return response_data

def format_phone_number(phone_number: str) -> str:
    """Format phone number to international format (Singapore)"""
    cleaned = re.sub(r"\D", "", phone_number)

    if len(cleaned) == 8:
        # Local number, including landlines starting with 65
        return "+65" + cleaned
    # Anything longer already carries a country code
    return "+" + cleaned

def is_valid_phone_number(phone_number: str) -> bool:
    """Check for an 8 digit local number or one prefixed with 65"""
    cleaned = re.sub(r"\D", "", phone_number)
    return bool(
        re.fullmatch(r"[689]\d{7}", cleaned) or
        re.fullmatch(r"65[689]\d{7}", cleaned)
    )

def _mask(phone_number: str) -> str:
    return f"{phone_number[:5]}****"

class SMSService:
    """SMS alerts for emergency contacts, simulated when Twilio is not configured"""

    def __init__(self, config: Settings = settings, client: TwilioClient = None):
        self.app_name = config.APP_NAME
        self.from_number = config.TWILIO_PHONE_NUMBER
        self.simulated = not config.sms_configured

        if self.simulated:
            logger.warning("Twilio credentials not configured. SMS service will run in simulated mode.")
            self.client = None
        else:
            self.client = client or TwilioClient(
                config.TWILIO_ACCOUNT_SID,
                config.TWILIO_AUTH_TOKEN,
                config.TWILIO_API_URL,
                timeout=config.HTTP_TIMEOUT_SECONDS
            )

    def format_alert_message(self, alert_data: AlertRequest) -> str:
        return f"{self.app_name} Alert: {alert_data.message}. Contact your family member immediately if needed."

    async def send_sms_alert(self, contact: EmergencyContact, alert_data: AlertRequest) -> Dict[str, Any]:
        """
        Send an alert SMS to one emergency contact

        Provider errors are not caught here; the caller decides how a failed
        contact is recorded.
        """
        message = self.format_alert_message(alert_data)

        if self.simulated:
            logger.info(f"[SIMULATED SMS] To: {_mask(contact.phone_number)}, Message: {message}")
            return {
                "success": True,
                "simulated": True,
                "to": contact.phone_number,
                "message": f"SMS would be sent to {contact.name}: {message}"
            }

        to_number = format_phone_number(contact.phone_number)
        result = await self.client.send(body=message, from_=self.from_number, to=to_number)
        logger.info(f"SMS sent successfully to {_mask(to_number)}")

        return {
            "success": True,
            "simulated": False,
            "sid": result.get("sid"),
            "status": result.get("status")
        }
