"""Forwarding of login, registration, OTP and password requests."""

from dataclasses import dataclass
from typing import Optional

from common.constants import (
    LOGIN_ENDPOINT,
    MIN_PASSWORD_LENGTH,
    PASSWORD_ENDPOINT,
    REGISTER_ENDPOINT,
    RESEND_OTP_ENDPOINT,
    VERIFY_OTP_ENDPOINT,
)
from common.logging_config import get_logger
from common.types import Identity
from engine.api_client import ApiClient, identity_header, is_success
from engine.errors import (
    FileSessionError,
    MalformedResponseError,
    PreconditionError,
    ServerError,
)
from engine.result import Result
from engine.schemas import LoginResponse, MessageResponse, parse_model

logger = get_logger(__name__)


@dataclass(frozen=True)
class UserSession:
    """Identity and profile returned by a successful login."""
    identity: Identity
    username: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""


class AuthClient:
    """
    Posts credentials to the auth endpoints and reports the outcome.

    Credentials are only checked for presence before sending; the server
    decides everything else.
    """

    def __init__(self, api: ApiClient):
        self.api = api

    async def _post(self, endpoint: str, payload: dict, headers: Optional[dict] = None) -> dict:
        response = await self.api.request('POST', endpoint, json=payload, headers=headers)
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Server returned a non-JSON response. Status: {response.status_code}"
            ) from e
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"Server returned an unexpected response. Status: {response.status_code}"
            )
        if not is_success(response):
            raise ServerError(data.get('error') or 'Unknown server error', response.status_code)
        return data

    async def login(self, email: str, password: str) -> Result[UserSession]:
        """
        Log in with email and password.

        Returns:
            Result with the UserSession to store in the session store
        """
        if not email or not password:
            return Result.failure(PreconditionError("Please fill in all fields."))

        logger.info(f"Attempting to login user: {email}")
        try:
            data = await self._post(LOGIN_ENDPOINT, {'email': email, 'password': password})
            payload = parse_model(LoginResponse, data)
        except FileSessionError as e:
            logger.warning(f"Login failed for user: {email}: {e}")
            return Result.failure(e)

        logger.info(f"Login successful for user: {email} [user_id={payload.user_id}]")
        return Result.success(UserSession(
            identity=Identity(user_id=payload.user_id, is_admin=payload.is_admin),
            username=payload.username,
            email=payload.email,
            first_name=payload.first_name,
            last_name=payload.last_name,
        ))

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        confirm_password: str,
        first_name: str,
        last_name: str,
    ) -> Result[str]:
        """Create an account; the server then emails an OTP."""
        if not all((username, email, password, confirm_password, first_name, last_name)):
            return Result.failure(PreconditionError("Please fill in all fields."))
        if password != confirm_password:
            return Result.failure(PreconditionError("Passwords do not match."))

        logger.info(f"Attempting to register user: {username}")
        try:
            data = await self._post(REGISTER_ENDPOINT, {
                'username': username,
                'email': email,
                'password': password,
                'first_name': first_name,
                'last_name': last_name,
            })
        except FileSessionError as e:
            logger.warning(f"Registration failed for user: {username}: {e}")
            return Result.failure(e)

        message = parse_model(MessageResponse, data).message
        return Result.success(message or "Registration successful! Please check your email for the OTP.")

    async def verify_otp(self, email: str, otp: str) -> Result[str]:
        """Confirm an email address with the emailed code."""
        if not email or not otp:
            return Result.failure(PreconditionError("Email or OTP is missing."))
        try:
            await self._post(VERIFY_OTP_ENDPOINT, {'email': email, 'otp': otp})
        except FileSessionError as e:
            logger.warning(f"OTP verification failed for {email}: {e}")
            return Result.failure(e)
        return Result.success("Email verified successfully! You can now log in.")

    async def resend_otp(self, email: str) -> Result[str]:
        """Ask the server to email a fresh code."""
        if not email:
            return Result.failure(PreconditionError("Email is missing. Cannot resend OTP."))
        try:
            await self._post(RESEND_OTP_ENDPOINT, {'email': email})
        except FileSessionError as e:
            logger.warning(f"OTP resend failed for {email}: {e}")
            return Result.failure(e)
        return Result.success("A new OTP has been sent to your email.")

    async def update_password(
        self,
        identity: Optional[Identity],
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> Result[str]:
        """Change the caller's password."""
        if not current_password or not new_password or not confirm_password:
            return Result.failure(PreconditionError("All password fields are required."))
        if new_password != confirm_password:
            return Result.failure(
                PreconditionError("New password and confirm new password do not match.")
            )
        if len(new_password) < MIN_PASSWORD_LENGTH:
            return Result.failure(PreconditionError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters long."
            ))
        if identity is None:
            return Result.failure(PreconditionError("User ID not found. Please log in."))

        try:
            data = await self._post(
                PASSWORD_ENDPOINT,
                {'current_password': current_password, 'new_password': new_password},
                headers=identity_header(identity),
            )
        except FileSessionError as e:
            logger.warning(f"Password update failed: {e}")
            return Result.failure(e)

        message = parse_model(MessageResponse, data).message
        return Result.success(message or "Password updated successfully!")
