"""
Account management for Vision Assist, backed by Supabase auth
"""
import logging
import threading

from supabase import AuthError

from .. import config

INVALID_CREDENTIALS = "Invalid login credentials"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password. Please try again."
PASSWORD_MISMATCH_MESSAGE = "Passwords do not match"
SIGN_UP_SUCCESS_MESSAGE = "Account created successfully! You can now log in."
RESET_SUCCESS_MESSAGE = "Password reset instructions have been sent to your email."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


class AuthenticationError(Exception):
    """An auth failure with a message fit to show in the form"""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


def _error_message(error):
    return getattr(error, 'message', None) or str(error)


class AuthService:
    def __init__(self, client):
        self.logger = logging.getLogger("AuthService")
        self.client = client
        self.current_user = None
        self._lock = threading.Lock()

        # Keep the session in sync with the backend
        self.subscription = self.client.auth.on_auth_state_change(self._on_auth_state_change)

        session = self.client.auth.get_session()
        self._set_session(session)

    def _on_auth_state_change(self, event, session):
        self.logger.info(f"Auth state changed: {event}")
        self._set_session(session)

    def _set_session(self, session):
        user = getattr(session, 'user', None) if session else None
        with self._lock:
            if user is None:
                self.current_user = None
            else:
                self.current_user = {'id': str(user.id), 'email': user.email}

    @property
    def is_authenticated(self):
        return self.current_user is not None

    @property
    def user_id(self):
        user = self.current_user
        return user['id'] if user else None

    def sign_in(self, email, password):
        try:
            response = self.client.auth.sign_in_with_password({
                'email': email,
                'password': password,
            })
        except AuthError as e:
            message = _error_message(e)
            self.logger.warning(f"Sign in failed for {email}: {message}")
            if message == INVALID_CREDENTIALS:
                raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE) from e
            raise AuthenticationError(message) from e
        except Exception as e:
            self.logger.exception("Unexpected error during sign in")
            raise AuthenticationError(UNEXPECTED_ERROR_MESSAGE) from e

        self._set_session(response.session)
        return self.current_user

    def sign_up(self, email, password, confirm_password):
        if password != confirm_password:
            raise AuthenticationError(PASSWORD_MISMATCH_MESSAGE)

        try:
            self.client.auth.sign_up({
                'email': email,
                'password': password,
            })
        except AuthError as e:
            self.logger.warning(f"Sign up failed for {email}: {_error_message(e)}")
            raise AuthenticationError(_error_message(e)) from e
        except Exception as e:
            self.logger.exception("Unexpected error during sign up")
            raise AuthenticationError(UNEXPECTED_ERROR_MESSAGE) from e

        return SIGN_UP_SUCCESS_MESSAGE

    def reset_password(self, email, redirect_to=None):
        redirect_to = redirect_to or config.PASSWORD_RESET_REDIRECT
        try:
            self.client.auth.reset_password_for_email(email, {'redirect_to': redirect_to})
        except AuthError as e:
            self.logger.warning(f"Password reset failed for {email}: {_error_message(e)}")
            raise AuthenticationError(_error_message(e)) from e
        except Exception as e:
            self.logger.exception("Unexpected error during password reset")
            raise AuthenticationError(UNEXPECTED_ERROR_MESSAGE) from e

        return RESET_SUCCESS_MESSAGE

    def sign_out(self):
        try:
            self.client.auth.sign_out()
        finally:
            self._set_session(None)

    def close(self):
        """Stop listening for session changes"""
        if self.subscription is not None:
            self.subscription.unsubscribe()
            self.subscription = None
