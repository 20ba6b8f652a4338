"""
Security utilities and configuration management.
Reads session-token, CORS, header and upload settings from the environment.
"""
import os
import secrets
import string
from typing import List, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

WEAK_SECRETS = ["super-secret-key", "secret", "password", "key", "hello_world"]

class SecurityConfig:
    """Centralized security configuration with validation."""

    def __init__(self):
        self.session_secret_key = self._get_or_generate_session_secret()
        self.session_algorithm = os.getenv("SESSION_ALGORITHM", "HS256")
        self.session_token_expire_minutes = int(os.getenv("SESSION_TOKEN_EXPIRE_MINUTES", "1440"))
        self.session_cookie_name = os.getenv("SESSION_COOKIE_NAME", "session")

        # Cross-origin access for the browser client
        self.cors_origins = self._parse_list(os.getenv("CORS_ORIGINS", "http://localhost:3000"))

        # Security headers
        self.enable_security_headers = os.getenv("ENABLE_SECURITY_HEADERS", "true").lower() == "true"

        # Upload admission
        self.upload_dir = os.getenv("UPLOAD_DIR", os.path.join(os.getcwd(), "public", "images"))
        self.max_upload_size = int(os.getenv("MAX_UPLOAD_SIZE", str(5 * 1024 * 1024)))

        self._validate_config()

    def _get_or_generate_session_secret(self) -> str:
        """
        Get the session signing secret from the environment or generate one.
        A generated secret invalidates every session on restart.
        """
        secret = os.getenv("SESSION_SECRET_KEY")

        if not secret:
            logger.warning("SESSION_SECRET_KEY not found in environment. Generating secure random secret.")
            secret = self._generate_secure_secret()

        elif len(secret) < 32:
            logger.error("SESSION_SECRET_KEY is too short! Must be at least 32 characters.")
            raise ValueError("SESSION_SECRET_KEY must be at least 32 characters long")

        elif secret in WEAK_SECRETS:
            logger.error("SESSION_SECRET_KEY appears to be a default/weak value!")
            raise ValueError("SESSION_SECRET_KEY cannot be a default or weak value")

        return secret

    def _generate_secure_secret(self, length: int = 64) -> str:
        alphabet = string.ascii_letters + string.digits + "!@#$%^&*()_+-="
        return ''.join(secrets.choice(alphabet) for _ in range(length))

    @staticmethod
    def _parse_list(value: str) -> List[str]:
        return [item.strip() for item in value.split(",") if item.strip()]

    def _validate_config(self):
        """Reject unusable values and warn about questionable ones."""
        if self.session_algorithm not in ["HS256", "HS384", "HS512"]:
            raise ValueError(f"Unsupported session token algorithm: {self.session_algorithm}")

        if self.max_upload_size <= 0:
            raise ValueError("MAX_UPLOAD_SIZE must be a positive number of bytes")

        issues = []
        if self.session_token_expire_minutes > 7 * 24 * 60:
            issues.append("Session token lifetime longer than 7 days")

        if "*" in self.cors_origins:
            issues.append("CORS allows any origin while credentials are enabled")

        if issues:
            logger.warning("Security configuration issues detected:")
            for issue in issues:
                logger.warning(f"  - {issue}")

class SecurityUtils:
    """Security utility functions."""

    @staticmethod
    def get_client_ip(request) -> str:
        """Extract client IP address handling proxies and load balancers."""
        forwarded_ips = request.headers.get("X-Forwarded-For")
        if forwarded_ips:
            # Take the first IP (original client)
            return forwarded_ips.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"

    @staticmethod
    def log_security_event(event_type: str, details: dict, user_id: Optional[str] = None,
                          client_ip: Optional[str] = None):
        """Log security events for monitoring and analysis."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "user_id": user_id,
            "client_ip": client_ip,
            "details": details
        }

        logger.info(f"SECURITY_EVENT: {log_entry}")

# Global security configuration instance
security_config = SecurityConfig()
